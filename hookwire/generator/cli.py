"""Command-line interface for hookwire code generation."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hookwire.generator import build_service, parse, python
from hookwire.generator.errors import GenerationError

if TYPE_CHECKING:
    from hookwire.generator.types import ImportStmt, Service


def _load(input_file: str) -> tuple[list[ImportStmt], list[Service]]:
    """Parse and analyze a definition file, exiting with a diagnostic on failure."""
    with open(input_file, encoding="utf-8") as f:
        text = f.read()

    try:
        imports, impls = parse(text)
        return imports, [build_service(impl) for impl in impls]
    except GenerationError as exc:
        _report(input_file, exc)
        sys.exit(1)


def _report(input_file: str, exc: GenerationError) -> None:
    """Print a generation error as a compiler-style diagnostic."""
    console = Console(stderr=True, highlight=False)

    location = input_file
    if exc.span is not None and exc.span.line is not None and exc.span.line > 0:
        location = f"{input_file}:{exc.span.line}:{exc.span.column}"

    console.print(
        f"[bold]{escape(location)}:[/bold] [bold red]error:[/bold red] {escape(exc.message)}",
        soft_wrap=True,
    )
    if exc.help:
        console.print(f"  [dim]{escape(exc.help)}[/dim]", soft_wrap=True)


@click.group()
def cli() -> None:
    """hookwire middleware wrapper generator."""


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input service definition file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    is_flag=False,
    flag_value="hookwire.runtime",
    default=None,
    help="Import path for runtime. No value=hookwire.runtime, omit=hookwire_runtime",
)
def gen(input_file: str, output_file: str, runtime_import: str | None) -> None:
    """Generate middleware wrappers from a definition file."""
    imports, services = _load(input_file)

    # Default to "hookwire_runtime" (a copied runtime folder) if not specified
    import_path = runtime_import if runtime_import is not None else "hookwire_runtime"
    generated_file = python.render(imports, services, runtime_import=import_path)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="hookwire_runtime", help="Runtime folder name")
def runtime(output_path: str, name: str) -> None:
    """Generate runtime support code."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content)
    print(f"Generated Python runtime in {runtime_dir}")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input service definition file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display services, middleware registries and hook order."""
    _imports, services = _load(input_file)

    if output_json:
        _output_json(services)
    else:
        _output_plain(services)


def _output_json(services: list[Service]) -> None:
    """Output service info as JSON."""
    data: dict = {"services": {}}

    for service in services:
        data["services"][service.implementor_type] = {
            "wrapper": service.wrapper_name,
            "interface": service.args.service_interface_name,
            "server": service.args.server_wrapper_name,
            "registry": [middleware.path for middleware in service.registry],
            "methods": {
                rpc.name: {
                    "request": rpc.request_type.canonical,
                    "response": rpc.response_type.canonical,
                    "error": rpc.error_type.canonical,
                    "middlewares": [middleware.path for middleware in rpc.local_middlewares],
                    "indices": rpc.global_indices,
                }
                for rpc in service.methods
            },
            "model": service.to_dict(),
        }

    print(json.dumps(data, indent=2))


def _output_plain(services: list[Service]) -> None:
    """Output service info using rich text formatting."""
    console = Console()

    if not services:
        console.print("[dim]No impl blocks found[/dim]")
        return

    for service in services:
        console.print(f"[bold cyan]{service.implementor_type}[/bold cyan]")

        service_table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
        service_table.add_column("Label", style="dim")
        service_table.add_column("Value", style="white")
        service_table.add_row("Wrapper", escape(service.wrapper_name))
        service_table.add_row("Interface", service.args.service_interface_name)
        service_table.add_row("Server", service.args.server_wrapper_name)
        console.print(service_table)
        console.print()

        # Registry order is the wrapper attribute and constructor parameter order
        console.print("[bold cyan]Registry[/bold cyan]")
        registry_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        registry_table.add_column("Index", style="green", justify="right")
        registry_table.add_column("Middleware", style="white")
        for index, middleware in enumerate(service.registry):
            registry_table.add_row(str(index), escape(middleware.path))
        console.print(registry_table)
        console.print()

        console.print("[bold cyan]Methods[/bold cyan]")
        method_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        method_table.add_column("Name", style="white")
        method_table.add_column("Request", style="yellow")
        method_table.add_column("Response", style="yellow")
        method_table.add_column("Hooks", style="dim")
        for rpc in service.methods:
            hooks = ", ".join(
                f"{escape(middleware.path)} ({index})"
                for middleware, index in zip(rpc.local_middlewares, rpc.global_indices)
            )
            method_table.add_row(
                rpc.name,
                escape(rpc.request_type.canonical),
                escape(rpc.response_type.canonical),
                hooks or "-",
            )
        console.print(method_table)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
