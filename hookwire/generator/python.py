"""Python code generator for middleware wrappers."""

import textwrap
from importlib import resources

from jinja2 import Environment, PackageLoader

from .types import ImportStmt, Rpc, Service

RUNTIME_FILES = [
    "__init__.py",
    "middleware.py",
    "result.py",
    "status.py",
]

BODY_INDENT = " " * 8

env = Environment(
    loader=PackageLoader("hookwire.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")


def _field_name(index: int) -> str:
    """Wrapper attribute holding the registry entry at ``index``."""
    return f"md_{index}"


def _context_name(position: int) -> str:
    """Local variable holding the context of the middleware at ``position`` in an rpc."""
    return f"ctx_{position}"


def _env_tuple(rpc: Rpc) -> str:
    names = [_context_name(position) for position in range(len(rpc.local_middlewares))]
    if len(names) == 1:
        return f"({names[0]},)"
    return f"({', '.join(names)})"


def _impl_name(rpc: Rpc) -> str:
    """Private implementor method holding the retained body of ``rpc``."""
    return f"_{rpc.name}_impl"


def _params(rpc: Rpc) -> str:
    return ", ".join(str(param) for param in rpc.params)


def _bases(service: Service) -> str:
    if not service.bases:
        return ""
    return f"({', '.join(base.canonical for base in service.bases)})"


def _constructor_args(service: Service) -> str:
    return ", ".join(["self"] + [_field_name(index) for index in range(len(service.registry))])


def _indent_body(body: str) -> str:
    if not body.strip():
        return f"{BODY_INDENT}pass"
    return textwrap.indent(body, BODY_INDENT)


def render(
    imports: list[ImportStmt],
    services: list[Service],
    runtime_import: str = "hookwire_runtime",
) -> str:
    """Render service models to Python source code."""
    return template.render(
        imports=imports,
        services=services,
        field_name=_field_name,
        context_name=_context_name,
        env_tuple=_env_tuple,
        impl_name=_impl_name,
        params=_params,
        bases=_bases,
        constructor_args=_constructor_args,
        indent_body=_indent_body,
        runtime_import=runtime_import,
        BLANK_LINE="",
    )


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("hookwire.runtime").joinpath(filename).read_text()
        result[filename] = content
    return result
