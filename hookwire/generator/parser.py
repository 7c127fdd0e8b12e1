"""Service definition parser using Lark."""

import os
import re
import textwrap
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark, Token
from lark.exceptions import UnexpectedInput, VisitError
from lark.visitors import Transformer, v_args

from .errors import GenerationError, ParseError, ValidationError
from .types import (
    Annotation,
    AnnotationArg,
    ArgKind,
    ImplDef,
    ImportStmt,
    MethodDef,
    Param,
    Span,
    TypeRef,
)

_g_parser: Lark | None = None

BODY_FENCE = "```"

# Names the generated wrapper class keeps for itself.
RESERVED_RPC_NAMES = re.compile(r"__.*|service_impl|md_\d+")


@dataclass
class _Path:
    value: str
    span: Span


@dataclass
class _Arguments:
    values: list[AnnotationArg]


@dataclass
class _Bases:
    values: list[TypeRef]


@dataclass
class _ReturnType:
    value: TypeRef


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")

    if hasattr(filtered[0], "value"):
        return filtered[0].value
    return filtered[0]


TMany = TypeVar("TMany")


def _find_many(args: list[Any], class_type: type[TMany]) -> list[TMany]:
    return _filter(args, class_type)


def _find_token(args: list[Any], token_type: str) -> Token:
    return next(v for v in args if isinstance(v, Token) and v.type == token_type)


def _span(meta: Any) -> Span:
    return Span(line=getattr(meta, "line", None), column=getattr(meta, "column", None))


def _token_span(token: Token) -> Span:
    return Span(line=token.line, column=token.column)


def _clean_body(token: Token) -> str:
    """Strip the fences of a body block and remove its common indentation."""
    lines = str(token)[len(BODY_FENCE) : -len(BODY_FENCE)].split("\n")
    if len(lines) > 1 and lines[0].strip() and any(line.strip() for line in lines[1:]):
        raise ParseError(
            "A multi-line body must start on the line after the opening fence",
            _token_span(token),
            help_text=f"Move {lines[0].strip()!r} to its own line",
        )
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return textwrap.dedent("\n".join(line.rstrip() for line in lines))


def _render_args(args: _Arguments) -> str:
    return ", ".join(arg.value for arg in args.values)


class TreeTransformer(Transformer):
    """Transform parse tree into definition types."""

    def start(self, args: list[Any]) -> tuple[list[ImportStmt], list[ImplDef]]:
        return (_find_many(args, ImportStmt), _find_many(args, ImplDef))

    def plain_import(self, args: list[Any]) -> ImportStmt:
        if len(args) == 2:
            return ImportStmt(text=f"import {args[0]} as {args[1]}")
        return ImportStmt(text=f"import {args[0]}")

    def from_import(self, args: list[Any]) -> ImportStmt:
        return ImportStmt(text=f"from {args[0]} import {', '.join(args[1:])}")

    def module_ref(self, args: list[Any]) -> str:
        return "".join(str(arg) for arg in args)

    def import_name(self, args: list[Any]) -> str:
        if len(args) == 2:
            return f"{args[0]} as {args[1]}"
        return str(args[0])

    def dotted_name(self, args: list[Any]) -> str:
        return ".".join(str(arg) for arg in args)

    @v_args(meta=True)
    def impl_block(self, meta: Any, args: list[Any]) -> ImplDef:
        bases = _find_one(args, _Bases)
        return ImplDef(
            name=str(_find_token(args, "NAME")),
            bases=bases.values if bases else [],
            methods=_find_many(args, MethodDef),
            annotations=_find_many(args, Annotation),
            span=_span(meta),
        )

    def bases(self, args: list[Any]) -> _Bases:
        return _Bases(values=_find_many(args, TypeRef))

    @v_args(meta=True)
    def rpc(self, meta: Any, args: list[Any]) -> MethodDef:
        name = _find_token(args, "NAME")
        return MethodDef(
            name=str(name),
            params=_find_many(args, Param),
            return_type=_find_one(args, _ReturnType),
            body=_clean_body(_find_token(args, "BODY")),
            annotations=_find_many(args, Annotation),
            span=_token_span(name),
        )

    def param(self, args: list[Any]) -> Param:
        return Param(
            name=str(args[0]),
            type=_find_one(args, TypeRef),
            span=_token_span(args[0]),
        )

    def return_type(self, args: list[Any]) -> _ReturnType:
        return _ReturnType(value=args[0])

    @v_args(meta=True)
    def annotation(self, meta: Any, args: list[Any]) -> Annotation:
        arguments = _find_one(args, _Arguments)
        return Annotation(
            name=_find_one(args, _Path),
            arguments=arguments.values if arguments else None,
            span=_span(meta),
        )

    def arguments(self, args: list[Any]) -> _Arguments:
        return _Arguments(values=_find_many(args, AnnotationArg))

    def path_arg(self, args: list[Any]) -> AnnotationArg:
        return AnnotationArg(kind=ArgKind.PATH, value=args[0].value, span=args[0].span)

    def call_arg(self, args: list[Any]) -> AnnotationArg:
        path, arguments = args
        return AnnotationArg(
            kind=ArgKind.CALL,
            value=f"{path.value}({_render_args(arguments)})",
            span=path.span,
        )

    def literal_arg(self, args: list[Any]) -> AnnotationArg:
        return AnnotationArg(kind=ArgKind.LITERAL, value=str(args[0]), span=_token_span(args[0]))

    @v_args(meta=True)
    def type_expr(self, meta: Any, args: list[Any]) -> TypeRef:
        return TypeRef(
            name=_find_one(args, _Path),
            args=_find_many(args, TypeRef),
            span=_span(meta),
        )

    @v_args(meta=True)
    def path(self, meta: Any, args: list[Any]) -> _Path:
        return _Path(value=".".join(str(arg) for arg in args), span=_span(meta))


def validate(imports: list[ImportStmt], impls: list[ImplDef]) -> None:
    """Validate parsed service definitions."""
    seen_impls: set[str] = set()
    for impl in impls:
        if impl.name in seen_impls:
            raise ValidationError(f"impl {impl.name} is declared more than once", impl.span)
        seen_impls.add(impl.name)

        seen_methods: set[str] = set()
        for method in impl.methods:
            if method.name in seen_methods:
                raise ValidationError(
                    f"rpc {method.name} is declared more than once in impl {impl.name}",
                    method.span,
                )
            if RESERVED_RPC_NAMES.fullmatch(method.name):
                raise ValidationError(
                    f"rpc {method.name} clashes with a name used by the generated wrapper",
                    method.span,
                )
            seen_methods.add(method.name)


def parse(text: str) -> tuple[list[ImportStmt], list[ImplDef]]:
    """Parse a service definition file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/servicedef.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr", propagate_positions=True)

    try:
        tree = _g_parser.parse(text)
    except UnexpectedInput as exc:
        raise ParseError(
            "Invalid service definition syntax",
            Span(line=exc.line, column=exc.column),
            help_text=exc.get_context(text).rstrip(),
        ) from exc

    try:
        imports, impls = TreeTransformer().transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, GenerationError):
            raise exc.orig_exc from None
        raise

    validate(imports, impls)

    return (imports, impls)
