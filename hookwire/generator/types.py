"""Type definitions for service parsing and code generation."""

from dataclasses import dataclass, field
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin

GENERATOR_ANNOTATION = "middleware_service"
MIDDLEWARE_ANNOTATION = "middleware"
RESULT_TYPE = "Result"


@dataclass(frozen=True)
class Span(DataClassJsonMixin):
    """Position of a construct in the definition file."""

    line: int | None
    column: int | None


NO_SPAN = Span(line=None, column=None)


@dataclass
class TypeRef(DataClassJsonMixin):
    """A type expression such as ``pkg.Message`` or ``Result[Reply, Error]``."""

    name: str
    args: list["TypeRef"]
    span: Span = NO_SPAN

    @property
    def canonical(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(arg.canonical for arg in self.args)}]"

    @property
    def last_segment(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def __str__(self) -> str:
        return self.canonical


class ArgKind(StrEnum):
    """Shape of an annotation argument."""

    PATH = auto()  # pkg.Name
    LITERAL = auto()  # "text" or 42
    CALL = auto()  # pkg.Name(...)


@dataclass
class AnnotationArg(DataClassJsonMixin):
    """Represents an argument to an annotation."""

    kind: ArgKind
    value: str
    span: Span = NO_SPAN


@dataclass
class Annotation(DataClassJsonMixin):
    """Represents an annotation on an impl block or rpc.

    ``arguments`` is None for a bare ``@name`` and a list (possibly empty)
    when the annotation has parentheses.
    """

    name: str
    arguments: list[AnnotationArg] | None
    span: Span = NO_SPAN


@dataclass
class ImportStmt(DataClassJsonMixin):
    """An import statement copied to the generated module."""

    text: str


@dataclass
class Param(DataClassJsonMixin):
    """A parameter of an rpc, with its optional type annotation."""

    name: str
    type: TypeRef | None
    span: Span = NO_SPAN

    def __str__(self) -> str:
        if self.type is None:
            return self.name
        return f"{self.name}: {self.type.canonical}"


@dataclass
class MethodDef(DataClassJsonMixin):
    """An rpc item as written, before any checks."""

    name: str
    params: list[Param]
    return_type: TypeRef | None
    body: str
    annotations: list[Annotation]
    span: Span = NO_SPAN


@dataclass
class ImplDef(DataClassJsonMixin):
    """An impl block as written, before any checks."""

    name: str
    bases: list[TypeRef]
    methods: list[MethodDef]
    annotations: list[Annotation]
    span: Span = NO_SPAN


@dataclass(frozen=True, order=True)
class MiddlewareRef(DataClassJsonMixin):
    """Reference to a middleware implementation.

    Equality, hashing and ordering only look at the canonical path.
    """

    path: str
    span: Span = field(default=NO_SPAN, compare=False)

    @property
    def canonical(self) -> str:
        return self.path

    def __str__(self) -> str:
        return self.path


@dataclass
class Rpc(DataClassJsonMixin):
    """One service method, ready for emission."""

    name: str
    request_type: TypeRef
    response_type: TypeRef
    error_type: TypeRef
    local_middlewares: list[MiddlewareRef]
    global_indices: list[int]
    params: list[Param]
    body: str
    span: Span = NO_SPAN


@dataclass
class GeneratorArgs(DataClassJsonMixin):
    """Identifiers passed to the @middleware_service annotation."""

    service_interface_name: str
    server_wrapper_name: str


@dataclass
class Service(DataClassJsonMixin):
    """An annotated impl block with its resolved middleware registry."""

    implementor_type: str
    bases: list[TypeRef]
    methods: list[Rpc]
    registry: list[MiddlewareRef]
    args: GeneratorArgs

    @property
    def wrapper_name(self) -> str:
        return f"{self.implementor_type}MiddlewareWrapper"
