"""Semantic checks turning parsed impl blocks into service models."""

from .errors import AnnotationError, ArgumentError, SignatureError
from .registry import build_registry
from .types import (
    GENERATOR_ANNOTATION,
    MIDDLEWARE_ANNOTATION,
    RESULT_TYPE,
    Annotation,
    ArgKind,
    GeneratorArgs,
    ImplDef,
    MethodDef,
    MiddlewareRef,
    Rpc,
    Service,
    TypeRef,
)

# self, env, request
REQUEST_PARAM_INDEX = 2


def analyze_signature(method: MethodDef) -> tuple[TypeRef, TypeRef, TypeRef]:
    """Extract request, response and error types from an rpc signature.

    The parameter at index 2 must be annotated with the request type, the first
    two being the receiver and the environment slot. The return type must be
    ``Result[Response, Error]``.
    """
    if len(method.params) <= REQUEST_PARAM_INDEX:
        raise SignatureError(
            f"rpc {method.name} needs a request parameter after the receiver and environment",
            method.span,
            help_text="Declare it as (self, env, request: RequestType)",
        )

    request = method.params[REQUEST_PARAM_INDEX]
    if request.type is None:
        raise SignatureError(
            "Only typed parameters are accepted for the request",
            request.span,
            help_text=f"Annotate it: {request.name}: RequestType",
        )

    ret = method.return_type
    if ret is None:
        raise SignatureError(f"rpc {method.name} needs a return type", method.span)
    if ret.last_segment != RESULT_TYPE or len(ret.args) != 2:
        raise SignatureError(
            f"Return type should be Result[Response, Error], not {ret.canonical}",
            ret.span,
        )

    return request.type, ret.args[0], ret.args[1]


def extract_middlewares(annotations: list[Annotation]) -> list[MiddlewareRef]:
    """Collect middleware references from @middleware annotations, in textual order."""
    middlewares: list[MiddlewareRef] = []
    for annotation in annotations:
        if annotation.name != MIDDLEWARE_ANNOTATION:
            continue

        if annotation.arguments is None:
            raise AnnotationError(
                "@middleware must be a list of middleware type references",
                annotation.span,
                help_text="Write it as @middleware(A, B, ...)",
            )
        for arg in annotation.arguments:
            if arg.kind != ArgKind.PATH:
                raise AnnotationError(
                    f"@middleware must be a list of middleware type references, got {arg.value}",
                    arg.span,
                )
            middlewares.append(MiddlewareRef(path=arg.value, span=arg.span))

    return middlewares


def build_rpc(method: MethodDef) -> Rpc:
    """Build the model of one rpc. Registry indices are filled in later."""
    request_type, response_type, error_type = analyze_signature(method)

    return Rpc(
        name=method.name,
        request_type=request_type,
        response_type=response_type,
        error_type=error_type,
        local_middlewares=extract_middlewares(method.annotations),
        global_indices=[],
        params=list(method.params),
        body=method.body,
        span=method.span,
    )


def parse_generator_args(impl: ImplDef) -> GeneratorArgs:
    """Read the interface and server constructor names from @middleware_service."""
    found = [a for a in impl.annotations if a.name == GENERATOR_ANNOTATION]
    if not found:
        raise ArgumentError(
            f"impl {impl.name} needs a @{GENERATOR_ANNOTATION} annotation",
            impl.span,
            help_text=f"Add @{GENERATOR_ANNOTATION}(ServiceInterface, server_constructor)",
        )
    if len(found) > 1:
        raise ArgumentError(
            f"impl {impl.name} has more than one @{GENERATOR_ANNOTATION} annotation",
            found[1].span,
        )

    annotation = found[0]
    arguments = annotation.arguments or []
    if len(arguments) != 2:
        raise ArgumentError(
            f"@{GENERATOR_ANNOTATION} takes exactly two arguments, got {len(arguments)}",
            annotation.span,
            help_text=f"Write it as @{GENERATOR_ANNOTATION}(ServiceInterface, server_constructor)",
        )

    names: list[str] = []
    for arg, what in zip(arguments, ("an interface", "a server-constructor")):
        if arg.kind != ArgKind.PATH:
            raise ArgumentError(f"Needs to be {what} identifier, got {arg.value}", arg.span)
        names.append(arg.value.rsplit(".", 1)[-1])

    return GeneratorArgs(service_interface_name=names[0], server_wrapper_name=names[1])


def build_service(impl: ImplDef) -> Service:
    """Build the full service model of an impl block."""
    args = parse_generator_args(impl)
    methods = [build_rpc(method) for method in impl.methods]
    registry, methods = build_registry(methods)

    return Service(
        implementor_type=impl.name,
        bases=impl.bases,
        methods=methods,
        registry=registry,
        args=args,
    )
