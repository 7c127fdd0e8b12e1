"""Middleware wrapper code generator."""

from .analyzer import build_service as build_service
from .errors import *
from .parser import parse as parse
from .python import render as render
from .registry import build_registry as build_registry
from .types import *


def generate(text: str, runtime_import: str = "hookwire_runtime") -> str:
    """Generate the wrapper module for a service definition file."""
    imports, impls = parse(text)
    services = [build_service(impl) for impl in impls]
    return render(imports, services, runtime_import=runtime_import)
