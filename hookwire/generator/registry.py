"""Service-wide middleware registry.

Built in two phases: ``collect`` gathers every middleware used by the
service's rpcs into one sorted, deduplicated list, then ``resolve`` maps each
rpc's own list onto positions in it. The registry order only decides wrapper
attribute and constructor parameter order; hooks still run in the order each
rpc declares them.
"""

from dataclasses import replace

from .errors import InternalError
from .types import MiddlewareRef, Rpc


def collect(methods: list[Rpc]) -> list[MiddlewareRef]:
    """Return every middleware used by ``methods``, deduplicated and sorted."""
    unique: dict[str, MiddlewareRef] = {}
    for method in methods:
        for middleware in method.local_middlewares:
            unique.setdefault(middleware.canonical, middleware)

    return [unique[key] for key in sorted(unique)]


def resolve(methods: list[Rpc], registry: list[MiddlewareRef]) -> list[Rpc]:
    """Return copies of ``methods`` with ``global_indices`` filled from ``registry``."""
    positions = {middleware.canonical: index for index, middleware in enumerate(registry)}

    resolved: list[Rpc] = []
    for method in methods:
        indices: list[int] = []
        for middleware in method.local_middlewares:
            index = positions.get(middleware.canonical)
            if index is None:
                raise InternalError(
                    f"Impossible generator error: {middleware} is not in the registry",
                    middleware.span,
                )
            indices.append(index)
        resolved.append(replace(method, global_indices=indices))

    return resolved


def build_registry(methods: list[Rpc]) -> tuple[list[MiddlewareRef], list[Rpc]]:
    """Collect the registry of ``methods`` and resolve them against it."""
    registry = collect(methods)
    return registry, resolve(methods, registry)
