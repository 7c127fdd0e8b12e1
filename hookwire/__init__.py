"""hookwire - Middleware wrapper generator for async RPC services."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("hookwire")
except PackageNotFoundError:
    __version__ = "(local)"
