"""Runtime support for generated middleware wrappers."""

from .middleware import Middleware as Middleware
from .result import Result as Result
from .status import RpcStatus as RpcStatus
from .status import StatusCode as StatusCode
from .status import into_status as into_status
