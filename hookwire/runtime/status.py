"""Standard failure representation returned by generated services."""

from enum import IntEnum
from typing import Any


class StatusCode(IntEnum):
    """gRPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16


class RpcStatus(Exception):
    """An rpc failure, carried as an exception."""

    def __init__(self, code: StatusCode, message: str = "", details: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"RpcStatus({self.code.name}, {self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RpcStatus):
            return NotImplemented
        return (self.code, self.message, self.details) == (other.code, other.message, other.details)

    def __hash__(self) -> int:
        return hash((self.code, self.message))


def into_status(error: BaseException) -> RpcStatus:
    """Convert an error into an RpcStatus.

    Errors can take part by defining ``to_status()``.
    """
    if isinstance(error, RpcStatus):
        return error

    to_status = getattr(error, "to_status", None)
    if callable(to_status):
        status = to_status()
        if not isinstance(status, RpcStatus):
            raise TypeError(f"{type(error).__name__}.to_status() must return an RpcStatus")
        return status

    return RpcStatus(StatusCode.UNKNOWN, str(error))
