"""Outcome of an rpc call as seen by middleware post-hooks."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)

_MISSING = object()


@dataclass(frozen=True, slots=True)
class Result(Generic[T, E]):
    """Either a value or an error, never both.

    Example:
        ret = Result.ok(reply)
        if ret.is_err:
            log(ret.error)
        return ret.unwrap()
    """

    _value: object = _MISSING
    _error: E | None = None

    @classmethod
    def ok(cls, value: T) -> "Result[T, E]":
        return cls(_value=value)

    @classmethod
    def err(cls, error: E) -> "Result[T, E]":
        return cls(_error=error)

    @property
    def is_ok(self) -> bool:
        return self._error is None

    @property
    def is_err(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T | None:
        if self._error is not None:
            return None
        return self._value  # type: ignore[return-value]

    @property
    def error(self) -> E | None:
        return self._error

    def unwrap(self) -> T:
        """Return the value, or raise the error."""
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def unwrap_err(self) -> E:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an ok result")
        return self._error
