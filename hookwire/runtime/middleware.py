"""Middleware interface used by generated service wrappers."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from .result import Result
from .status import RpcStatus

ContextT = TypeVar("ContextT")


class Middleware(ABC, Generic[ContextT]):
    """Base class for middlewares.

    A wrapper calls ``before`` with the inbound request; the returned context
    is handed to the service method and then to ``after`` together with the
    call result. Raising ``Error`` from ``before`` rejects the call: the
    service method does not run and no ``after`` hook is called.

    One instance serves every call of a wrapper, so any state it keeps must be
    safe to share between concurrent calls.

    Example:
        class Auth(Middleware[User]):
            Error = PermissionError

            async def before(self, request):
                return await self.users.lookup(request.token)

            async def after(self, context, result):
                pass
    """

    Error: ClassVar[type[BaseException]] = Exception

    @abstractmethod
    async def before(self, request: Any) -> ContextT:
        """Called before the service method. Raise ``Error`` to reject."""

    @abstractmethod
    async def after(self, context: ContextT, result: Result[Any, RpcStatus]) -> None:
        """Called after the service method. Must not raise."""
