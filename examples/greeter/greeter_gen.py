"""Generated middleware wrappers."""

from __future__ import annotations

from messages import GreeterError, GreeterServicer, HelloReply, HelloRequest, greeter_server
import middlewares

from hookwire.runtime import Result as _Result
from hookwire.runtime import into_status as _into_status


class GreeterMiddlewareWrapper(GreeterServicer):
    """Runs middleware hooks around Greeter."""

    def __init__(
        self,
        service_impl: Greeter,
        md_0: middlewares.Timing,
        md_1: middlewares.TokenAuth,
    ) -> None:
        self.service_impl = service_impl
        self.md_0 = md_0
        self.md_1 = md_1

    async def say_hello(self, request: HelloRequest) -> HelloReply:
        try:
            ctx_0 = await self.md_0.before(request)
        except self.md_0.Error as exc:
            raise _into_status(exc) from exc
        try:
            ctx_1 = await self.md_1.before(request)
        except self.md_1.Error as exc:
            raise _into_status(exc) from exc
        envs = (ctx_0, ctx_1)
        try:
            ret = _Result.ok(await self.service_impl._say_hello_impl(envs, request))
        except GreeterError as exc:
            ret = _Result.err(_into_status(exc))
        await self.md_0.after(ctx_0, ret)
        await self.md_1.after(ctx_1, ret)
        return ret.unwrap()

    async def ping(self, request: HelloRequest) -> HelloReply:
        try:
            ctx_0 = await self.md_0.before(request)
        except self.md_0.Error as exc:
            raise _into_status(exc) from exc
        envs = (ctx_0,)
        try:
            ret = _Result.ok(await self.service_impl._ping_impl(envs, request))
        except GreeterError as exc:
            ret = _Result.err(_into_status(exc))
        await self.md_0.after(ctx_0, ret)
        return ret.unwrap()


class Greeter:
    def to_service_middleware(
        self,
        md_0: middlewares.Timing,
        md_1: middlewares.TokenAuth,
    ):
        """Wrap this service with its middlewares and build the server object."""
        return greeter_server(
            GreeterMiddlewareWrapper(self, md_0, md_1)
        )

    async def _say_hello_impl(self, env, request: HelloRequest) -> HelloReply:
        timing, user = env
        if not request.name:
            raise GreeterError("name is required")
        return HelloReply(message=f"Hello {request.name}, signed in as {user}")

    async def _ping_impl(self, env, request: HelloRequest) -> HelloReply:
        return HelloReply(message="pong")
