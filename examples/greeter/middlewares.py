"""Middlewares used by the greeter example."""

import time

from hookwire.runtime import Middleware, RpcStatus, StatusCode


class Timing(Middleware[float]):
    async def before(self, request) -> float:
        return time.perf_counter()

    async def after(self, context: float, result) -> None:
        outcome = "ok" if result.is_ok else result.error.code.name
        print(f"{outcome} in {time.perf_counter() - context:.6f}s")


class TokenAuth(Middleware[str]):
    Error = RpcStatus

    def __init__(self, tokens: dict[str, str]):
        self.tokens = tokens

    async def before(self, request) -> str:
        user = self.tokens.get(request.token)
        if user is None:
            raise RpcStatus(StatusCode.UNAUTHENTICATED, "unknown token")
        return user

    async def after(self, context: str, result) -> None:
        pass
