"""Messages and service interface for the greeter example."""

from dataclasses import dataclass

from hookwire.runtime import RpcStatus, StatusCode


@dataclass
class HelloRequest:
    name: str
    token: str = ""


@dataclass
class HelloReply:
    message: str


class GreeterError(Exception):
    def to_status(self) -> RpcStatus:
        return RpcStatus(StatusCode.INVALID_ARGUMENT, str(self))


class GreeterServicer:
    """Interface the wrapper implements."""

    async def say_hello(self, request: HelloRequest) -> HelloReply:
        raise NotImplementedError

    async def ping(self, request: HelloRequest) -> HelloReply:
        raise NotImplementedError


@dataclass
class GreeterServer:
    servicer: GreeterServicer


def greeter_server(servicer: GreeterServicer) -> GreeterServer:
    return GreeterServer(servicer)
