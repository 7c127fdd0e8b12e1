"""Run the greeter example: hookwire gen -i greeter.hookwire -o greeter_gen.py --runtime-import"""

import asyncio

from greeter_gen import Greeter
from messages import HelloRequest
from middlewares import Timing, TokenAuth
from hookwire.runtime import RpcStatus


async def main() -> None:
    # Constructor parameters follow registry order: Timing, then TokenAuth
    server = Greeter().to_service_middleware(Timing(), TokenAuth({"s3cret": "ada"}))
    servicer = server.servicer

    print((await servicer.say_hello(HelloRequest(name="Grace", token="s3cret"))).message)
    print((await servicer.ping(HelloRequest(name=""))).message)

    for request in (HelloRequest(name="Grace", token="wrong"), HelloRequest(name="", token="s3cret")):
        try:
            await servicer.say_hello(request)
        except RpcStatus as status:
            print(f"rejected: {status.code.name} {status.message}")


if __name__ == "__main__":
    asyncio.run(main())
