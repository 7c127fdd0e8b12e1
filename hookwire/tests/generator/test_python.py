"""Tests for generated middleware wrappers."""

import asyncio
from dataclasses import dataclass

from pytest import raises

from hookwire.generator import generate, parse
from hookwire.generator.python import render, runtime
from hookwire.runtime import Middleware, RpcStatus, StatusCode

GREETER = """
@middleware_service(GreeterServicer, make_server)
impl Greeter(GreeterState) {
    @middleware(Tracing, Auth)
    rpc say_hello(self, env, request: HelloRequest) -> Result[HelloReply, GreeterError] ```
        tracing, auth = env
        calls.append("call")
        if request.name == "fail":
            raise GreeterError("no greeting for you")
        if request.name == "crash":
            raise ValueError("bug")
        return HelloReply(message=f"Hello {request.name} from {auth}")
    ```

    @middleware(Auth)
    rpc whoami(self, env, request: HelloRequest) -> Result[HelloReply, GreeterError] ```
        (auth,) = env
        return HelloReply(message=auth + self.suffix)
    ```

    rpc ping(self, env, request: HelloRequest) -> Result[Pong, GreeterError] ```
        return Pong(env=env)
    ```
}
"""


@dataclass
class HelloRequest:
    name: str


@dataclass
class HelloReply:
    message: str


@dataclass
class Pong:
    env: tuple


class GreeterError(Exception):
    pass


class GreeterServicer:
    pass


class GreeterState:
    suffix = "!"


class DeniedError(Exception):
    def to_status(self):
        return RpcStatus(StatusCode.PERMISSION_DENIED, str(self))


class Recorder(Middleware):
    Error = DeniedError

    def __init__(self, calls, fail=False):
        self.calls = calls
        self.fail = fail
        self.results = []

    async def before(self, request):
        name = type(self).__name__
        self.calls.append(f"{name}.before")
        if self.fail:
            raise DeniedError(f"{name} rejected {request.name}")
        return name.lower()

    async def after(self, context, result):
        self.calls.append(f"{type(self).__name__}.after")
        self.results.append((context, result))


class Tracing(Recorder):
    pass


class Auth(Recorder):
    pass


def gen_code(text, calls):
    gbl = {
        "HelloRequest": HelloRequest,
        "HelloReply": HelloReply,
        "Pong": Pong,
        "GreeterError": GreeterError,
        "GreeterServicer": GreeterServicer,
        "GreeterState": GreeterState,
        "Tracing": Tracing,
        "Auth": Auth,
        "make_server": lambda wrapper: ("server", wrapper),
        "calls": calls,
    }
    generated_code = generate(text, runtime_import="hookwire.runtime")
    exec(generated_code, gbl)
    return gbl


def _server(calls, auth_fails=False):
    gen = gen_code(GREETER, calls)
    tracing = Tracing(calls)
    auth = Auth(calls, fail=auth_fails)
    _, wrapper = gen["Greeter"]().to_service_middleware(auth, tracing)
    return gen, wrapper, tracing, auth


def describe_render():
    def emits_wrapper_implementor_and_constructor(expect):
        code = generate(GREETER, runtime_import="hookwire.runtime")
        expect("class GreeterMiddlewareWrapper(GreeterServicer):" in code) == True
        expect("class Greeter(GreeterState):" in code) == True
        expect("def to_service_middleware(" in code) == True
        expect("from hookwire.runtime import Result as _Result" in code) == True

    def orders_wrapper_fields_by_registry(expect):
        code = generate(GREETER, runtime_import="hookwire.runtime")
        expect(code.index("md_0: Auth,") < code.index("md_1: Tracing,")) == True

    def emits_hooks_in_declared_order(expect):
        code = generate(GREETER, runtime_import="hookwire.runtime")
        before_tracing = code.index("ctx_0 = await self.md_1.before(request)")
        before_auth = code.index("ctx_1 = await self.md_0.before(request)")
        expect(before_tracing < before_auth) == True

    def copies_imports(expect):
        code = generate(
            "import grpc\nfrom app.messages import HelloRequest\n",
            runtime_import="hookwire.runtime",
        )
        expect("import grpc\nfrom app.messages import HelloRequest\n" in code) == True

    def defaults_to_copied_runtime(expect):
        imports, _ = parse("")
        code = render(imports, [])
        expect("from hookwire_runtime import into_status as _into_status" in code) == True

    def renders_empty_service(expect):
        calls = []
        gen = gen_code(
            "@middleware_service(GreeterServicer, make_server)\nimpl Empty {}", calls
        )
        _, wrapper = gen["Empty"]().to_service_middleware()
        expect(isinstance(wrapper, GreeterServicer)) == True
        expect(vars(wrapper).keys() == {"service_impl"}) == True

    def produces_same_code_for_reordered_methods(expect):
        first = """
            @middleware_service(I, s)
            impl A {
                @middleware(X, Y)
                rpc one(self, env, request: R) -> Result[R, E] ```pass```
                @middleware(Z)
                rpc two(self, env, request: R) -> Result[R, E] ```pass```
            }
        """
        second = """
            @middleware_service(I, s)
            impl A {
                @middleware(Z)
                rpc two(self, env, request: R) -> Result[R, E] ```pass```
                @middleware(X, Y)
                rpc one(self, env, request: R) -> Result[R, E] ```pass```
            }
        """
        first_code = generate(first, runtime_import="hookwire.runtime")
        second_code = generate(second, runtime_import="hookwire.runtime")
        init = "md_0: X,\n        md_1: Y,\n        md_2: Z,"
        expect(init in first_code) == True
        expect(init in second_code) == True


def describe_generated_wrapper():
    def runs_hooks_around_call_in_declared_order(expect, calls):
        _, wrapper, _, _ = _server(calls)
        reply = asyncio.run(wrapper.say_hello(HelloRequest(name="Ada")))
        expect(reply) == HelloReply(message="Hello Ada from auth")
        expect(calls) == [
            "Tracing.before",
            "Auth.before",
            "call",
            "Tracing.after",
            "Auth.after",
        ]

    def passes_each_middleware_its_own_context_and_the_result(expect, calls):
        _, wrapper, tracing, auth = _server(calls)
        asyncio.run(wrapper.say_hello(HelloRequest(name="Ada")))
        context, result = tracing.results[0]
        expect(context) == "tracing"
        expect(result.is_ok) == True
        expect(result.value) == HelloReply(message="Hello Ada from auth")
        expect(auth.results[0][0]) == "auth"

    def short_circuits_on_pre_hook_failure(expect, calls):
        _, wrapper, tracing, auth = _server(calls, auth_fails=True)
        with raises(RpcStatus) as exc:
            asyncio.run(wrapper.say_hello(HelloRequest(name="Ada")))
        expect(exc.value.code) == StatusCode.PERMISSION_DENIED
        expect(exc.value.message) == "Auth rejected Ada"
        expect(calls) == ["Tracing.before", "Auth.before"]
        expect(tracing.results) == []

    def converts_call_error_and_still_runs_post_hooks(expect, calls):
        _, wrapper, tracing, _ = _server(calls)
        with raises(RpcStatus) as exc:
            asyncio.run(wrapper.say_hello(HelloRequest(name="fail")))
        expect(exc.value.code) == StatusCode.UNKNOWN
        expect(exc.value.message) == "no greeting for you"
        expect(calls[-2:]) == ["Tracing.after", "Auth.after"]
        expect(tracing.results[0][1].error) == exc.value

    def lets_undeclared_errors_propagate(expect, calls):
        _, wrapper, _, _ = _server(calls)
        with raises(ValueError):
            asyncio.run(wrapper.say_hello(HelloRequest(name="crash")))
        expect(calls) == ["Tracing.before", "Auth.before", "call"]

    def passes_single_context_as_tuple(expect, calls):
        _, wrapper, _, _ = _server(calls)
        reply = asyncio.run(wrapper.whoami(HelloRequest(name="Ada")))
        expect(reply) == HelloReply(message="auth!")
        expect(calls) == ["Auth.before", "Auth.after"]

    def calls_directly_without_middlewares(expect, calls):
        _, wrapper, _, _ = _server(calls)
        reply = asyncio.run(wrapper.ping(HelloRequest(name="Ada")))
        expect(reply) == Pong(env=())
        expect(calls) == []

    def shares_middleware_instances_between_methods(expect, calls):
        _, wrapper, _, auth = _server(calls)
        expect(wrapper.md_0 is auth) == True
        asyncio.run(wrapper.say_hello(HelloRequest(name="Ada")))
        asyncio.run(wrapper.whoami(HelloRequest(name="Ada")))
        expect(len(auth.results)) == 2

    def implements_service_interface(expect, calls):
        gen, wrapper, _, _ = _server(calls)
        expect(isinstance(wrapper, GreeterServicer)) == True
        expect(isinstance(wrapper.service_impl, gen["Greeter"])) == True

    def keeps_bodies_under_private_names(expect, calls):
        gen, _, _, _ = _server(calls)
        expect(hasattr(gen["Greeter"], "_say_hello_impl")) == True
        expect(hasattr(gen["Greeter"], "say_hello")) == False

    def keeps_constructor_when_rpc_shares_its_name(expect, calls):
        gen = gen_code(
            """
            @middleware_service(GreeterServicer, make_server)
            impl Plain {
                rpc to_service_middleware(self, env, request: HelloRequest) -> Result[HelloReply, GreeterError] ```
                    return HelloReply(message=request.name)
                ```
            }
            """,
            calls,
        )
        _, wrapper = gen["Plain"]().to_service_middleware()
        reply = asyncio.run(wrapper.to_service_middleware(HelloRequest(name="Ada")))
        expect(reply) == HelloReply(message="Ada")


def describe_runtime():
    def returns_runtime_files(expect):
        files = runtime()
        expect(sorted(files)) == ["__init__.py", "middleware.py", "result.py", "status.py"]
        expect("class Middleware" in files["middleware.py"]) == True
