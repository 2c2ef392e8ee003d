import json
import threading
import time
import typing

import anyio
import httpx
import pytest
from uvicorn.config import Config
from uvicorn.server import Server


@pytest.fixture
def anyio_backend():
    return "asyncio"


ENVIRONMENT_VARIABLES = (
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "ALL_PROXY",
    "NO_PROXY",
    "SSL_CERT_FILE",
    "SSL_CERT_DIR",
)


@pytest.fixture(autouse=True)
def clean_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    """Proxy and certificate settings of the host never reach the client."""
    for name in ENVIRONMENT_VARIABLES:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.lower(), raising=False)


# ---------------------------------------------------------------------------
# In-process transport
# ---------------------------------------------------------------------------


def bumblebee(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"name": "Bumblebee"})


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it was handed."""

    def __init__(self, handler: typing.Callable[..., typing.Any] = bumblebee) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> typing.Any:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


# ---------------------------------------------------------------------------
# Live test server
# ---------------------------------------------------------------------------

Scope = typing.Dict[str, typing.Any]
Receive = typing.Callable[[], typing.Awaitable[typing.Dict[str, typing.Any]]]
Send = typing.Callable[[typing.Dict[str, typing.Any]], typing.Awaitable[None]]
Handler = typing.Callable[[Scope, Receive, Send], typing.Awaitable[None]]


async def respond(
    send: Send,
    body: bytes,
    *,
    status: int = 200,
    content_type: bytes = b"text/plain",
    headers: typing.Sequence[typing.Tuple[bytes, bytes]] = (),
    delay: float = 0.0,
) -> None:
    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": [(b"content-type", content_type), *headers],
        }
    )
    if delay:
        await anyio.sleep(delay)
    await send({"type": "http.response.body", "body": body})


async def read_body(receive: Receive) -> bytes:
    chunks = []
    while True:
        message = await receive()
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            return b"".join(chunks)


async def hello_world(scope: Scope, receive: Receive, send: Send) -> None:
    await respond(send, b"Hello, world!")


async def bumblebee_json(scope: Scope, receive: Receive, send: Send) -> None:
    await respond(send, b'{"name": "Bumblebee"}', content_type=b"application/json")


async def malformed_json(scope: Scope, receive: Receive, send: Send) -> None:
    await respond(send, b'{"name": "Bumbleb', content_type=b"application/json")


async def slow_response(scope: Scope, receive: Receive, send: Send) -> None:
    # The head goes out at once; the body only after a read timeout has fired.
    await respond(send, b"Hello, world!", delay=1.0)


async def status_code(scope: Scope, receive: Receive, send: Send) -> None:
    await respond(send, b"Hello, world!", status=int(scope["path"].rsplit("/", 1)[-1]))


async def echo_body(scope: Scope, receive: Receive, send: Send) -> None:
    body = await read_body(receive)
    await respond(send, body, headers=[(b"x-method", scope["method"].encode())])


async def echo_headers(scope: Scope, receive: Receive, send: Send) -> None:
    await read_body(receive)
    received: dict[str, list[str]] = {}
    for name, value in scope["headers"]:
        received.setdefault(name.decode("latin-1"), []).append(value.decode("latin-1"))
    await respond(send, json.dumps(received).encode(), content_type=b"application/json")


ROUTES: typing.Dict[str, Handler] = {
    "/json": bumblebee_json,
    "/malformed_json": malformed_json,
    "/slow_response": slow_response,
    "/status": status_code,
    "/echo_body": echo_body,
    "/echo_headers": echo_headers,
}


async def app(scope: Scope, receive: Receive, send: Send) -> None:
    assert scope["type"] == "http"
    prefix = "/" + scope["path"].split("/")[1]
    await ROUTES.get(prefix, hello_world)(scope, receive, send)


class TestServer(Server):
    __test__ = False

    def install_signal_handlers(self) -> None:
        # Signal handlers can only be installed from the main thread.
        pass

    @property
    def url(self) -> str:
        host, port = self.servers[0].sockets[0].getsockname()[:2]
        return f"http://{host}:{port}/"


def serve_in_thread(server: TestServer) -> typing.Iterator[TestServer]:
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    try:
        deadline = time.monotonic() + 10
        while not server.started:
            if time.monotonic() > deadline or not thread.is_alive():
                raise RuntimeError("Test server failed to start within 10 seconds")
            time.sleep(1e-3)
        yield server
    finally:
        server.should_exit = True
        thread.join(timeout=5)


@pytest.fixture(scope="session")
def server() -> typing.Iterator[TestServer]:
    config = Config(app=app, lifespan="off", loop="asyncio", host="127.0.0.1", port=0)
    yield from serve_in_thread(TestServer(config=config))
