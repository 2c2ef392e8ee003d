"""
The client: builds requests from shared defaults and dispatches them.

In order to start making requests, create an :class:`HttperClient` and
construct the request with the method you want to use.  For example for
``DELETE`` requests call ``.delete()`` on the client, then ``.send()`` to
obtain a :class:`~httper.ResponseFuture`::

    >>> async with HttperClient() as client:
    ...     contributors = await (
    ...         client.get("https://api.github.com/repos/drager/httper/contributors")
    ...         .send()
    ...         .json(list[Contributor])
    ...     )
"""

from __future__ import annotations

import logging
import typing
from types import TracebackType

import httpx

from ._builders import PayloadBuilder, PayloadTypes, RequestBuilder
from ._config import DEFAULT_TIMEOUT, ClientConfig, TimeoutTypes, VerifyTypes
from ._exceptions import HttperError, RequestAssemblyError, map_transport_error
from ._headers import HeaderSet, HeaderTypes, merge_headers, validate_headers
from ._response import ResponseFuture
from ._result import Err, Ok, Result, capture
from ._urlparse import parse_url

logger = logging.getLogger("httper")

METHODS_WITHOUT_BODY = frozenset({"GET"})
METHODS_WITH_BODY = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class HttperClient:
    """An asynchronous HTTP(S) client.

    The client holds the default headers and one connection pool; both are
    fixed at construction and shared by every request it issues, so a single
    instance can be used from many concurrent tasks.

    Parameters
    ----------
    headers:
        Extra default headers, merged over the built-in ``User-Agent``.
    user_agent:
        Replaces the ``httper/<version>`` user agent.
    timeout:
        Transport timeout in seconds, or an :class:`httpx.Timeout`.
    verify:
        TLS verification: ``True``, ``False`` or an :class:`ssl.SSLContext`.
    trust_env:
        Read proxy and certificate settings from the environment.
    follow_redirects:
        Follow ``3xx`` responses.
    transport:
        A custom :class:`httpx.AsyncBaseTransport`, e.g.
        :class:`httpx.MockTransport` in tests.
    """

    def __init__(
        self,
        headers: HeaderTypes | None = None,
        *,
        user_agent: str | None = None,
        timeout: TimeoutTypes = DEFAULT_TIMEOUT,
        verify: VerifyTypes = True,
        trust_env: bool = True,
        follow_redirects: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = ClientConfig.create(
            headers,
            user_agent=user_agent,
            timeout=timeout,
            verify=verify,
            trust_env=trust_env,
            follow_redirects=follow_redirects,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def headers(self) -> HeaderSet:
        return self._config.headers

    @property
    def is_closed(self) -> bool:
        return self._config.transport.is_closed

    def get(self, url: str) -> RequestBuilder:
        """Prepare a ``GET`` request. Call ``.send()`` to send it."""
        return RequestBuilder(self, "GET", self._parse_url(url))

    def post(self, url: str) -> PayloadBuilder:
        """Prepare a ``POST`` request. Call ``.payload(...)`` then ``.send()``."""
        return PayloadBuilder(self, "POST", self._parse_url(url))

    def put(self, url: str) -> PayloadBuilder:
        """Prepare a ``PUT`` request."""
        return PayloadBuilder(self, "PUT", self._parse_url(url))

    def patch(self, url: str) -> PayloadBuilder:
        """Prepare a ``PATCH`` request."""
        return PayloadBuilder(self, "PATCH", self._parse_url(url))

    def delete(self, url: str) -> PayloadBuilder:
        """Prepare a ``DELETE`` request. A payload is optional."""
        return PayloadBuilder(self, "DELETE", self._parse_url(url))

    def request(self, method: str, url: str) -> RequestBuilder:
        """Prepare a request for any of the supported methods."""
        method = method.upper()
        if method in METHODS_WITHOUT_BODY:
            return RequestBuilder(self, method, self._parse_url(url))
        if method in METHODS_WITH_BODY:
            return PayloadBuilder(self, method, self._parse_url(url))
        raise ValueError(f"Unsupported HTTP method: {method!r}")

    def _parse_url(self, url: str) -> Result[httpx.URL]:
        return capture(parse_url, url)

    def _send_request(
        self,
        method: str,
        url: Result[httpx.URL],
        payload: PayloadTypes | None,
        headers: HeaderTypes | None,
    ) -> ResponseFuture:
        """Merge headers, assemble the request and return its future.

        A URL error captured by the builder short-circuits here: the future
        raises it without the transport ever being called.
        """
        request = url.and_then(lambda target: self._assemble(method, target, headers, payload))
        transport = self._config.transport

        async def exchange() -> httpx.Response:
            outgoing = request.unwrap()
            logger.debug("Sending %s %s", outgoing.method, outgoing.url)
            try:
                response = await transport.send(outgoing, stream=True)
            except httpx.RequestError as exc:
                logger.debug("%s %s failed: %r", outgoing.method, outgoing.url, exc)
                raise map_transport_error(exc, outgoing) from exc
            logger.info(
                'HTTP Request: %s %s "%s %d %s"',
                outgoing.method,
                outgoing.url,
                response.http_version,
                response.status_code,
                response.reason_phrase,
            )
            return response

        return ResponseFuture(exchange)

    def _assemble(
        self,
        method: str,
        url: httpx.URL,
        headers: HeaderTypes | None,
        payload: PayloadTypes | None,
    ) -> Result[httpx.Request]:
        try:
            merged = merge_headers(self._config.headers, headers)
            validate_headers(merged)
            content = _encode_payload(payload)
            request = httpx.Request(
                method,
                url,
                headers=list(merged.items()),
                content=content,
                extensions={"timeout": self._config.timeout.as_dict()},
            )
        except HttperError as exc:
            return Err(exc)
        except (TypeError, ValueError) as exc:
            return Err(RequestAssemblyError(f"Could not build {method} {url}: {exc}"))

        if isinstance(content, bytes) and not _has_framing(request.headers):
            request.headers["Content-Length"] = str(len(content))
        return Ok(request)

    async def aclose(self) -> None:
        """Close the connection pool."""
        await self._config.aclose()

    async def __aenter__(self) -> HttperClient:
        await self._config.transport.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self._config.transport.__aexit__(exc_type, exc_value, traceback)


def _encode_payload(payload: PayloadTypes | None) -> bytes | typing.AsyncIterable[bytes] | None:
    if payload is None:
        return None
    if isinstance(payload, str):
        return payload.encode("utf-8")
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    if hasattr(payload, "__aiter__"):
        return payload
    raise RequestAssemblyError(
        f"Unsupported payload type {type(payload).__name__}; expected bytes, "
        "str or an async iterable of bytes."
    )


def _has_framing(headers: httpx.Headers) -> bool:
    return "Content-Length" in headers or "Transfer-Encoding" in headers
