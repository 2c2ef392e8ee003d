from __future__ import annotations

import typing
from collections.abc import AsyncIterable

import httpx

from ._exceptions import BuilderConsumedError
from ._headers import HeaderTypes
from ._response import ResponseFuture
from ._result import Result

if typing.TYPE_CHECKING:
    from ._client import HttperClient

PayloadTypes = typing.Union[bytes, bytearray, memoryview, str, AsyncIterable[bytes]]

Self = typing.TypeVar("Self", bound="RequestBuilder")


class RequestBuilder:
    """Single-use builder for a request without a body.

    Every chained call consumes the builder it is called on and returns a
    new one, so a builder value can only ever lead to one request::

        >>> builder = client.get("https://example.org")
        >>> future = builder.headers({"Accept": "application/json"}).send()
        >>> builder.send()
        Traceback (most recent call last):
        ...
        httper._exceptions.BuilderConsumedError: ...

    A URL that failed to parse is carried along and raised only when the
    future returned by :meth:`send` is awaited.
    """

    __slots__ = ("_client", "_method", "_url", "_headers", "_consumed")

    def __init__(
        self,
        client: HttperClient,
        method: str,
        url: Result[httpx.URL],
        headers: HeaderTypes | None = None,
    ) -> None:
        self._client = client
        self._method = method
        self._url = url
        self._headers = headers
        self._consumed = False

    @property
    def method(self) -> str:
        return self._method

    def _consume(self) -> None:
        if self._consumed:
            raise BuilderConsumedError(
                f"This {type(self).__name__} has already been used; "
                "chain calls on the builder they return instead."
            )
        self._consumed = True

    def _copy_with(self: Self, **changes: typing.Any) -> Self:
        self._consume()
        builder = type(self).__new__(type(self))
        for name in _all_slots(type(self)):
            setattr(builder, name, changes.get(name, getattr(self, name)))
        builder._consumed = False
        return builder

    def headers(self: Self, headers: HeaderTypes) -> Self:
        """Replace the per-request headers.

        The client's default headers are merged underneath at dispatch time,
        so any header given here overrides a default of the same name.  Names
        and values are checked there too: anything that is not a ``str`` is
        raised as :class:`~httper.RequestAssemblyError` from the future.
        """
        return self._copy_with(_headers=headers)

    def send(self) -> ResponseFuture:
        """Consume the builder and hand the request to the client."""
        self._consume()
        return self._client._send_request(self._method, self._url, None, self._headers)

    def __repr__(self) -> str:
        state = " (consumed)" if self._consumed else ""
        return f"<{type(self).__name__} {self._method}{state}>"


class PayloadBuilder(RequestBuilder):
    """Single-use builder for a request that carries an optional body.

    Without a call to :meth:`payload` the request is sent with an explicit
    empty body (``Content-Length: 0``).
    """

    __slots__ = ("_payload",)

    def __init__(
        self,
        client: HttperClient,
        method: str,
        url: Result[httpx.URL],
        headers: HeaderTypes | None = None,
        payload: PayloadTypes | None = None,
    ) -> None:
        super().__init__(client, method, url, headers)
        self._payload = payload

    def payload(self, payload: PayloadTypes) -> PayloadBuilder:
        """Set or replace the request body."""
        return self._copy_with(_payload=payload)

    def send(self) -> ResponseFuture:
        self._consume()
        payload = self._payload if self._payload is not None else b""
        return self._client._send_request(self._method, self._url, payload, self._headers)


def _all_slots(cls: type) -> list[str]:
    return [
        name
        for klass in reversed(cls.__mro__)
        for name in getattr(klass, "__slots__", ())
    ]
