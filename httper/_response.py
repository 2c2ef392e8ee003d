from __future__ import annotations

import logging
import typing
from collections.abc import Awaitable, Callable, Generator
from types import TracebackType

import httpx
import pydantic

from ._exceptions import BuilderConsumedError, DecodeError, map_transport_error

logger = logging.getLogger("httper")

T = typing.TypeVar("T")

Exchange = Callable[[], Awaitable[httpx.Response]]


class ResponseFuture:
    """A response that has not been received yet.

    ``await future`` runs the exchange and returns the response with its body
    still unread.  The stages :meth:`bytes`, :meth:`text` and :meth:`json`
    run the exchange, collect the whole body and close the response.  A
    future can be awaited, entered or given a stage exactly once.
    """

    def __init__(self, exchange: Exchange) -> None:
        self._exchange = exchange
        self._consumed = False
        self._response: httpx.Response | None = None

    def _consume(self) -> Exchange:
        if self._consumed:
            raise BuilderConsumedError("This response future has already been consumed.")
        self._consumed = True
        return self._exchange

    def __await__(self) -> Generator[typing.Any, None, httpx.Response]:
        return self._consume()().__await__()

    async def __aenter__(self) -> httpx.Response:
        self._response = await self
        return self._response

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        if self._response is not None:
            await self._response.aclose()

    def bytes(self) -> Awaitable[bytes]:
        """Collect the full response body."""
        return _read_body(self._consume())

    def text(self) -> Awaitable[str]:
        """Collect the full response body and decode it with the response charset."""
        return _read_text(self._consume())

    @typing.overload
    def json(self) -> Awaitable[typing.Any]: ...

    @typing.overload
    def json(self, type_: type[T]) -> Awaitable[T]: ...

    def json(self, type_: typing.Any = None) -> Awaitable[typing.Any]:
        """Collect the full body and validate it as JSON into ``type_``.

        ``type_`` is anything pydantic can validate: a ``BaseModel``, a
        dataclass, a ``TypedDict``, ``list[Model]`` ...  Without it the plain
        JSON value is returned.

        Raises :class:`DecodeError` when the bytes are not JSON or do not fit
        ``type_``.  Transport failures while the body is collected raise a
        :class:`TransportError` instead.  A ``type_`` pydantic has no schema
        for raises ``pydantic.PydanticSchemaGenerationError`` right here,
        before anything is sent.
        """
        adapter = pydantic.TypeAdapter(typing.Any if type_ is None else type_)
        return _decode_json(self._consume(), adapter, _type_name(type_))


async def _collect(exchange: Exchange) -> httpx.Response:
    response = await exchange()
    try:
        await response.aread()
    except httpx.RequestError as exc:
        logger.debug("Reading response body failed: %r", exc)
        raise map_transport_error(exc, response.request) from exc
    finally:
        await response.aclose()
    return response


async def _read_body(exchange: Exchange) -> bytes:
    response = await _collect(exchange)
    return response.content


async def _read_text(exchange: Exchange) -> str:
    response = await _collect(exchange)
    return response.text


async def _decode_json(
    exchange: Exchange, adapter: pydantic.TypeAdapter[typing.Any], type_name: str
) -> typing.Any:
    response = await _collect(exchange)
    try:
        return adapter.validate_json(response.content)
    except pydantic.ValidationError as exc:
        logger.debug("Decoding response body from %s failed: %s", response.url, exc)
        raise DecodeError(
            f"Response body could not be decoded into {type_name}: "
            f"{exc.error_count()} validation error(s)",
            response=response,
        ) from exc


def _type_name(type_: typing.Any) -> str:
    if type_ is None:
        return "JSON"
    return getattr(type_, "__name__", None) or repr(type_)
