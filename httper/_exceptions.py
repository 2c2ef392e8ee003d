"""
Exception hierarchy::

    HttperError
    ├── InvalidURL
    ├── RequestAssemblyError
    ├── TransportError
    │   ├── TimeoutException
    │   ├── NetworkError
    │   │   ├── ConnectError
    │   │   ├── ReadError
    │   │   ├── WriteError
    │   │   └── CloseError
    │   └── ProtocolError
    └── DecodeError

    BuilderConsumedError (RuntimeError)
"""

from __future__ import annotations

import httpx

__all__ = [
    "BuilderConsumedError",
    "CloseError",
    "ConnectError",
    "DecodeError",
    "HttperError",
    "InvalidURL",
    "NetworkError",
    "ProtocolError",
    "ReadError",
    "RequestAssemblyError",
    "TimeoutException",
    "TransportError",
    "WriteError",
]


class HttperError(Exception):
    """Base class for every failure a request exchange can end in."""

    def __init__(self, message: str, *, request: httpx.Request | None = None) -> None:
        super().__init__(message)
        self._request = request

    @property
    def request(self) -> httpx.Request:
        if self._request is None:
            raise RuntimeError("The .request property has not been set.")
        return self._request

    @request.setter
    def request(self, request: httpx.Request) -> None:
        self._request = request


class InvalidURL(HttperError):
    """The target string could not be parsed as an absolute http(s) URL."""

    def __init__(self, message: str, *, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class RequestAssemblyError(HttperError):
    """A header or the body could not be attached to the outgoing request."""


class TransportError(HttperError):
    """The transport failed before or while the response was received."""


class TimeoutException(TransportError):
    pass


class NetworkError(TransportError):
    pass


class ConnectError(NetworkError):
    pass


class ReadError(NetworkError):
    pass


class WriteError(NetworkError):
    pass


class CloseError(NetworkError):
    pass


class ProtocolError(TransportError):
    pass


class DecodeError(HttperError):
    """The response arrived but its body did not parse into the requested type.

    The response has been fully read and closed; ``status_code`` and
    ``headers`` remain available on :attr:`response`.
    """

    def __init__(self, message: str, *, response: httpx.Response) -> None:
        super().__init__(message, request=response.request)
        self.response = response


class BuilderConsumedError(RuntimeError):
    """A builder or response future was used after it had been consumed."""


_TRANSPORT_ERRORS: list[tuple[type[httpx.RequestError], type[TransportError]]] = [
    (httpx.TimeoutException, TimeoutException),
    (httpx.ConnectError, ConnectError),
    (httpx.ReadError, ReadError),
    (httpx.WriteError, WriteError),
    (httpx.CloseError, CloseError),
    (httpx.NetworkError, NetworkError),
    (httpx.ProtocolError, ProtocolError),
    (httpx.DecodingError, ProtocolError),
]


def map_transport_error(
    exc: httpx.RequestError, request: httpx.Request | None = None
) -> TransportError:
    """Translate an httpx request failure into the matching ``TransportError``.

    Anything without a closer match, such as ``httpx.TooManyRedirects``,
    becomes a plain :class:`TransportError`.
    """
    error_class: type[TransportError] = TransportError
    for httpx_class, mapped in _TRANSPORT_ERRORS:
        if isinstance(exc, httpx_class):
            error_class = mapped
            break
    message = str(exc) or type(exc).__name__
    return error_class(message, request=request)
