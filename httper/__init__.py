# ruff: noqa: I001
from .__version__ import __description__, __title__, __version__
from ._builders import PayloadBuilder, RequestBuilder
from ._client import HttperClient
from ._config import ClientConfig, default_user_agent
from ._exceptions import (
    BuilderConsumedError,
    CloseError,
    ConnectError,
    DecodeError,
    HttperError,
    InvalidURL,
    NetworkError,
    ProtocolError,
    ReadError,
    RequestAssemblyError,
    TimeoutException,
    TransportError,
    WriteError,
)
from ._headers import HeaderSet, merge_headers
from ._response import ResponseFuture
from . import extensions  # noqa: F401
from .extensions import gather, gather_json

try:
    from .cli import main
except ImportError:

    def main() -> None:  # type: ignore[misc]
        import sys

        print(
            'The "httper" command requires the CLI extra. '
            'Install it with: pip install "httper[cli]"',
            file=sys.stderr,
        )
        sys.exit(1)


_EXCLUDED_FROM_ALL = {"cli", "main"}

__all__ = sorted(
    (
        member
        for member in list(vars().keys())
        if (
            not member.startswith("_")
            or member in ["__description__", "__title__", "__version__"]
        )
        and member not in _EXCLUDED_FROM_ALL
    ),
    key=str.casefold,
)
