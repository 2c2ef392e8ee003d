from __future__ import annotations

import ssl
import typing
from dataclasses import dataclass

import httpx

from ._headers import HeaderSet, HeaderTypes, merge_headers
from .__version__ import __title__, __version__

DEFAULT_TIMEOUT = httpx.Timeout(timeout=5.0)

TimeoutTypes = typing.Union[float, None, httpx.Timeout]
VerifyTypes = typing.Union[bool, str, ssl.SSLContext]


def default_user_agent() -> str:
    return f"{__title__}/{__version__}"


def default_headers(user_agent: str | None = None) -> HeaderSet:
    return HeaderSet({"user-agent": user_agent or default_user_agent()})


def build_transport(
    *,
    timeout: TimeoutTypes = DEFAULT_TIMEOUT,
    verify: VerifyTypes = True,
    trust_env: bool = True,
    follow_redirects: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the connection pool shared by every request of one client."""
    return httpx.AsyncClient(
        timeout=timeout,
        verify=verify,
        trust_env=trust_env,
        follow_redirects=follow_redirects,
        transport=transport,
    )


@dataclass(frozen=True)
class ClientConfig:
    """Defaults shared, read-only, by every request issued from one client."""

    headers: HeaderSet
    transport: httpx.AsyncClient

    @classmethod
    def create(
        cls,
        headers: HeaderTypes | None = None,
        *,
        user_agent: str | None = None,
        timeout: TimeoutTypes = DEFAULT_TIMEOUT,
        verify: VerifyTypes = True,
        trust_env: bool = True,
        follow_redirects: bool = False,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ClientConfig:
        return cls(
            headers=merge_headers(default_headers(user_agent), headers),
            transport=build_transport(
                timeout=timeout,
                verify=verify,
                trust_env=trust_env,
                follow_redirects=follow_redirects,
                transport=transport,
            ),
        )

    @property
    def timeout(self) -> httpx.Timeout:
        return self.transport.timeout

    @property
    def follow_redirects(self) -> bool:
        return self.transport.follow_redirects

    async def aclose(self) -> None:
        await self.transport.aclose()
