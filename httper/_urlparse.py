from __future__ import annotations

import re
import typing

import httpx
import idna

from ._exceptions import InvalidURL

MAX_URL_LENGTH = 65536

SUPPORTED_SCHEMES = ("http", "https")

URL_REGEX = re.compile(
    r"(?:(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*):)?"
    r"(?://(?P<authority>[^/?#]*))?"
    r"(?P<rest>[^#]*)"
    r"(?:#(?P<fragment>.*))?"
)

AUTHORITY_REGEX = re.compile(
    r"(?:(?P<userinfo>.*)@)?(?P<host>(\[.*\]|[^:@]*)):?(?P<port>.*)?"
)

IPv4_STYLE_HOSTNAME = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+$")
IPv6_STYLE_HOSTNAME = re.compile(r"^\[.*\]$")
INVALID_HOST_CHARACTERS = re.compile(r'[\s/\\<>"{}|^`%]')


class ParseResult(typing.NamedTuple):
    scheme: str
    userinfo: str
    host: str
    port: int | None
    rest: str

    @property
    def netloc(self) -> str:
        return self.host + (f":{self.port}" if self.port is not None else "")

    def __str__(self) -> str:
        return "".join([
            f"{self.scheme}://",
            f"{self.userinfo}@" if self.userinfo else "",
            self.netloc,
            self.rest or "/",
        ])


def _validate_non_printable(value: str, url: str) -> None:
    if any(char.isascii() and not char.isprintable() for char in value):
        char = next(c for c in value if c.isascii() and not c.isprintable())
        raise InvalidURL(
            f"Invalid non-printable ASCII character in URL, {char!r} "
            f"at position {value.find(char)}.",
            url=url,
        )


def _encode_host(host: str, url: str) -> str:
    if not host:
        raise InvalidURL(f"No host in URL {url!r}.", url=url)
    if IPv4_STYLE_HOSTNAME.match(host) or IPv6_STYLE_HOSTNAME.match(host):
        return host
    if INVALID_HOST_CHARACTERS.search(host):
        raise InvalidURL(f"Invalid character in host: {host!r}", url=url)
    if host.isascii():
        return host.lower()
    try:
        return idna.encode(host.lower()).decode("ascii")
    except idna.IDNAError as exc:
        raise InvalidURL(f"Invalid IDNA hostname: {host!r}", url=url) from exc


def _parse_port(port: str, url: str) -> int | None:
    if not port:
        return None
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise InvalidURL(f"Invalid port: {port!r}", url=url)
    return int(port)


def urlparse(url: str) -> ParseResult:
    """Split an absolute http(s) URL, normalizing scheme and host.

    Raises :class:`InvalidURL` for anything that cannot be a request target:
    relative references, other schemes, missing hosts, bad ports.
    """
    if not isinstance(url, str):
        raise InvalidURL(f"URL must be str, not {type(url).__name__}", url=str(url))
    if len(url) > MAX_URL_LENGTH:
        raise InvalidURL("URL too long", url=url[:64])

    url = url.strip()
    _validate_non_printable(url, url)

    url_dict = URL_REGEX.fullmatch(url).groupdict()  # type: ignore[union-attr]
    scheme = (url_dict["scheme"] or "").lower()
    authority = url_dict["authority"]

    if not scheme:
        raise InvalidURL(f"Request URL is missing an 'http://' or 'https://' protocol: {url!r}", url=url)
    if scheme not in SUPPORTED_SCHEMES:
        raise InvalidURL(f"Request URL has an unsupported protocol '{scheme}://': {url!r}", url=url)
    if authority is None:
        raise InvalidURL(f"Request URL has no authority: {url!r}", url=url)

    authority_dict = AUTHORITY_REGEX.fullmatch(authority).groupdict()  # type: ignore[union-attr]
    return ParseResult(
        scheme=scheme,
        userinfo=authority_dict["userinfo"] or "",
        host=_encode_host(authority_dict["host"], url),
        port=_parse_port(authority_dict["port"] or "", url),
        rest=url_dict["rest"],
    )


def parse_url(url: str) -> httpx.URL:
    """Parse ``url`` into the transport's URL type, raising :class:`InvalidURL`."""
    parsed = urlparse(url)
    try:
        return httpx.URL(str(parsed))
    except httpx.InvalidURL as exc:
        raise InvalidURL(str(exc), url=url) from exc
