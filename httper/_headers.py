from __future__ import annotations

import re
import typing
from collections.abc import Iterable, Iterator, Mapping

from ._exceptions import RequestAssemblyError

HeaderTypes = typing.Union[
    "HeaderSet",
    Mapping[str, str],
    Iterable[typing.Tuple[str, str]],
]

# RFC 9110 field-name token characters.
TOKEN_REGEX = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

# Visible ASCII, space and horizontal tab.
FIELD_VALUE_REGEX = re.compile(r"^[\t\x20-\x7e]*$")


def normalize_header_name(name: str) -> str:
    if not isinstance(name, str):
        raise TypeError(f"Header name must be str, not {type(name).__name__}")
    return name.lower()


class HeaderSet(Mapping[str, str]):
    """Case-insensitive, immutable set of request headers.

    Names are stored lower-cased and iterated in key order.  When the input
    contains the same name more than once (in any casing), the value applied
    last wins::

        >>> HeaderSet({"Content-Type": "a", "content-type": "b"})
        HeaderSet({'content-type': 'b'})
    """

    __slots__ = ("_items",)

    def __init__(self, headers: HeaderTypes | None = None) -> None:
        items: dict[str, str] = {}
        if headers is not None:
            pairs = headers.items() if isinstance(headers, Mapping) else headers
            for name, value in pairs:
                if not isinstance(value, str):
                    raise TypeError(
                        f"Header value for {name!r} must be str, "
                        f"not {type(value).__name__}"
                    )
                items[normalize_header_name(name)] = value
        self._items = dict(sorted(items.items()))

    def merge(self, overrides: HeaderTypes | None) -> HeaderSet:
        return merge_headers(self, overrides)

    def __getitem__(self, name: str) -> str:
        return self._items[normalize_header_name(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderSet):
            return self._items == other._items
        if isinstance(other, Mapping):
            try:
                return self._items == HeaderSet(other)._items
            except TypeError:
                return False
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"


def merge_headers(defaults: HeaderTypes | None, overrides: HeaderTypes | None) -> HeaderSet:
    """Return ``defaults`` with ``overrides`` applied on top.

    Names are compared case-insensitively.  A name present in both keeps the
    override's value, names present in only one side are kept as-is.  Neither
    input is modified.
    """
    merged = dict(HeaderSet(defaults).items())
    merged.update(HeaderSet(overrides).items())
    return HeaderSet(merged)


def validate_headers(headers: HeaderSet) -> None:
    """Check that every header can legally be put on the wire."""
    for name, value in headers.items():
        if not TOKEN_REGEX.match(name):
            raise RequestAssemblyError(f"Invalid header name {name!r}.")
        if not FIELD_VALUE_REGEX.match(value):
            char = next(c for c in value if not FIELD_VALUE_REGEX.match(c))
            raise RequestAssemblyError(
                f"Invalid character {char!r} in value of header {name!r} "
                f"at position {value.find(char)}."
            )
