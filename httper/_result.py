from __future__ import annotations

import typing
from dataclasses import dataclass

from ._exceptions import HttperError

T = typing.TypeVar("T")
U = typing.TypeVar("U")


@dataclass(frozen=True)
class Ok(typing.Generic[T]):
    value: T

    def and_then(self, func: typing.Callable[[T], Result[U]]) -> Result[U]:
        return func(self.value)

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """A failure held back until the value is actually needed."""

    error: HttperError

    def and_then(self, func: typing.Callable[[typing.Any], Result[U]]) -> Result[U]:
        return self

    def unwrap(self) -> typing.NoReturn:
        raise self.error


Result = typing.Union[Ok[T], Err]


def capture(func: typing.Callable[..., T], *args: typing.Any) -> Result[T]:
    """Call ``func`` and return its outcome as a result instead of raising."""
    try:
        return Ok(func(*args))
    except HttperError as exc:
        return Err(exc)
