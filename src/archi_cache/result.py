"""Result type for storage primitives that must not raise.

The durable cache tier talks to a medium that can fail (full disk, read-only
file, corrupted rows). Its internal primitives return ``Result[T, E]`` so the
failure is a value; the public store methods then fold every ``Err`` into a
miss or a no-op.

Usage:
    def _read(self, key: str) -> Result[CacheEntry | None, CacheStoreError]:
        try:
            row = ...
        except sqlite3.Error as e:
            return Err(ReadError(key, e))
        return Ok(row)

    result = self._read(key)
    if result.is_err():
        logger.warning("...: %s", result.unwrap_err())
        return None
    entry = result.unwrap()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar, cast, final

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Exception)
_T = TypeVar("_T")
_U = TypeVar("_U")


class UnwrapError(Exception):
    """Raised when unwrap() is called on an Err or unwrap_err() on an Ok."""


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result carrying a value."""

    _value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Returns the contained value."""
        return self._value

    def unwrap_or(self, default: T) -> T:
        return self._value

    def unwrap_err(self) -> Exception:
        """Raises UnwrapError since there is no error."""
        raise UnwrapError("Called unwrap_err on Ok value")

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        """Returns Ok(fn(value))."""
        return Ok(fn(self._value))


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying the error that caused it."""

    _error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> _T:  # noqa: UP049 # pyright: ignore[reportInvalidTypeVarUse]
        """Raises UnwrapError wrapping the contained error."""
        raise UnwrapError(f"Called unwrap on Err value: {self._error}")

    def unwrap_or(self, default: _T) -> _T:  # noqa: UP049
        return default

    def unwrap_err(self) -> E:
        """Returns the contained error."""
        return self._error

    def map(  # noqa: UP049
        self, fn: Callable[[_T], _U]  # pyright: ignore[reportInvalidTypeVarUse]
    ) -> Result[_U, E]:
        """Returns self unchanged; there is no value to map."""
        return cast("Result[_U, E]", self)


Result = Ok[T] | Err[E]
