"""Result type for operations with expected failure modes.

Repositories and use-cases return ``Ok(value)`` or ``Err(error)`` instead of
raising for expected failures. Exceptions are reserved for the unexpected.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self):
        raise ValueError(f"Called unwrap_err on an Ok value: {self.value!r}")

    def unwrap_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed result carrying the error."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise ValueError(f"Called unwrap on an Err value: {self.error!r}")

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default):
        return default


Result = Ok[T] | Err[E]
