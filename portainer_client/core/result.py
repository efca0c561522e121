"""Uniform success/failure result returned by every public client operation.

Failures are values, not exceptions: callers branch on ``result.ok`` and read
``result.error`` for the failure category.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..models.enums import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a client operation."""

    value: T | None = None
    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: T, message: str = "") -> "Result[T]":
        return cls(value=value, message=message)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "Result[T]":
        return cls(error=error, message=message)

    def as_failure(self) -> "Result[Any]":
        """Re-type a failed result so it can be returned from another operation."""
        if self.error is None:
            raise ValueError("as_failure() called on a successful result")
        return Result(error=self.error, message=self.message)

    def unwrap(self) -> T:
        """Return the value or raise ``ValueError`` for a failed result."""
        if self.error is not None:
            raise ValueError(f"{self.error.value}: {self.message}")
        return self.value  # type: ignore[return-value]

    def value_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value
