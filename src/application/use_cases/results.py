"""Result envelope returned by balance sheet operations."""

from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a public operation.

    Attributes:
        success: Whether the operation applied.
        data: Payload on success (created row, updated row, ...).
        error: Human-readable message on failure.
    """

    success: bool
    data: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "OperationResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "OperationResult[T]":
        return cls(success=False, error=error)


__all__ = ["OperationResult"]
