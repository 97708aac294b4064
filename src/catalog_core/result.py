from dataclasses import dataclass
from typing import Generic, TypeVar

from .exceptions import CatalogError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a best-effort operation.
    `value` is always usable: on failure it holds the empty/default result,
    and `error` keeps the failure kind for logging and tests.
    """

    value: T
    error: CatalogError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CatalogError, default: T) -> "Result[T]":
        return cls(value=default, error=error)
