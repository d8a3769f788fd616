"""Success-or-violation result values.

Converters never raise on bad input; they return a Result. Field properties
cache the Result of their one and only resolution.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from formbind.errors import Violation
from formbind.types import CheckFn

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a converted value or the Violation explaining why there is none.

    Attributes:
        value: The successful value (may legitimately be None)
        error: The violation, set only on failure

    Examples:
        >>> Result.success(3).map(lambda v: v * 2).get()
        6
        >>> Result.failure(Violation.invalid("age")).is_failure
        True
    """
    value: Optional[T] = None
    error: Optional[Violation] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Violation) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    def get(self) -> T:
        """Return the value, raising the violation on failure."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]

    def map(self, fn: Callable[[T], R]) -> "Result[R]":
        if self.error is not None:
            return Result.failure(self.error)
        return Result.success(fn(self.value))  # type: ignore[arg-type]

    def then(self, fn: Callable[[T], "Result[R]"]) -> "Result[R]":
        if self.error is not None:
            return Result.failure(self.error)
        return fn(self.value)  # type: ignore[arg-type]

    def check(self, name: str, fn: Optional[CheckFn]) -> "Result[T]":
        """Apply a post-conversion predicate to a successful value.

        A predicate returning a falsy value yields "<name> is invalid"; a
        predicate raising a Violation is wrapped with the field name prefixed.
        """
        if self.error is not None or fn is None:
            return self
        try:
            ok = fn(self.value)
        except Violation as e:
            return Result.failure(Violation(name, f"{name}: {e.message}", cause=e))
        if not ok:
            return Result.failure(Violation.invalid(name))
        return self


def invalid(name: str, what: str = "invalid", cause: Optional[BaseException] = None) -> Result[Any]:
    """Shorthand for a failed Result carrying "<name> is <what>"."""
    return Result.failure(Violation.invalid(name, what, cause))


__all__ = [
    "Result",
    "invalid",
]
