"""Error types for formbind.

There are exactly two kinds of failure:

- Violation: bad user input. A field-scoped message, optionally chaining the
  lower-level cause (a numeric parse error, a nested form's own violation).
  Converters return these as values; properties cache them; the engine raises
  or returns the first one.
- UnsupportedDataError: a wiring bug. A field needs a data source capability
  (nested objects, lists) that the supplied data source does not implement.
  It is raised while a form is being constructed and is never cached as a
  per-field result.
"""

from typing import Any, Dict, List, Optional


class Violation(Exception):
    """A validation failure attributed to a single field.

    Attributes:
        field: Data key of the failing field (None for form-level failures)
        message: Human-readable error description
        cause: Optional underlying exception
        nested: True when this violation wraps a nested form's violation

    Examples:
        >>> v = Violation("age", "age is invalid")
        >>> str(v)
        'age is invalid'
        >>> v.path
        'age'
    """

    def __init__(
        self,
        field: Optional[str],
        message: str,
        cause: Optional[BaseException] = None,
        nested: bool = False,
    ) -> None:
        super().__init__(message)
        self.field = field
        self.message = message
        self.cause = cause
        self.nested = nested
        self.__cause__ = cause

    @classmethod
    def invalid(cls, name: str, what: str = "invalid", cause: Optional[BaseException] = None) -> "Violation":
        """Build the standard "<name> is <what>" violation."""
        return cls(name, f"{name} is {what}", cause)

    @classmethod
    def wrap(cls, key: str, inner: "Violation") -> "Violation":
        """Attribute a nested form's violation to the containing field.

        Prefixing is single-level: the message always reads
        "<key>: <innermost message>" however deep the failure happened.
        The full dotted location is kept in :attr:`path`.

        Examples:
            >>> inner = Violation.invalid("id", "required")
            >>> Violation.wrap("inner", inner).message
            'inner: id is required'
        """
        return cls(key, f"{key}: {inner.origin.message}", cause=inner, nested=True)

    @property
    def origin(self) -> "Violation":
        """The innermost violation behind a chain of nested wrappers."""
        current = self
        while current.nested and isinstance(current.cause, Violation):
            current = current.cause
        return current

    @property
    def path(self) -> str:
        """Dotted field path built from the nested cause chain."""
        parts: List[str] = []
        current: Optional[Violation] = self
        while current is not None:
            if current.field:
                parts.append(current.field)
            if current.nested and isinstance(current.cause, Violation):
                current = current.cause
            else:
                current = None
        return ".".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"message": self.message}
        if self.field is not None:
            result["field"] = self.field
            result["path"] = self.path
        return result

    def __repr__(self) -> str:
        return f"Violation(field={self.field!r}, message={self.message!r})"


class UnsupportedDataError(Exception):
    """Raised when a data source lacks a capability a field requires.

    This signals a mismatch between the form declaration and the data source
    type, not invalid user input.

    Attributes:
        field: Declared attribute name of the field being bound
        capability: Name of the missing capability protocol
        data: The offending data source
    """

    def __init__(self, field: Optional[str], capability: str, data: Any) -> None:
        self.field = field
        self.capability = capability
        self.data = data
        super().__init__(
            f"the form data {data!r} doesn't support {capability} "
            f"(required by field {field!r})"
        )


__all__ = [
    "Violation",
    "UnsupportedDataError",
]
