"""Converters: coerce one raw value into a typed value and enforce its constraints.

Every converter implements ``convert(name, raw) -> Result``. Conversion is a
pure function of its arguments: it never mutates the input and never raises
for bad input. Failures are returned as ``Result.failure(Violation)``.

Supported kinds:
- StringConverter: stringify, optional full-match pattern and max length
- IntConverter / LongConverter / FloatConverter: native or string input, inclusive range
- BooleanConverter: permissive truthiness ("false", "0" and 0 are False, all else True)
- DateConverter / DateTimeConverter: typed input or strptime/ISO parsing
- EnumConverter: member index bounded to [0, N-1]
- ListConverter: list/tuple input or separator-split string, per-element sub-converter

Converters whose format is left as None (dates) pick up the form's or the
process-wide default when a field is bound, see :meth:`Converter.with_formats`.
"""

import math
import re
import sys
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, ClassVar, Dict, Generic, List, Optional, Type, TypeVar

from dateutil.parser import isoparse

from formbind.config import get_settings
from formbind.errors import Violation
from formbind.result import Result, invalid
from formbind.types import TypeTag

T = TypeVar("T")
E = TypeVar("E")

INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1
LONG_MIN = -(2 ** 63)
LONG_MAX = 2 ** 63 - 1
FLOAT_MIN = -sys.float_info.max
FLOAT_MAX = sys.float_info.max

# Format sentinel: parse with dateutil's ISO-8601 parser instead of strptime
ISO = "iso"

# Fixed instant rendered with a date format to give readers an example value
_EXAMPLE_INSTANT = datetime(2000, 1, 31, 13, 30, 59)


class Converter(ABC, Generic[T]):
    """Base class for all converters.

    Attributes:
        type_tag: Type name reported in descriptors
        metadata: Free-form documentation merged into :meth:`describe`
    """

    type_tag: ClassVar[TypeTag]

    def __init__(self, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.metadata: Dict[str, Any] = dict(metadata or {})

    @abstractmethod
    def convert(self, name: str, raw: Any) -> Result[T]:
        """Convert ``raw`` for the field keyed ``name``."""

    def describe(self) -> Dict[str, Any]:
        """Static configuration of this converter; never converts anything."""
        return {**self._describe(), **self.metadata}

    def _describe(self) -> Dict[str, Any]:
        return {}

    def with_formats(self, date_format: str, datetime_format: str) -> "Converter[T]":
        """Return a converter with unset date formats filled in (or self)."""
        return self

    def render(self, value: T) -> Any:
        """Raw form of a typed value, as this converter would accept it back."""
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._describe()!r})"


class StringConverter(Converter[str]):
    type_tag = TypeTag.STRING

    def __init__(
        self,
        pattern: Optional[str] = None,
        max_length: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(metadata)
        self.pattern = pattern
        self.max_length = max_length
        self._regexp = re.compile(pattern) if pattern is not None else None

    def convert(self, name: str, raw: Any) -> Result[str]:
        value = str(raw)
        if self._regexp is not None and self._regexp.fullmatch(value) is None:
            return invalid(name)
        if self.max_length is not None and len(value) > self.max_length:
            return invalid(name)
        return Result.success(value)

    def _describe(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.pattern is not None:
            result["pattern"] = self.pattern
        if self.max_length is not None:
            result["maxLength"] = self.max_length
        return result


class RangeConverter(Converter[T]):
    """Numeric converter with an inclusive [min_value, max_value] range.

    Subclasses set ``native`` (the accepted Python types), ``parse`` (the
    string parser) and ``label`` (used in "<name> is not a <label> value").
    """

    native: ClassVar[tuple] = ()
    label: ClassVar[str] = ""

    def __init__(self, min_value: Any, max_value: Any, metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(metadata)
        self.min_value = min_value
        self.max_value = max_value

    @staticmethod
    @abstractmethod
    def parse(text: str) -> T:
        """Parse a string, raising ValueError on malformed input."""

    def coerce(self, raw: Any) -> T:
        return raw

    def convert(self, name: str, raw: Any) -> Result[T]:
        if isinstance(raw, bool):
            return invalid(name)
        if isinstance(raw, self.native):
            try:
                value = self.coerce(raw)
            except OverflowError:
                return invalid(name)
            return self.ensure_range(name, value)
        if isinstance(raw, str):
            try:
                value = self.parse(raw)
            except ValueError as e:
                return Result.failure(Violation(name, f"{name} is not {self.label} value", cause=e))
            return self.ensure_range(name, value)
        return invalid(name)

    def ensure_range(self, name: str, value: T) -> Result[T]:
        if value < self.min_value or value > self.max_value:  # type: ignore[operator]
            return invalid(name)
        return Result.success(value)

    def _describe(self) -> Dict[str, Any]:
        return {"min": self.min_value, "max": self.max_value}


class IntConverter(RangeConverter[int]):
    type_tag = TypeTag.INT
    native = (int,)
    label = "an int"

    def __init__(self, min_value: int = INT_MIN, max_value: int = INT_MAX, metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(min_value, max_value, metadata)

    @staticmethod
    def parse(text: str) -> int:
        return int(text)


class LongConverter(RangeConverter[int]):
    type_tag = TypeTag.LONG
    native = (int,)
    label = "a long"

    def __init__(self, min_value: int = LONG_MIN, max_value: int = LONG_MAX, metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(min_value, max_value, metadata)

    @staticmethod
    def parse(text: str) -> int:
        return int(text)


class FloatConverter(RangeConverter[float]):
    type_tag = TypeTag.FLOAT
    native = (float, int)
    label = "a float"

    def __init__(self, min_value: float = FLOAT_MIN, max_value: float = FLOAT_MAX, metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(min_value, max_value, metadata)

    @staticmethod
    def parse(text: str) -> float:
        return float(text)

    def coerce(self, raw: Any) -> float:
        return float(raw)

    def ensure_range(self, name: str, value: float) -> Result[float]:
        # NaN compares false against both bounds
        if math.isnan(value):
            return invalid(name)
        return super().ensure_range(name, value)


class BooleanConverter(Converter[bool]):
    """Permissive truthiness: only False, "false", "0" and numeric 0 are False.

    Examples:
        >>> BooleanConverter().convert("flag", "a").get()
        True
        >>> BooleanConverter().convert("flag", "0").get()
        False
    """

    type_tag = TypeTag.BOOLEAN

    def convert(self, name: str, raw: Any) -> Result[bool]:
        if isinstance(raw, bool):
            return Result.success(raw)
        if raw == "false" or raw == "0":
            return Result.success(False)
        if isinstance(raw, (int, float)) and raw == 0:
            return Result.success(False)
        return Result.success(True)


class _TemporalConverter(Converter[T]):
    label: ClassVar[str] = ""

    def __init__(self, format: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(metadata)
        self.format = format

    @abstractmethod
    def accepts(self, raw: Any) -> bool:
        """Whether ``raw`` is already of the target type."""

    @abstractmethod
    def parse(self, text: str, format: str) -> T:
        """Parse ``text`` with ``format``, raising ValueError on mismatch."""

    @abstractmethod
    def pick_format(self, date_format: str, datetime_format: str) -> str:
        """Choose the relevant default among the two."""

    @property
    def effective_format(self) -> str:
        if self.format is not None:
            return self.format
        settings = get_settings()
        return self.pick_format(settings.date_format, settings.datetime_format)

    def with_formats(self, date_format: str, datetime_format: str) -> Converter[T]:
        if self.format is not None:
            return self
        return type(self)(self.pick_format(date_format, datetime_format), self.metadata)

    def convert(self, name: str, raw: Any) -> Result[T]:
        if self.accepts(raw):
            return Result.success(raw)
        if isinstance(raw, str):
            format = self.effective_format
            try:
                return Result.success(self.parse(raw, format))
            except (ValueError, OverflowError) as e:
                return Result.failure(
                    Violation(name, f"{name} is not in {self.label} form {format}", cause=e)
                )
        return invalid(name)

    def render(self, value: T) -> Any:
        format = self.effective_format
        if format == ISO:
            return value.isoformat()  # type: ignore[attr-defined]
        return value.strftime(format)  # type: ignore[attr-defined]

    def _describe(self) -> Dict[str, Any]:
        format = self.effective_format
        if format == ISO:
            return {"format": ISO, "example": self.example(_EXAMPLE_INSTANT.isoformat())}
        return {"format": format, "example": _EXAMPLE_INSTANT.strftime(format)}

    def example(self, iso_text: str) -> str:
        return iso_text


class DateConverter(_TemporalConverter[date]):
    type_tag = TypeTag.DATE
    label = "date"

    def accepts(self, raw: Any) -> bool:
        return isinstance(raw, date) and not isinstance(raw, datetime)

    def parse(self, text: str, format: str) -> date:
        if format == ISO:
            return isoparse(text).date()
        return datetime.strptime(text, format).date()

    def pick_format(self, date_format: str, datetime_format: str) -> str:
        return date_format

    def example(self, iso_text: str) -> str:
        return _EXAMPLE_INSTANT.date().isoformat()


class DateTimeConverter(_TemporalConverter[datetime]):
    type_tag = TypeTag.DATETIME
    label = "date time"

    def accepts(self, raw: Any) -> bool:
        return isinstance(raw, datetime)

    def parse(self, text: str, format: str) -> datetime:
        if format == ISO:
            return isoparse(text)
        return datetime.strptime(text, format)

    def pick_format(self, date_format: str, datetime_format: str) -> str:
        return datetime_format


class EnumConverter(Converter[E]):
    """Map a member index (int or numeric string) to the enum member.

    Examples:
        >>> import enum
        >>> Color = enum.Enum("Color", "RED GREEN")
        >>> EnumConverter(Color).convert("color", "1").get()
        <Color.GREEN: 2>
    """

    type_tag = TypeTag.ENUM

    def __init__(self, enum_cls: Type[E], metadata: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(metadata)
        self.enum_cls = enum_cls
        self.members: List[E] = list(enum_cls)  # type: ignore[call-overload]
        self._index = IntConverter(0, len(self.members) - 1)

    def convert(self, name: str, raw: Any) -> Result[E]:
        return self._index.convert(name, raw).map(lambda i: self.members[i])

    def render(self, value: E) -> Any:
        return self.members.index(value)

    def _describe(self) -> Dict[str, Any]:
        return {
            "enum": self.enum_cls.__name__,
            "values": {i: m.name for i, m in enumerate(self.members)},  # type: ignore[attr-defined]
        }


class ListConverter(Converter[List[T]]):
    """Convert a list/tuple, or a separator-delimited string, element by element.

    The first failing element short-circuits the whole conversion.

    Examples:
        >>> ListConverter(IntConverter()).convert("ids", "1, 2,3").get()
        [1, 2, 3]
    """

    type_tag = TypeTag.LIST

    def __init__(
        self,
        sub: Converter[T],
        separator: str = ",",
        max_length: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(metadata)
        self.sub = sub
        self.separator = separator
        self.max_length = max_length

    def convert(self, name: str, raw: Any) -> Result[List[T]]:
        if isinstance(raw, (list, tuple)):
            if any(item is None for item in raw):
                return invalid(name)
            items = list(raw)
        elif isinstance(raw, str):
            if self.max_length is not None and len(raw) > self.max_length:
                return invalid(name)
            items = [token.strip() for token in raw.split(self.separator)]
        else:
            return invalid(name)

        values: List[T] = []
        for item in items:
            result = self.sub.convert(name, item)
            if result.is_failure:
                return Result.failure(result.error)  # type: ignore[arg-type]
            values.append(result.value)  # type: ignore[arg-type]
        return Result.success(values)

    def with_formats(self, date_format: str, datetime_format: str) -> Converter[List[T]]:
        sub = self.sub.with_formats(date_format, datetime_format)
        if sub is self.sub:
            return self
        return ListConverter(sub, self.separator, self.max_length, self.metadata)

    def render(self, value: List[T]) -> Any:
        return [self.sub.render(v) for v in value]

    def _describe(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"separator": self.separator, "items": self.sub.describe()}
        if self.max_length is not None:
            result["maxLength"] = self.max_length
        return result


__all__ = [
    "Converter",
    "RangeConverter",
    "StringConverter",
    "IntConverter",
    "LongConverter",
    "FloatConverter",
    "BooleanConverter",
    "DateConverter",
    "DateTimeConverter",
    "EnumConverter",
    "ListConverter",
    "ISO",
    "INT_MIN",
    "INT_MAX",
    "LONG_MIN",
    "LONG_MAX",
    "FLOAT_MIN",
    "FLOAT_MAX",
]
