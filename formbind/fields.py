"""Field declaration helpers for form class bodies.

Usage:
    >>> from formbind import Form, fields
    >>> class PersonForm(Form):
    ...     name = fields.string(max_length=20).required()
    ...     age = fields.integer(0, 150)
    ...     nickName = fields.string().snake()
    ...     tags = fields.list_of(fields.StringConverter())

Every helper returns an unbound declaration. ``.required()`` and ``.default()``
return a refined copy; ``.name()`` and ``.snake()`` set the data key in place.
"""

from typing import Any, Dict, Optional, Type

from formbind.converters import (
    FLOAT_MAX,
    FLOAT_MIN,
    INT_MAX,
    INT_MIN,
    LONG_MAX,
    LONG_MIN,
    BooleanConverter,
    Converter,
    DateConverter,
    DateTimeConverter,
    EnumConverter,
    FloatConverter,
    IntConverter,
    LongConverter,
    StringConverter,
)
from formbind.properties import (
    BeanProperty,
    FormProperty,
    InlineBeanProperty,
    ListBeanProperty,
    PrimitiveListProperty,
)
from formbind.types import CheckFn

Metadata = Optional[Dict[str, Any]]


def of(converter: Converter, check: Optional[CheckFn] = None) -> FormProperty:
    """Optional scalar field using an arbitrary converter."""
    return FormProperty(converter, check)


def string(pattern: Optional[str] = None, max_length: Optional[int] = None, metadata: Metadata = None, check: Optional[CheckFn] = None) -> FormProperty:
    return of(StringConverter(pattern, max_length, metadata), check)


def integer(min_value: int = INT_MIN, max_value: int = INT_MAX, metadata: Metadata = None, check: Optional[CheckFn] = None) -> FormProperty:
    return of(IntConverter(min_value, max_value, metadata), check)


def long(min_value: int = LONG_MIN, max_value: int = LONG_MAX, metadata: Metadata = None, check: Optional[CheckFn] = None) -> FormProperty:
    return of(LongConverter(min_value, max_value, metadata), check)


def floating(min_value: float = FLOAT_MIN, max_value: float = FLOAT_MAX, metadata: Metadata = None, check: Optional[CheckFn] = None) -> FormProperty:
    return of(FloatConverter(min_value, max_value, metadata), check)


def boolean(metadata: Metadata = None, check: Optional[CheckFn] = None) -> FormProperty:
    return of(BooleanConverter(metadata), check)


def date(format: Optional[str] = None, metadata: Metadata = None, check: Optional[CheckFn] = None) -> FormProperty:
    """Date field; ``format`` defaults to the form's, then the settings' date format."""
    return of(DateConverter(format, metadata), check)


def date_time(format: Optional[str] = None, metadata: Metadata = None, check: Optional[CheckFn] = None) -> FormProperty:
    return of(DateTimeConverter(format, metadata), check)


def enum(enum_cls: Type, metadata: Metadata = None, check: Optional[CheckFn] = None) -> FormProperty:
    return of(EnumConverter(enum_cls, metadata), check)


def list_of(
    converter: Converter,
    separator: Optional[str] = None,
    metadata: Metadata = None,
    check: Optional[CheckFn] = None,
    max_length: Optional[int] = None,
) -> PrimitiveListProperty:
    """List of scalars. Needs a data source supporting primitive lists.

    ``max_length`` caps the length of a raw string value before it is split.
    """
    return PrimitiveListProperty(converter, separator, metadata, check, max_length=max_length)


def bean_of(form_cls: Type, check: Optional[CheckFn] = None) -> BeanProperty:
    """Nested form. Needs a data source supporting nested objects."""
    return BeanProperty(form_cls, check)


def beans_of(form_cls: Type, metadata: Metadata = None, check: Optional[CheckFn] = None) -> ListBeanProperty:
    """List of nested forms. Needs a data source supporting nested lists."""
    return ListBeanProperty(form_cls, metadata, check)


def inline_of(form_cls: Type, check: Optional[CheckFn] = None) -> InlineBeanProperty:
    """Sub-form reading the same keys as the enclosing form, without a prefix."""
    return InlineBeanProperty(form_cls, check)


__all__ = [
    "of",
    "string",
    "integer",
    "long",
    "floating",
    "boolean",
    "date",
    "date_time",
    "enum",
    "list_of",
    "bean_of",
    "beans_of",
    "inline_of",
    "BooleanConverter",
    "DateConverter",
    "DateTimeConverter",
    "EnumConverter",
    "FloatConverter",
    "IntConverter",
    "LongConverter",
    "StringConverter",
]
