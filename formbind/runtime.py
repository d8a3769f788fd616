"""Schema engine for formbind.

This module provides the process-wide schema cache and the public entry
points used by callers and by request binders:

- create(form_cls, data, eager): instantiate a form, optionally validating it
- validate(form): raise the first Violation in declaration order
- check(form): return the first Violation (or None) instead of raising
- describe(form_cls): static descriptor of a form, for documentation

Field discovery walks a form class's MRO, base classes first, collecting the
property declarations of each class body in declaration order. It runs once
per form class; the resulting FormSchema is cached for the life of the
process.

Usage:
    >>> from formbind import Form, MapFormData, fields
    >>> class AgeForm(Form):
    ...     age = fields.integer(0, 10)
    >>> create(AgeForm, MapFormData({"age": "8"})).age
    8
"""

import threading
from typing import TYPE_CHECKING, Dict, Optional, Tuple, Type, TypeVar

import structlog

from formbind.config import get_settings
from formbind.data import EMPTY_DATA, FormData
from formbind.describe import BeanFieldType, FieldType, bean
from formbind.errors import Violation
from formbind.properties import CachedProperty

if TYPE_CHECKING:
    from formbind.form import Form

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound="Form")


def _discover(form_cls: type) -> Tuple[Tuple[str, CachedProperty], ...]:
    """Collect field declarations, base classes first.

    Raises:
        TypeError: If a field is declared under a name the Form base class uses
    """
    reserved = getattr(form_cls, "reserved_names", frozenset())
    found: Dict[str, CachedProperty] = {}
    for klass in reversed(form_cls.__mro__):
        for name, attr in vars(klass).items():
            if isinstance(attr, CachedProperty):
                if name in reserved:
                    raise TypeError(
                        f"field {klass.__name__}.{name} shadows Form.{name}; "
                        f"declare it under another name and alias the key with .name({name!r})"
                    )
                # A redeclared field keeps the position of its first declaration
                found[name] = attr
    return tuple(found.items())


class FormSchema:
    """Discovered structure of one form class.

    Attributes:
        form_cls: The form class
        fields: (attribute name, declaration) pairs in declaration order
    """

    def __init__(self, form_cls: type) -> None:
        self.form_cls = form_cls
        self.fields = _discover(form_cls)
        self._types: Optional[Tuple[FieldType, ...]] = None
        self._metadata: Dict = {}
        self._lock = threading.RLock()

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    def validate(self, form: "Form") -> None:
        """Resolve every field in order, raising the first Violation.

        Raises:
            Violation: The first failing field, or "form is invalid" when all
                fields pass but ``form.is_valid()`` does not
        """
        error = self.check(form)
        if error is not None:
            raise error

    def check(self, form: "Form") -> Optional[Violation]:
        """Resolve every field in order and return the first Violation, if any."""
        for name in self.names:
            result = form.field(name).get()
            if result.is_failure:
                return result.error
        if not form.is_valid():
            return Violation(None, "form is invalid")
        return None

    def field_types(self) -> Tuple[FieldType, ...]:
        """Per-field descriptors, built once over an empty data source."""
        with self._lock:
            if self._types is None:
                form = self.form_cls(EMPTY_DATA)
                self._metadata = dict(form.metadata())
                self._types = tuple(form.field(name).describe() for name in self.names)
            return self._types

    def describe(self, name: str = "", required: bool = False) -> BeanFieldType:
        types = self.field_types()
        return bean(name, self.form_cls, required, self._metadata, types)


_schemas: Dict[type, FormSchema] = {}
_schemas_lock = threading.Lock()


def schema_of(form_cls: type) -> FormSchema:
    """Return the cached FormSchema of ``form_cls``, discovering it on first use."""
    schema = _schemas.get(form_cls)
    if schema is None:
        with _schemas_lock:
            schema = _schemas.get(form_cls)
            if schema is None:
                schema = _schemas[form_cls] = FormSchema(form_cls)
    return schema


def create(form_cls: Type[F], data: FormData, eager: Optional[bool] = None) -> F:
    """Instantiate ``form_cls`` over ``data``.

    Args:
        form_cls: The form class to instantiate
        data: Data source supplying raw values
        eager: Validate every field now (default: ``Settings.eager``). When
            false, fields are resolved on first access and construction never
            fails on bad input.

    Returns:
        The form instance

    Raises:
        Violation: In eager mode, the first failing field
        UnsupportedDataError: If ``data`` lacks a capability a field needs
    """
    if eager is None:
        eager = get_settings().eager
    form = form_cls(data)
    logger.debug("form_created", form=form_cls.__name__, eager=eager)
    if eager:
        error = schema_of(form_cls).check(form)
        if error is not None:
            logger.info("form_violation", form=form_cls.__name__, field=error.field, message=error.message)
            raise error
    return form


def validate(form: "Form") -> None:
    schema_of(type(form)).validate(form)


def check(form: "Form") -> Optional[Violation]:
    return schema_of(type(form)).check(form)


def describe(form_cls: type, name: str = "", required: bool = False) -> BeanFieldType:
    """Describe ``form_cls`` without converting or validating any data."""
    return schema_of(form_cls).describe(name, required)


__all__ = [
    "FormSchema",
    "schema_of",
    "create",
    "validate",
    "check",
    "describe",
]
