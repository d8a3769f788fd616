"""The Form base class.

A form is declared as a class whose body assigns field declarations (see
``formbind.fields``). Each instance binds those declarations to one data
source; values are converted and checked lazily, on first read, and cached.

Usage:
    >>> from formbind import MapFormData, fields
    >>> class InnerForm(Form):
    ...     id = fields.integer().required()
    ...     name = fields.string().required()
    >>> form = InnerForm(MapFormData({"id": "1", "name": "x"}))
    >>> repr(form)
    'InnerForm(FAIL, FAIL)'
    >>> form.id, form.name
    (1, 'x')
    >>> repr(form)
    'InnerForm(1, x)'
"""

from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Tuple

from formbind import keys
from formbind.config import get_settings
from formbind.data import FormData
from formbind.describe import BeanFieldType
from formbind.errors import Violation
from formbind.properties import CachedProperty
from formbind.runtime import schema_of
from formbind.types import KeyGetter


class Form:
    """Base class for declarative, lazily validated forms.

    Class attributes:
        key_resolver: Default key resolver for fields that set none
        date_format: Default strptime pattern for date fields (None: settings)
        datetime_format: Default strptime pattern for date-time fields (None: settings)
    """

    key_resolver: ClassVar[KeyGetter] = keys.identity
    date_format: ClassVar[Optional[str]] = None
    datetime_format: ClassVar[Optional[str]] = None

    # Names Form itself uses; a field declared under one of them is rejected
    reserved_names: ClassVar[FrozenSet[str]] = frozenset({
        "data", "properties", "field", "bound", "validate", "check", "is_valid",
        "metadata", "to_dict", "formats", "describe_schema", "key_resolver",
        "date_format", "datetime_format", "reserved_names",
    })

    def __init__(self, data: FormData) -> None:
        self._data = data
        self._properties: Dict[str, CachedProperty] = {}
        self._by_declaration: Dict[CachedProperty, CachedProperty] = {}
        for name, declaration in schema_of(type(self)).fields:
            bound = declaration.bind(self, data, name)
            self._properties[name] = bound
            self._by_declaration[declaration] = bound

    @classmethod
    def formats(cls) -> Tuple[str, str]:
        """Effective (date, datetime) default formats for this form class."""
        settings = get_settings()
        return (
            cls.date_format or settings.date_format,
            cls.datetime_format or settings.datetime_format,
        )

    @classmethod
    def describe_schema(cls, name: str = "", required: bool = False) -> BeanFieldType:
        return schema_of(cls).describe(name, required)

    @property
    def data(self) -> FormData:
        return self._data

    @property
    def properties(self) -> List[CachedProperty]:
        return list(self._properties.values())

    def field(self, name: str) -> CachedProperty:
        """The bound property behind attribute ``name``."""
        return self._properties[name]

    def bound(self, declaration: CachedProperty) -> CachedProperty:
        """The bound property created from ``declaration`` for this instance."""
        return self._by_declaration[declaration]

    def validate(self) -> None:
        schema_of(type(self)).validate(self)

    def check(self) -> Optional[Violation]:
        return schema_of(type(self)).check(self)

    def is_valid(self) -> bool:
        """Whole-form predicate, evaluated after every field has passed."""
        return True

    def metadata(self) -> Dict[str, Any]:
        """Extra documentation attached to this form's descriptor."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Resolve every field and return plain values keyed by attribute name.

        Raises:
            Violation: The first failing field
        """
        self.validate()
        return {name: _plain(prop.value) for name, prop in self._properties.items()}

    def __repr__(self) -> str:
        values = []
        for prop in self._properties.values():
            result = prop.peek()
            values.append(str(result.value) if result is not None and result.is_success else "FAIL")
        return f"{type(self).__name__}({', '.join(values)})"


def _plain(value: Any) -> Any:
    if isinstance(value, Form):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


__all__ = [
    "Form",
]
