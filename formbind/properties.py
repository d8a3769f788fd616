"""Field properties: the lazy, memoized unit of single-field validation.

A property declared in a form class body is an unbound *declaration*. When a
form is instantiated, each declaration is bound to the form's data source,
producing a fresh property that owns a cache cell:

    UNRESOLVED --first read--> RESOLVED(Result)

The transition fires exactly once per bound property. Later reads return the
cached Result, even if the underlying data changed. The cell is guarded by a
per-property lock so concurrent first reads resolve only once.

Variants:
- FormProperty: optional scalar (absent -> None)
- RequiredFormProperty: absent -> "<key> is required"
- DefaultValueProperty: absent -> default value, which bypasses the check
- PrimitiveListProperty: list of scalars (absent -> [])
- BeanProperty / RequiredBeanProperty: nested form (absent -> None / violation)
- ListBeanProperty: list of nested forms (absent -> [])
- InlineBeanProperty: sub-form over the same data source, no key prefix

Declarations double as descriptors: reading ``form.attr`` returns the bound
property's value, raising its Violation on failure.
"""

import copy
import threading
from typing import TYPE_CHECKING, Any, ClassVar, Generic, List, Optional, Type, TypeVar

import structlog

from formbind import describe as d
from formbind import keys
from formbind.config import get_settings
from formbind.converters import Converter
from formbind.data import FormData, SupportsNested, SupportsNestedList, SupportsPrimitiveList
from formbind.errors import UnsupportedDataError, Violation
from formbind.result import Result, invalid
from formbind.types import CheckFn, KeyGetter, ResolutionState

if TYPE_CHECKING:
    from formbind.form import Form

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class CachedProperty(Generic[T]):
    """Base class for all field properties.

    Attributes:
        attr_name: Declared attribute name, set when the owning class is created
        key: Key resolver; None means "use the form class's key_resolver"
        check_fn: Optional post-conversion predicate
        state: Current ResolutionState of the cache cell
    """

    # Capability protocol the data source must implement, if any
    capability: ClassVar[Optional[type]] = None

    def __init__(self, check: Optional[CheckFn] = None, key: Optional[KeyGetter] = None) -> None:
        self.check_fn = check
        self.key = key
        self.attr_name: Optional[str] = None
        self.data: Optional[FormData] = None
        self.state = ResolutionState.UNRESOLVED
        self._result: Optional[Result[T]] = None
        self._lock = threading.Lock()

    def __set_name__(self, owner: type, name: str) -> None:
        if self.attr_name is None:
            self.attr_name = name
        elif self.attr_name != name:
            # Declaration reused under a second name: that attribute gets its own copy
            clone = copy.copy(self)
            clone.attr_name = name
            setattr(owner, name, clone)

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return instance.bound(self).get().get()

    def name(self, key: str) -> "CachedProperty[T]":
        """Look the value up under a fixed key instead of the attribute name."""
        self.key = keys.fixed(key)
        return self

    def snake(self) -> "CachedProperty[T]":
        """Look the value up under the snake_case form of the attribute name."""
        self.key = keys.SnakeKey()
        return self

    def bind(self, form: "Form", data: FormData, name: Optional[str] = None) -> "CachedProperty[T]":
        """Clone this declaration into a fresh, unresolved property over ``data``.

        Args:
            form: The form instance being constructed
            data: Data source the property reads from
            name: Attribute name the form discovered this declaration under

        Raises:
            UnsupportedDataError: If ``data`` lacks the capability this kind needs
        """
        name = name or self.attr_name
        if self.capability is not None and not isinstance(data, self.capability):
            logger.error(
                "unsupported_form_data",
                form=type(form).__name__,
                field=name,
                capability=self.capability.__name__,
            )
            raise UnsupportedDataError(name, self.capability.__name__, data)

        bound = copy.copy(self)
        bound.attr_name = name
        bound.data = data
        bound.state = ResolutionState.UNRESOLVED
        bound._result = None
        bound._lock = threading.Lock()
        if bound.key is None:
            bound.key = type(form).key_resolver
        bound._on_bind(form)
        return bound

    def _on_bind(self, form: "Form") -> None:
        pass

    def resolve_key(self) -> str:
        resolver = self.key if self.key is not None else keys.identity
        return resolver(self.attr_name or "")

    def get(self) -> Result[T]:
        """Resolve on first call, then return the cached Result."""
        if self.state is ResolutionState.RESOLVED:
            return self._result  # type: ignore[return-value]
        with self._lock:
            if self.state is ResolutionState.UNRESOLVED:
                if self.data is None:
                    raise RuntimeError(f"field {self.attr_name!r} is not bound to any form data")
                key = self.resolve_key()
                try:
                    self._result = self._resolve(key)
                except Violation as e:
                    self._result = Result.failure(e)
                self.state = ResolutionState.RESOLVED
        return self._result  # type: ignore[return-value]

    def peek(self) -> Optional[Result[T]]:
        """The cached Result, or None while unresolved. Never resolves."""
        return self._result if self.state is ResolutionState.RESOLVED else None

    @property
    def value(self) -> T:
        return self.get().get()

    def _resolve(self, key: str) -> Result[T]:
        raise NotImplementedError

    def describe(self) -> d.FieldType:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.attr_name!r}, state={self.state.value})"


class _ScalarProperty(CachedProperty[T]):
    is_required: ClassVar[bool] = False

    def __init__(self, converter: Converter[T], check: Optional[CheckFn] = None, key: Optional[KeyGetter] = None) -> None:
        super().__init__(check, key)
        self.converter = converter

    def _on_bind(self, form: "Form") -> None:
        self.converter = self.converter.with_formats(*form.formats())

    def _resolve(self, key: str) -> Result[T]:
        raw = self.data.get(key)  # type: ignore[union-attr]
        if raw is None:
            return self._absent(key)
        return self.converter.convert(key, raw).check(key, self.check_fn)

    def _absent(self, key: str) -> Result[T]:
        return Result.success(None)  # type: ignore[arg-type]

    def default_text(self) -> Optional[str]:
        return None

    def default_raw(self) -> Any:
        return None

    def describe(self) -> d.FieldType:
        return d.scalar(
            self.resolve_key(),
            self.converter.type_tag,
            self.converter.describe(),
            required=self.is_required,
            default_value=self.default_text(),
            default=self.default_raw(),
        )


class FormProperty(_ScalarProperty[T]):
    """Optional scalar field: absent data resolves to None.

    Examples:
        >>> from formbind.converters import IntConverter
        >>> age = FormProperty(IntConverter(0, 10))
        >>> type(age.required()).__name__
        'RequiredFormProperty'
    """

    def required(self, check: Optional[CheckFn] = None) -> "RequiredFormProperty[T]":
        return RequiredFormProperty(self.converter, check, self.key)

    def default(self, value: T, check: Optional[CheckFn] = None) -> "DefaultValueProperty[T]":
        return DefaultValueProperty(self.converter, value, check, self.key)


class RequiredFormProperty(_ScalarProperty[T]):
    is_required = True

    def _absent(self, key: str) -> Result[T]:
        return invalid(key, "required")


class DefaultValueProperty(_ScalarProperty[T]):
    """Scalar field falling back to a default when the data has no value.

    The default is returned as-is: it is neither converted nor checked.
    """

    def __init__(self, converter: Converter[T], default: T, check: Optional[CheckFn] = None, key: Optional[KeyGetter] = None) -> None:
        super().__init__(converter, check, key)
        self.default_value = default

    def _absent(self, key: str) -> Result[T]:
        return Result.success(self.default_value)

    def default_text(self) -> Optional[str]:
        return str(self.default_value)

    def default_raw(self) -> Any:
        """The default as the raw value a client would send for it."""
        return self.converter.render(self.default_value)


class PrimitiveListProperty(CachedProperty[List[T]]):
    """List of scalars read through ``SupportsPrimitiveList``; absent -> []."""

    capability = SupportsPrimitiveList

    def __init__(
        self,
        converter: Converter[T],
        separator: Optional[str] = None,
        metadata: Optional[dict] = None,
        check: Optional[CheckFn] = None,
        key: Optional[KeyGetter] = None,
        max_length: Optional[int] = None,
    ) -> None:
        super().__init__(check, key)
        self.converter = converter
        self.separator = separator
        self.metadata = dict(metadata or {})
        self.max_length = max_length

    def _on_bind(self, form: "Form") -> None:
        self.converter = self.converter.with_formats(*form.formats())
        if self.separator is None:
            self.separator = get_settings().list_separator

    def _resolve(self, key: str) -> Result[List[T]]:
        if self.max_length is not None:
            raw = self.data.get(key)  # type: ignore[union-attr]
            # The cap applies to the raw string, before it is split
            if isinstance(raw, str) and len(raw) > self.max_length:
                return invalid(key)
        items = self.data.primitive_list(key, self.separator)  # type: ignore[union-attr]
        values: List[T] = []
        for item in items:
            result = self.converter.convert(key, item)
            if result.is_failure:
                return Result.failure(result.error)  # type: ignore[arg-type]
            values.append(result.value)  # type: ignore[arg-type]
        return Result.success(values).check(key, self.check_fn)

    def describe(self) -> d.FieldType:
        inner = d.scalar("", self.converter.type_tag, self.converter.describe(), required=True)
        metadata = dict(self.metadata)
        if self.max_length is not None:
            metadata.setdefault("maxLength", self.max_length)
        return d.list_of(self.resolve_key(), metadata, inner)


def _create_bean(key: str, form_cls: Type["Form"], data: FormData) -> Result["Form"]:
    form = form_cls(data)
    error = form.check()
    if error is not None:
        return Result.failure(Violation.wrap(key, error))
    return Result.success(form)


class _BeanBase(CachedProperty[T]):
    capability = SupportsNested
    is_required: ClassVar[bool] = False

    def __init__(self, form_cls: Type["Form"], check: Optional[CheckFn] = None, key: Optional[KeyGetter] = None) -> None:
        super().__init__(check, key)
        self.form_cls = form_cls

    def _resolve(self, key: str) -> Result[T]:
        sub = self.data.nested(key)  # type: ignore[union-attr]
        if sub is None:
            return self._absent(key)
        return _create_bean(key, self.form_cls, sub).check(key, self.check_fn)  # type: ignore[return-value]

    def _absent(self, key: str) -> Result[T]:
        return Result.success(None)  # type: ignore[arg-type]

    def describe(self) -> d.FieldType:
        return self.form_cls.describe_schema(self.resolve_key(), self.is_required)


class BeanProperty(_BeanBase[Optional["Form"]]):
    """Optional nested form, validated in full when first read."""

    def required(self, check: Optional[CheckFn] = None) -> "RequiredBeanProperty":
        return RequiredBeanProperty(self.form_cls, check, self.key)


class RequiredBeanProperty(_BeanBase["Form"]):
    is_required = True

    def _absent(self, key: str) -> Result["Form"]:
        return invalid(key, "required")


class ListBeanProperty(CachedProperty[List["Form"]]):
    """List of nested forms; the first failing element fails the field."""

    capability = SupportsNestedList

    def __init__(
        self,
        form_cls: Type["Form"],
        metadata: Optional[dict] = None,
        check: Optional[CheckFn] = None,
        key: Optional[KeyGetter] = None,
    ) -> None:
        super().__init__(check, key)
        self.form_cls = form_cls
        self.metadata = dict(metadata or {})

    def _resolve(self, key: str) -> Result[List["Form"]]:
        forms: List["Form"] = []
        for sub in self.data.nested_list(key):  # type: ignore[union-attr]
            result = _create_bean(key, self.form_cls, sub)
            if result.is_failure:
                return Result.failure(result.error)  # type: ignore[arg-type]
            forms.append(result.value)  # type: ignore[arg-type]
        return Result.success(forms).check(key, self.check_fn)

    def describe(self) -> d.FieldType:
        return d.list_of_beans(self.resolve_key(), self.metadata, self.form_cls.describe_schema())


class InlineBeanProperty(CachedProperty["Form"]):
    """Sub-form embedded over the parent's own data source, with no key prefix.

    The sub-form is constructed when the parent binds, so a missing data
    capability is reported at construction. It is validated on first read,
    and its violations surface unprefixed since they name the parent's keys.
    """

    def __init__(self, form_cls: Type["Form"], check: Optional[CheckFn] = None) -> None:
        super().__init__(check)
        self.form_cls = form_cls
        self.form: Optional["Form"] = None

    def _on_bind(self, form: "Form") -> None:
        self.form = self.form_cls(self.data)  # type: ignore[arg-type]

    def resolve_key(self) -> str:
        return self.attr_name or ""

    def _resolve(self, key: str) -> Result["Form"]:
        error = self.form.check()  # type: ignore[union-attr]
        if error is not None:
            return Result.failure(error)
        return Result.success(self.form).check(key, self.check_fn)  # type: ignore[arg-type]

    def describe(self) -> d.FieldType:
        schema = self.form_cls.describe_schema(self.resolve_key(), True)
        return d.inline(schema.name, self.form_cls, schema.metadata, schema.fields)


__all__ = [
    "CachedProperty",
    "FormProperty",
    "RequiredFormProperty",
    "DefaultValueProperty",
    "PrimitiveListProperty",
    "BeanProperty",
    "RequiredBeanProperty",
    "ListBeanProperty",
    "InlineBeanProperty",
]
