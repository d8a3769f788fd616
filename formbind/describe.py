"""Form descriptors for documentation and introspection.

A descriptor captures the static shape of a form: per field, the key clients
send, a type tag, whether it is required, the default value's text and the
converter's constraint metadata. Descriptors are produced by
``formbind.runtime.describe`` without converting or validating anything.

``to_json_schema`` renders a form descriptor as a Draft-7 JSON Schema
document, suitable for API documentation generators.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft7Validator

from formbind.types import TypeTag


@dataclass(frozen=True)
class FieldType:
    """Descriptor of a single scalar field.

    Attributes:
        name: Resolved data key
        type: Type tag (see TypeTag) or a composite description
        required: Whether absence is a violation
        default_value: Text of the default value, if any
        metadata: Converter constraints and user-supplied documentation
    """
    name: str
    type: str
    required: bool = False
    default_value: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    # Typed default for JSON Schema; not part of the serialized descriptor
    default: Any = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "required": self.required,
        }
        if self.default_value is not None:
            result["defaultValue"] = self.default_value
        if self.metadata:
            result["metadata"] = self.metadata
        return result


@dataclass(frozen=True)
class ListFieldType(FieldType):
    """Descriptor of a primitive list field; ``inner`` describes one element."""
    inner: Optional[FieldType] = None

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.inner is not None:
            result["inner"] = self.inner.to_dict()
        return result


@dataclass(frozen=True)
class BeanFieldType(FieldType):
    """Descriptor of a nested form (or of a top-level form)."""
    form: Optional[type] = None
    fields: Tuple[FieldType, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["fields"] = [f.to_dict() for f in self.fields]
        return result


@dataclass(frozen=True)
class InlineBeanFieldType(BeanFieldType):
    """Descriptor of a form embedded over its parent's data, without a key prefix."""


@dataclass(frozen=True)
class ListBeanFieldType(FieldType):
    """Descriptor of a list of nested forms."""
    inner: Optional[BeanFieldType] = None

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.inner is not None:
            result["inner"] = self.inner.to_dict()
        return result


def scalar(
    name: str,
    type_tag: TypeTag,
    metadata: Dict[str, Any],
    required: bool = False,
    default_value: Optional[str] = None,
    default: Any = None,
) -> FieldType:
    return FieldType(name, type_tag.value, required, default_value, metadata, default)


def list_of(name: str, metadata: Dict[str, Any], inner: FieldType) -> ListFieldType:
    return ListFieldType(name, f"array of {inner.type}", False, "[]", metadata, inner=inner)


def bean(name: str, form: type, required: bool, metadata: Dict[str, Any], fields: Tuple[FieldType, ...]) -> BeanFieldType:
    return BeanFieldType(name, f"object({form.__name__})", required, None, metadata, form=form, fields=fields)


def list_of_beans(name: str, metadata: Dict[str, Any], inner: BeanFieldType) -> ListBeanFieldType:
    return ListBeanFieldType(name, f"array of {inner.type}", False, "[]", metadata, inner=inner)


def inline(name: str, form: type, metadata: Dict[str, Any], fields: Tuple[FieldType, ...]) -> InlineBeanFieldType:
    return InlineBeanFieldType(name, f"inline({form.__name__})", True, None, metadata, form=form, fields=fields)


_NUMERIC = {
    TypeTag.INT.value: "integer",
    TypeTag.LONG.value: "integer",
    TypeTag.FLOAT.value: "number",
}


def _scalar_schema(ft: FieldType) -> Dict[str, Any]:
    meta = ft.metadata
    if ft.type == TypeTag.STRING.value:
        schema: Dict[str, Any] = {"type": "string"}
        if "pattern" in meta:
            schema["pattern"] = meta["pattern"]
        if "maxLength" in meta:
            schema["maxLength"] = meta["maxLength"]
    elif ft.type in _NUMERIC:
        schema = {"type": _NUMERIC[ft.type], "minimum": meta["min"], "maximum": meta["max"]}
    elif ft.type == TypeTag.BOOLEAN.value:
        schema = {"type": "boolean"}
    elif ft.type in (TypeTag.DATE.value, TypeTag.DATETIME.value):
        schema = {
            "type": "string",
            "description": f"{ft.type} in format {meta['format']}",
            "examples": [meta["example"]],
        }
    elif ft.type == TypeTag.ENUM.value:
        values = meta["values"]
        schema = {
            "type": "integer",
            "enum": sorted(values),
            "description": ", ".join(f"{i}={values[i]}" for i in sorted(values)),
        }
    else:
        schema = {}
    return schema


def _field_schema(ft: FieldType) -> Dict[str, Any]:
    if isinstance(ft, BeanFieldType):
        schema = _object_schema(ft)
    elif isinstance(ft, ListBeanFieldType):
        schema = {"type": "array", "items": _object_schema(ft.inner)}  # type: ignore[arg-type]
    elif isinstance(ft, ListFieldType):
        schema = {"type": "array", "items": _scalar_schema(ft.inner)}  # type: ignore[arg-type]
    else:
        schema = _scalar_schema(ft)
        if ft.default is not None:
            schema["default"] = ft.default
    return schema


def _flatten(fields: Tuple[FieldType, ...]) -> List[FieldType]:
    # Inline forms share their parent's keys
    flat: List[FieldType] = []
    for f in fields:
        if isinstance(f, InlineBeanFieldType):
            flat.extend(_flatten(f.fields))
        else:
            flat.append(f)
    return flat


def _object_schema(ft: BeanFieldType) -> Dict[str, Any]:
    fields = _flatten(ft.fields)
    properties = {f.name: _field_schema(f) for f in fields}
    required: List[str] = [f.name for f in fields if f.required]
    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    if ft.form is not None:
        schema["title"] = ft.form.__name__
    return schema


def to_json_schema(descriptor: BeanFieldType) -> Dict[str, Any]:
    """Render a form descriptor as a Draft-7 JSON Schema.

    Args:
        descriptor: A descriptor returned by ``formbind.runtime.describe``

    Returns:
        The JSON Schema document

    Raises:
        jsonschema.SchemaError: If the rendered document is not valid Draft-7
    """
    schema = {"$schema": "http://json-schema.org/draft-07/schema#", **_object_schema(descriptor)}
    Draft7Validator.check_schema(schema)
    return schema


__all__ = [
    "FieldType",
    "ListFieldType",
    "BeanFieldType",
    "InlineBeanFieldType",
    "ListBeanFieldType",
    "to_json_schema",
]
