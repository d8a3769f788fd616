"""Data sources: where field properties look up their raw values.

The engine only needs ``get(key)``. Three optional capabilities let a data
source feed the composite field kinds:

- SupportsNested.nested(key): a data source scoped to one nested object
- SupportsNestedList.nested_list(key): one data source per list element
- SupportsPrimitiveList.primitive_list(key, separator): raw list items

Capabilities are structural protocols checked once, when a form binds its
fields. A missing capability is a wiring error (UnsupportedDataError), not a
validation failure. Malformed input found by a capability (a scalar where a
nested object is expected) is reported by raising a Violation, which the
calling property caches as that field's result.

Two concrete sources are provided:

- SimpleFormData: flat lookups only
- MapFormData: flat or nested mappings, with every capability. Nested objects
  are read from a mapping value or from ``"<key>."``-prefixed flat keys;
  nested lists from a sequence of mappings or ``"<key>[<i>]."`` flat keys.

Examples:
    >>> data = MapFormData({"inner.id": 1, "inner.name": "x"})
    >>> data.nested("inner").get("name")
    'x'
    >>> MapFormData({"ids": "1, 2"}).primitive_list("ids", ",")
    ['1', '2']
"""

import re
from typing import Any, Dict, List, Mapping, Optional

from typing_extensions import Protocol, runtime_checkable

from formbind.errors import Violation


@runtime_checkable
class FormData(Protocol):
    def get(self, key: str) -> Any:
        ...


@runtime_checkable
class SupportsNested(Protocol):
    def nested(self, key: str) -> Optional[FormData]:
        ...


@runtime_checkable
class SupportsNestedList(Protocol):
    def nested_list(self, key: str) -> List[FormData]:
        ...


@runtime_checkable
class SupportsPrimitiveList(Protocol):
    def primitive_list(self, key: str, separator: str) -> List[Any]:
        ...


class SimpleFormData:
    """Flat key -> value lookups over a mapping, with no optional capability."""

    def __init__(self, mapping: Optional[Mapping[str, Any]] = None) -> None:
        self._map: Dict[str, Any] = dict(mapping or {})

    def get(self, key: str) -> Any:
        return self._map.get(key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._map!r})"


class MapFormData(SimpleFormData):
    """Mapping-backed data source implementing every capability."""

    def nested(self, key: str) -> Optional["MapFormData"]:
        value = self._map.get(key)
        if value is not None:
            if isinstance(value, Mapping):
                return MapFormData(value)
            raise Violation.invalid(key)

        prefix = key + "."
        scoped = {k[len(prefix):]: v for k, v in self._map.items() if k.startswith(prefix)}
        return MapFormData(scoped) if scoped else None

    def nested_list(self, key: str) -> List["MapFormData"]:
        value = self._map.get(key)
        if value is None:
            return self._indexed(key)
        if not isinstance(value, (list, tuple)):
            raise Violation.invalid(key)

        items: List[MapFormData] = []
        for item in value:
            if not isinstance(item, Mapping):
                raise Violation.invalid(key)
            items.append(MapFormData(item))
        return items

    def primitive_list(self, key: str, separator: str) -> List[Any]:
        value = self._map.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            return [token.strip() for token in value.split(separator)]
        if isinstance(value, (list, tuple)):
            if any(item is None for item in value):
                raise Violation.invalid(key)
            return list(value)
        raise Violation.invalid(key)

    def _indexed(self, key: str) -> List["MapFormData"]:
        pattern = re.compile(rf"^{re.escape(key)}\[(\d+)\]\.(.+)$")
        groups: Dict[int, Dict[str, Any]] = {}
        for k, v in self._map.items():
            match = pattern.match(k)
            if match is not None:
                groups.setdefault(int(match.group(1)), {})[match.group(2)] = v
        return [MapFormData(groups[i]) for i in sorted(groups)]


class EmptyFormData:
    """Sentinel source with every capability and no values.

    Used to build throwaway form instances for descriptors.
    """

    def get(self, key: str) -> Any:
        return None

    def nested(self, key: str) -> Optional[FormData]:
        return None

    def nested_list(self, key: str) -> List[FormData]:
        return []

    def primitive_list(self, key: str, separator: str) -> List[Any]:
        return []

    def __repr__(self) -> str:
        return "EMPTY_DATA"


EMPTY_DATA = EmptyFormData()


__all__ = [
    "FormData",
    "SupportsNested",
    "SupportsNestedList",
    "SupportsPrimitiveList",
    "SimpleFormData",
    "MapFormData",
    "EmptyFormData",
    "EMPTY_DATA",
]
