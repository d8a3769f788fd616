"""Key resolvers: map a field's declared name to the key looked up in the data.

Examples:
    >>> identity("name")
    'name'
    >>> fixed("a")("abc")
    'a'
    >>> snake_case("someThingElse")
    'some_thing_else'
"""

import re
import threading
from typing import Dict

from formbind.types import KeyGetter

_UPPER = re.compile(r"([A-Z])")


def identity(name: str) -> str:
    return name


def fixed(key: str) -> KeyGetter:
    """Resolver that ignores the declared name and always yields ``key``."""

    def resolve(name: str) -> str:
        return key

    resolve.__qualname__ = f"fixed({key!r})"
    return resolve


def snake_case(name: str) -> str:
    """camelCase -> snake_case: every uppercase letter becomes ``_`` + lowercase."""
    return _UPPER.sub(lambda m: "_" + m.group(1).lower(), name)


class SnakeKey:
    """Snake-case resolver that memoizes its transform per instance."""

    def __init__(self) -> None:
        self._cache: Dict[str, str] = {}
        self._lock = threading.Lock()

    def __call__(self, name: str) -> str:
        key = self._cache.get(name)
        if key is None:
            with self._lock:
                key = self._cache.setdefault(name, snake_case(name))
        return key

    def __repr__(self) -> str:
        return "SnakeKey()"


__all__ = [
    "identity",
    "fixed",
    "snake_case",
    "SnakeKey",
]
