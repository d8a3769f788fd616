"""Core type definitions for formbind.

This module defines the small vocabulary shared by every other module:
- ResolutionState: The two states of a field property's cache cell
- TypeTag: Type names reported by converters in form descriptors
- CheckFn: Post-conversion predicate signature
- KeyGetter: Key resolver signature (declared field name -> data key)
"""

from enum import Enum
from typing import Any, Callable


class ResolutionState(str, Enum):
    """Lifecycle of a single field property.

    A property starts UNRESOLVED and moves to RESOLVED on the first read.
    The transition happens once; RESOLVED is terminal.
    """
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"


class TypeTag(str, Enum):
    """Type names used in descriptors and JSON Schema export."""
    STRING = "string"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    ENUM = "enum"
    LIST = "list"


CheckFn = Callable[[Any], bool]
KeyGetter = Callable[[str], str]


__all__ = [
    "ResolutionState",
    "TypeTag",
    "CheckFn",
    "KeyGetter",
]
