"""formbind: typed, validated forms from untyped request data.

formbind binds string- and map-shaped input (query parameters, form fields,
nested JSON-like maps) to declarative form classes:
- Converters coerce raw values and enforce range, pattern and format rules
- Field properties resolve lazily, once, and cache success or failure
- Key resolvers decouple attribute names from data keys (alias, snake_case)
- Nested forms and lists of nested forms re-enter the same engine
- Descriptors expose each form's static shape for documentation

Basic usage:
    >>> from formbind import Form, MapFormData, create, fields
    >>> class AgeForm(Form):
    ...     age = fields.integer(0, 10)
    >>> create(AgeForm, MapFormData({"age": "8"})).age
    8
"""

__version__ = "0.1.0"
__author__ = "formbind developers"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formbind import fields, keys
from formbind.binding import bind
from formbind.data import EMPTY_DATA, MapFormData, SimpleFormData
from formbind.errors import UnsupportedDataError, Violation
from formbind.form import Form
from formbind.result import Result
from formbind.runtime import check, create, describe, validate

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "Form",
    "create",
    "validate",
    "check",
    "describe",
    "bind",
    "fields",
    "keys",
    "MapFormData",
    "SimpleFormData",
    "EMPTY_DATA",
    "Violation",
    "UnsupportedDataError",
    "Result",
]
