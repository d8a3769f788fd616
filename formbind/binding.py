"""Request binding: turn web request parameters into a validated form.

Web frameworks hand over query strings, form bodies and path variables as
multi-valued mappings. ``flatten_params`` collapses them into a single-valued
dict (first value wins per key), and ``bind`` feeds the result to
``formbind.runtime.create`` in eager mode. Nothing here depends on a
particular framework: any mapping whose values may be lists, or any
multidict exposing ``getlist``, is accepted.

Usage:
    >>> from formbind import Form, fields
    >>> class PageForm(Form):
    ...     page = fields.integer(1, 1000).default(1)
    ...     userId = fields.long().required()
    >>> form = bind(PageForm, {"page": ["3", "4"]}, path_params={"userId": "7"})
    >>> form.page, form.userId
    (3, 7)
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

import structlog

from formbind.data import MapFormData
from formbind.runtime import create

logger = structlog.get_logger(__name__)

F = TypeVar("F")


def _values(source: Any) -> Iterable[Tuple[str, List[Any]]]:
    if hasattr(source, "getlist"):
        for key in dict.fromkeys(source.keys()):
            yield key, list(source.getlist(key))
        return
    for key, value in source.items():
        if isinstance(value, (list, tuple)):
            yield key, list(value)
        else:
            yield key, [value]


def flatten_params(*sources: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Collapse multi-valued parameter mappings into one single-valued dict.

    Within a source the first value of each key wins and keys without values
    are dropped. Later sources override earlier ones, so path variables
    passed last take precedence over query parameters.

    Examples:
        >>> flatten_params({"a": ["1", "2"], "b": []}, {"c": "3"})
        {'a': '1', 'c': '3'}
    """
    flat: Dict[str, Any] = {}
    for source in sources:
        if source is None:
            continue
        for key, values in _values(source):
            if values:
                flat[key] = values[0]
    return flat


def bind(
    form_cls: Type[F],
    params: Optional[Mapping[str, Any]] = None,
    path_params: Optional[Mapping[str, Any]] = None,
    eager: bool = True,
) -> F:
    """Build and (by default) fully validate a form from request parameters.

    Raises:
        Violation: The first failing field, in eager mode
    """
    flat = flatten_params(params, path_params)
    logger.debug("request_bound", form=form_cls.__name__, keys=sorted(flat))
    return create(form_cls, MapFormData(flat), eager=eager)  # type: ignore[type-var]


__all__ = [
    "flatten_params",
    "bind",
]
