from __future__ import annotations
from collections.abc import Mapping
from typing import Any, Dict, Optional

from .errors import ValidationError


def check_query(query: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Normalize a query to a plain dict. None means "match everything".
    Only flat field -> value equality is supported; values are compared
    as a whole, so a nested dict value must equal the stored one exactly.
    """
    if query is None:
        return {}
    if not isinstance(query, Mapping):
        raise ValidationError(f"query must be a mapping, got {type(query).__name__}")
    for k in query.keys():
        if not isinstance(k, str):
            raise ValidationError(f"query keys must be strings, got {k!r}")
    return dict(query)


def same_value(a: Any, b: Any) -> bool:
    """
    JSON value equality: like ==, but a bool never equals a number
    (True != 1, False != 0), at any nesting depth.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(same_value(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(same_value(x, y) for x, y in zip(a, b))
    return a == b


def matches(record: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    for k, v in query.items():
        if k not in record:
            return False
        if not same_value(record[k], v):
            return False
    return True
