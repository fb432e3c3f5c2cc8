"""
Record codec: a collection's full record set <-> UTF-8 JSON array of objects.
"""
from __future__ import annotations
import json
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from .errors import CorruptStorageError, ValidationError

EMPTY = b"[]"


def decode(data: bytes) -> List[Dict[str, Any]]:
    try:
        records = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CorruptStorageError(f"invalid JSON in collection file: {exc}") from exc
    if not isinstance(records, list):
        raise CorruptStorageError(
            f"top-level value must be an array, got {type(records).__name__}"
        )
    for pos, rec in enumerate(records):
        if not isinstance(rec, dict):
            raise CorruptStorageError(
                f"element {pos} must be an object, got {type(rec).__name__}"
            )
    return records


def check_keys(value: Any, where: str = "record") -> None:
    """
    Reject non-string object keys anywhere inside `value`; json.dumps would
    coerce them to strings and collide with existing string keys.
    """
    if isinstance(value, Mapping):
        for k, v in value.items():
            if not isinstance(k, str):
                raise ValidationError(f"{where} keys must be strings, got {k!r}")
            check_keys(v, where)
    elif isinstance(value, (list, tuple)):
        for item in value:
            check_keys(item, where)


def encode(records: Sequence[Dict[str, Any]], indent: Optional[int] = None) -> bytes:
    separators = (",", ":") if indent is None else (",", ": ")
    try:
        # NaN/Infinity are not JSON
        text = json.dumps(
            list(records), ensure_ascii=False, indent=indent, separators=separators, allow_nan=False
        )
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"record is not JSON-serializable: {exc}") from exc
    return text.encode("utf-8")
