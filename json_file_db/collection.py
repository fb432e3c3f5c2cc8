from __future__ import annotations
import copy
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional

from .codec import check_keys, decode, encode
from .errors import NoInsertYetError, NotBoundError, ValidationError
from .locks import CollectionLock
from .progress import Progress
from .query import check_query, matches
from .storage import FileStorage
from .utils import new_id

_UNSET = object()


class Collection:
    """
    Handle for one collection file: an ordered list of records stored as a
    JSON array. Mutations serialize through the handle's lock; reads take a
    snapshot of the file without locking.

    A handle starts unbound; bind() materializes the file. Database.collection()
    returns bound handles.
    """
    def __init__(
        self,
        name: str,
        storage: FileStorage,
        *,
        indent: Optional[int] = None,
        lock_timeout: Optional[float] = None,
        progress: Optional[Progress] = None,
    ) -> None:
        self.name = name
        self._fs = storage
        self._indent = indent
        self._lock = CollectionLock(name, timeout=lock_timeout)
        self._progress = progress or Progress()
        self._bound = False
        self._last_insert_id: Any = _UNSET

    def __repr__(self) -> str:
        state = "bound" if self._bound else "unbound"
        return f"<Collection {self.name!r} {state} at {str(self.path)!r}>"

    @property
    def path(self) -> Path:
        return self._fs.path

    @property
    def bound(self) -> bool:
        return self._bound

    def bind(self) -> "Collection":
        if not self._bound:
            created = self._fs.ensure()
            self._bound = True
            self._progress.emit("collection.bind", 100, f"{self.name} ({'created' if created else 'existing'})")
        return self

    # ----- Reads -----

    def all(self) -> List[Dict[str, Any]]:
        self._require_bound()
        return self._read()

    def find(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        q = check_query(query)
        return [rec for rec in self.all() if matches(rec, q)]

    def find_one(self, query: Optional[Mapping[str, Any]] = None) -> Optional[Dict[str, Any]]:
        q = check_query(query)
        for rec in self.all():
            if matches(rec, q):
                return rec
        return None

    def get(self, record_id: Any) -> Optional[Dict[str, Any]]:
        return self.find_one({"id": record_id})

    def count(self, query: Optional[Mapping[str, Any]] = None) -> int:
        return len(self.find(query))

    def last_insert_id(self) -> Any:
        if self._last_insert_id is _UNSET:
            raise NoInsertYetError(f"no insert executed on collection {self.name!r}")
        return self._last_insert_id

    # ----- Mutations -----

    def insert(self, record: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Append a record, assigning a generated id when it has none.
        A caller-supplied id is stored verbatim; ids are not checked for
        uniqueness. The caller's mapping is left untouched.
        The progress "insert.start" event fires only once the lock is held.
        """
        self._require_bound()
        if not isinstance(record, Mapping):
            raise ValidationError(f"record must be a mapping, got {type(record).__name__}")
        check_keys(record, "record")
        doc = copy.deepcopy(dict(record))
        if doc.get("id") is None:
            doc["id"] = new_id()

        with self._lock:
            self._progress.start("insert", self.name)
            records = self._read()
            records.append(doc)
            self._write(records)
            self._last_insert_id = doc["id"]
        self._progress.done("insert", str(doc["id"]))
        return copy.deepcopy(doc)

    def update(self, query: Optional[Mapping[str, Any]], patch: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """
        Merge patch keys into every matching record and store the result.
        Returns the whole collection after the update, not just the matches.
        """
        self._require_bound()
        q = check_query(query)
        if not isinstance(patch, Mapping):
            raise ValidationError(f"patch must be a mapping, got {type(patch).__name__}")
        check_keys(patch, "patch")
        patch = copy.deepcopy(dict(patch))

        with self._lock:
            self._progress.start("update", self.name)
            records = self._read()
            n = 0
            for rec in records:
                if matches(rec, q):
                    rec.update(copy.deepcopy(patch))
                    n += 1
            self._write(records)
        self._progress.done("update", f"{n} matched")
        return records

    def delete(self, query: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Remove matching records; returns the removed ones."""
        self._require_bound()
        q = check_query(query)

        with self._lock:
            self._progress.start("delete", self.name)
            kept: List[Dict[str, Any]] = []
            removed: List[Dict[str, Any]] = []
            for rec in self._read():
                (removed if matches(rec, q) else kept).append(rec)
            self._write(kept)
        self._progress.done("delete", f"{len(removed)} removed")
        return removed

    # ----- Internal helpers -----

    def _require_bound(self) -> None:
        if not self._bound:
            raise NotBoundError(f"collection {self.name!r} is not bound; call bind() first")

    def _read(self) -> List[Dict[str, Any]]:
        # Freshly decoded, so callers own the returned dicts
        return decode(self._fs.load())

    def _write(self, records: List[Dict[str, Any]]) -> None:
        self._fs.store(encode(records, indent=self._indent))
