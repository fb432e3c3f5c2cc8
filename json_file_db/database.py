from __future__ import annotations
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from .collection import Collection
from .errors import IOFailureError, ValidationError
from .progress import Progress, ProgressCallback
from .storage import FileStorage

log = logging.getLogger(__name__)

_DEFAULT_OPTIONS: Dict[str, Any] = {
    "fsync": True,
    "indent": None,
    "lock_timeout": None,
    "extension": ".json",
}


def resolve_root(name: str, root_path: str | os.PathLike | None = None) -> Path:
    """
    Database directory: root_path as given, or <cwd>/<name> when omitted.
    The directory is created (with parents) if missing.
    """
    if root_path is None or str(root_path) == "":
        if not name:
            raise ValidationError("database name is required when no root path is given")
        root = Path.cwd() / name
    else:
        root = Path(root_path)
    root = root.expanduser().resolve()
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IOFailureError(f"cannot create database directory {root}: {exc}") from exc
    return root


class Database:
    """
    A directory of collection files, one <name>.json per collection.
    Hands out one Collection handle per name so all in-process mutations of
    a collection go through the same lock.
    """
    def __init__(
        self,
        name: str,
        root_path: str | os.PathLike | None = None,
        *,
        on_progress: Optional[ProgressCallback] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.name = name
        self._options = self._merge_options(options)
        self._progress = Progress(on_progress)
        self._progress.start("open", name)
        self.path = resolve_root(name, root_path)
        self._collections: Dict[str, Collection] = {}
        self._registry_lock = threading.Lock()
        log.debug("opened database %r at %s", name, self.path)
        self._progress.done("open", str(self.path))

    def __repr__(self) -> str:
        return f"<Database {self.name!r} at {str(self.path)!r}>"

    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._options)

    def collection(self, name: str) -> Collection:
        """Return the bound handle for collection `name`, creating its file if absent."""
        self._check_name(name)
        with self._registry_lock:
            coll = self._collections.get(name)
            if coll is None:
                storage = FileStorage(
                    self.path / f"{name}{self._options['extension']}",
                    fsync=self._options["fsync"],
                )
                coll = Collection(
                    name,
                    storage,
                    indent=self._options["indent"],
                    lock_timeout=self._options["lock_timeout"],
                    progress=self._progress,
                )
                coll.bind()
                self._collections[name] = coll
            return coll

    def collection_names(self) -> List[str]:
        ext = self._options["extension"]
        names = []
        try:
            entries = list(self.path.iterdir())
        except OSError as exc:
            raise IOFailureError(f"cannot list {self.path}: {exc}") from exc
        for entry in entries:
            if entry.name.startswith(".") or not entry.name.endswith(ext):
                continue
            if entry.is_file():
                names.append(entry.name[: -len(ext)])
        return sorted(names)

    # ----- Internal helpers -----

    @staticmethod
    def _merge_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        merged = dict(_DEFAULT_OPTIONS)
        if not options:
            return merged
        unknown = set(options) - set(_DEFAULT_OPTIONS)
        if unknown:
            raise ValidationError(f"unknown options: {', '.join(sorted(unknown))}")
        merged.update(options)
        ext = merged["extension"]
        if not isinstance(ext, str) or not ext.startswith(".") or len(ext) < 2:
            raise ValidationError(f"extension must look like '.json', got {ext!r}")
        timeout = merged["lock_timeout"]
        if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0):
            raise ValidationError(f"lock_timeout must be a non-negative number or None, got {timeout!r}")
        return merged

    @staticmethod
    def _check_name(name: str) -> None:
        if not isinstance(name, str) or not name:
            raise ValidationError("collection name must be a non-empty string")
        if name.startswith(".") or "/" in name or "\\" in name or os.sep in name or "\x00" in name:
            raise ValidationError(f"invalid collection name {name!r}")


def open_database(
    name: str,
    root_path: str | os.PathLike | None = None,
    **kwargs: Any,
) -> Database:
    return Database(name, root_path, **kwargs)
