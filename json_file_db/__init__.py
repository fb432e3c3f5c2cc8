from .database import Database, open_database, resolve_root
from .collection import Collection
from .errors import (
    JsonFileDBError,
    ValidationError,
    IOFailureError,
    CorruptStorageError,
    NoInsertYetError,
    NotBoundError,
    LockTimeoutError,
)

__all__ = [
    "Database",
    "open_database",
    "resolve_root",
    "Collection",
    "JsonFileDBError",
    "ValidationError",
    "IOFailureError",
    "CorruptStorageError",
    "NoInsertYetError",
    "NotBoundError",
    "LockTimeoutError",
]
