from __future__ import annotations


class JsonFileDBError(Exception):
    """Base error for json_file_db."""


class ValidationError(JsonFileDBError):
    """Bad input: non-mapping record/query/patch, unserializable value, bad name or option."""


class IOFailureError(JsonFileDBError):
    """Filesystem error while reading, writing, renaming or creating directories."""


class CorruptStorageError(JsonFileDBError):
    """Collection file is not a JSON array of objects."""


class NoInsertYetError(JsonFileDBError):
    """last_insert_id() called before any insert on the handle."""


class NotBoundError(JsonFileDBError):
    """Operation attempted on a collection handle whose file is not materialized."""


class LockTimeoutError(JsonFileDBError):
    """Collection lock could not be acquired within the configured timeout."""
