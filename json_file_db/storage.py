from __future__ import annotations
import logging
import os
import tempfile
from pathlib import Path

from .codec import EMPTY
from .errors import IOFailureError

log = logging.getLogger(__name__)


class FileStorage:
    """
    Whole-file I/O for one collection file.
    Writes go to a temp file in the same directory and are renamed onto the
    target, so readers observe either the old or the new contents.
    """
    def __init__(self, path: str | os.PathLike, *, fsync: bool = True) -> None:
        self.path = Path(path)
        self.fsync = fsync

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> bytes:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return EMPTY
        except OSError as exc:
            raise IOFailureError(f"cannot read {self.path}: {exc}") from exc

    def ensure(self) -> bool:
        """
        Materialize the file as an empty array if it is absent.
        Returns True when the file was created.
        """
        if self.path.exists():
            return False
        log.debug("materializing empty collection file %s", self.path)
        self.store(EMPTY)
        return True

    def store(self, data: bytes) -> None:
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                if self.fsync:
                    os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as exc:
            raise IOFailureError(f"cannot write {self.path}: {exc}") from exc
        finally:
            if tmp_path is not None:
                self._discard(tmp_path)
        if self.fsync:
            # Contents already replaced; a directory sync failure is only logged
            try:
                self._fsync_dir()
            except OSError as exc:
                log.warning("directory fsync failed for %s: %s", self.path.parent, exc)
        log.debug("stored %d bytes to %s", len(data), self.path)

    def _fsync_dir(self) -> None:
        # Directory fds are not available on Windows
        if not hasattr(os, "O_DIRECTORY"):
            return
        dir_fd = os.open(self.path.parent, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    @staticmethod
    def _discard(tmp_path: str) -> None:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            log.warning("could not remove temp file %s: %s", tmp_path, exc)
