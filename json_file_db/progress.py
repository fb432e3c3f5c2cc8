from __future__ import annotations
from typing import Any, Callable, Dict, Optional

ProgressCallback = Callable[[Dict[str, Any]], None]


class Progress:
    """
    Thin wrapper over an optional on_progress callback.
    Events are dicts: {"phase": str, "pct": int, "msg": str}.
    """
    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        self._cb = callback

    def emit(self, phase: str, pct: int, msg: str = "") -> None:
        if self._cb is None:
            return
        self._cb({"phase": phase, "pct": int(max(0, min(100, pct))), "msg": msg})

    def start(self, op: str, msg: str = "") -> None:
        self.emit(f"{op}.start", 0, msg)

    def done(self, op: str, msg: str = "") -> None:
        self.emit(f"{op}.done", 100, msg)
