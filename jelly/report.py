"""Collect warnings and counters for one build run."""

from __future__ import annotations

import datetime as _dt
import json
import pathlib
import sys
import threading
from typing import Sequence

__all__ = ["BuildReport"]


def _utc_now_iso() -> str:
    """Return a second-precision UTC timestamp with a ``Z`` suffix."""

    now = _dt.datetime.now(_dt.timezone.utc).replace(microsecond=0, tzinfo=None)
    return now.isoformat() + "Z"


def _unique_errors(messages: Sequence[str], limit: int = 20) -> list[str]:
    # Messages are already stripped on the way in; keep first occurrences.
    return list(dict.fromkeys(messages))[:limit]


class BuildReport:
    """Accumulate build warnings and counters; optionally persist them.

    Worker threads share one report, so every mutation goes through a lock.
    """

    def __init__(self, name: str = "build") -> None:
        self.name = name
        self.errors: list[str] = []
        self.locales: list[str] = []
        self.pages_found = 0
        self.pages_written = 0
        self.files_copied = 0
        self._lock = threading.Lock()

    def record_error(self, message: str) -> None:
        """Keep *message* unless it is blank."""
        message = message.strip()
        if not message:
            return
        with self._lock:
            self.errors.append(message)

    def warn(self, message: str) -> None:
        """Record *message* and echo it to standard error."""
        self.record_error(message)
        print(f"Warning: {message}", file=sys.stderr)

    def add_pages_found(self, count: int = 1) -> None:
        with self._lock:
            self.pages_found += count

    def add_page_written(self) -> None:
        with self._lock:
            self.pages_written += 1

    def add_files_copied(self, count: int) -> None:
        with self._lock:
            self.files_copied += count

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def summary(self) -> str:
        return (
            f"{self.pages_written} page(s) written from {self.pages_found} source(s); "
            f"{self.files_copied} static file(s) copied; {len(self.errors)} warning(s)"
        )

    def write(self, health_dir: pathlib.Path) -> pathlib.Path:
        path = pathlib.Path(health_dir) / f"{self.name}.json"
        with self._lock:
            payload = {
                "finished_at": _utc_now_iso(),
                "pages_found": self.pages_found,
                "pages_written": self.pages_written,
                "files_copied": self.files_copied,
                "locales": list(self.locales),
                "errors": _unique_errors(self.errors),
            }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        return path
