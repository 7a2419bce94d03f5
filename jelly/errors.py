"""Exception hierarchy shared by the build steps."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

__all__ = [
    "JellyError",
    "ConfigError",
    "ReadFailure",
    "WriteFailure",
    "OutputRootError",
    "RenderError",
    "ContentTooLarge",
    "RecursionLimitExceeded",
    "MissingLocaleKey",
]


class JellyError(Exception):
    """Base class for every error raised by the site builder."""


class ConfigError(JellyError):
    """An environment override could not be interpreted."""


class ReadFailure(JellyError):
    def __init__(self, path: Path, reason: object) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"could not read {self.path}: {reason}")


class WriteFailure(JellyError):
    def __init__(self, path: Path, reason: object) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"could not write {self.path}: {reason}")


class OutputRootError(JellyError):
    """The output root could not be created; nothing else can proceed."""


class RenderError(JellyError):
    """A single render failed; sibling renders are unaffected."""


class ContentTooLarge(RenderError):
    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"rendered output exceeds {limit} bytes")


class RecursionLimitExceeded(RenderError):
    def __init__(self, chain: Sequence[str], limit: int) -> None:
        self.chain = tuple(chain)
        self.limit = limit
        path = " -> ".join(self.chain)
        super().__init__(f"partial includes too deep or cyclic (limit {limit}): {path}")


class MissingLocaleKey(RenderError):
    def __init__(self, key: str, locale: str) -> None:
        self.key = key
        self.locale = locale
        super().__init__(f"locale {locale!r} has no key {key!r}")
