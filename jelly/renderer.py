"""Expand include and locale directives in page templates.

Two directives are recognised anywhere in the text:

``<!-- %include.NAME% -->``
    replaced by partial ``NAME``, itself fully rendered with the same locale.
``%locale.KEY%``
    replaced by ``KEY`` from the active locale table, or nothing.

Scanning is purely textual and left to right; there is no escape syntax.
A marker whose terminator never appears is copied as literal text.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .config import (
    DEFAULT_MAX_INCLUDE_DEPTH,
    DEFAULT_MAX_OUTPUT_BYTES,
    MAX_INCLUDE_DEPTH_CEILING,
)
from .errors import ContentTooLarge, MissingLocaleKey, RecursionLimitExceeded
from .locales import LocaleTable, lookup
from .partials import PartialLoader

INCLUDE_OPEN = "<!-- %include."
INCLUDE_CLOSE = "% -->"
LOCALE_OPEN = "%locale."
LOCALE_CLOSE = "%"


class _OutputBuffer:
    """Append-only buffer that refuses to grow past ``limit`` UTF-8 bytes."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.size = 0
        self._chunks: List[str] = []

    def write(self, piece: str) -> None:
        if not piece:
            return
        size = self.size + len(piece.encode("utf-8"))
        if size > self.limit:
            raise ContentTooLarge(self.limit)
        self._chunks.append(piece)
        self.size = size

    def getvalue(self) -> str:
        return "".join(self._chunks)


def _next_marker(text: str, pos: int) -> int:
    include_at = text.find(INCLUDE_OPEN, pos)
    locale_at = text.find(LOCALE_OPEN, pos)
    if include_at < 0:
        return locale_at
    if locale_at < 0:
        return include_at
    return min(include_at, locale_at)


class Renderer:
    """Render template text against an optional locale table.

    A renderer holds no per-render state, so one instance can serve many
    threads at once.
    """

    def __init__(
        self,
        partials: PartialLoader,
        *,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
        strict_locales: bool = False,
    ) -> None:
        self.partials = partials
        self.max_output_bytes = max_output_bytes
        self.max_include_depth = min(max_include_depth, MAX_INCLUDE_DEPTH_CEILING)
        self.strict_locales = strict_locales

    def render(self, text: str, locale: Optional[LocaleTable] = None) -> str:
        """Return *text* with every directive expanded.

        Raises:
            ContentTooLarge: the output would exceed ``max_output_bytes``.
            RecursionLimitExceeded: includes form a cycle or nest deeper
                than ``max_include_depth`` (capped at
                ``MAX_INCLUDE_DEPTH_CEILING``).
            MissingLocaleKey: strict mode only, for an unknown key.
        """
        out = _OutputBuffer(self.max_output_bytes)
        try:
            self._expand(text, locale, (), out)
        except RecursionError:
            raise RecursionLimitExceeded((), self.max_include_depth) from None
        return out.getvalue()

    def _expand(
        self,
        text: str,
        locale: Optional[LocaleTable],
        chain: Tuple[str, ...],
        out: _OutputBuffer,
    ) -> None:
        pos = 0
        length = len(text)
        while pos < length:
            marker = _next_marker(text, pos)
            if marker < 0:
                out.write(text[pos:])
                return
            out.write(text[pos:marker])
            pos = marker

            if text.startswith(INCLUDE_OPEN, pos):
                start = pos + len(INCLUDE_OPEN)
                end = text.find(INCLUDE_CLOSE, start)
                if end < 0:
                    out.write(text[pos])
                    pos += 1
                    continue
                self._include(text[start:end], locale, chain, out)
                pos = end + len(INCLUDE_CLOSE)
            else:
                start = pos + len(LOCALE_OPEN)
                end = text.find(LOCALE_CLOSE, start)
                if end < 0:
                    out.write(text[pos])
                    pos += 1
                    continue
                self._substitute(text[start:end], locale, out)
                pos = end + len(LOCALE_CLOSE)

    def _include(
        self,
        name: str,
        locale: Optional[LocaleTable],
        chain: Tuple[str, ...],
        out: _OutputBuffer,
    ) -> None:
        nested = chain + (name,)
        if name in chain or len(nested) > self.max_include_depth:
            raise RecursionLimitExceeded(nested, self.max_include_depth)
        source = self.partials.load(name)
        if source is None:
            return
        self._expand(source, locale, nested, out)

    def _substitute(self, key: str, locale: Optional[LocaleTable], out: _OutputBuffer) -> None:
        value = lookup(locale, key)
        if value is None:
            if self.strict_locales and locale is not None:
                raise MissingLocaleKey(key, locale.code)
            return
        out.write(value)
