"""Load ``locale/*.json`` files into lookup tables.

Locale files are flat ``{"key": "value"}`` documents. Only string values at
the top level are picked up; nested objects, arrays and other literals are
skipped without complaint. This is a quote scanner, not a JSON parser, so a
file with trailing commas or comments still yields its pairs.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from .errors import ReadFailure
from .report import BuildReport

LOCALE_SUFFIX = ".json"
MAX_LOCALE_FILE_BYTES = 100_000

_TOKEN_RE = re.compile(
    r'"(?P<string>(?:[^"\\]|\\.)*)"'
    r"|(?P<open>[{\[])"
    r"|(?P<close>[}\]])"
    r"|(?P<colon>:)"
    r"|(?P<other>[^\s\"{}\[\]:]+)",
    re.DOTALL,
)


@dataclass(frozen=True)
class LocaleTable:
    """Key to string mapping for one locale code."""

    code: str
    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def lookup(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class LocaleSet:
    """Ordered locale tables plus whether the locale directory existed."""

    tables: Tuple[LocaleTable, ...] = ()
    present: bool = False

    def __iter__(self) -> Iterator[LocaleTable]:
        return iter(self.tables)

    def __len__(self) -> int:
        return len(self.tables)

    def __bool__(self) -> bool:
        return bool(self.tables)

    @property
    def codes(self) -> List[str]:
        return [table.code for table in self.tables]

    def get(self, code: str) -> Optional[LocaleTable]:
        for table in self.tables:
            if table.code == code:
                return table
        return None


def lookup(table: Optional[LocaleTable], key: str) -> Optional[str]:
    """Return the value for *key*, or ``None`` when absent or no table is active."""
    if table is None:
        return None
    return table.lookup(key)


def _decode(raw: str) -> str:
    if "\\" not in raw:
        return raw
    try:
        return json.loads(f'"{raw}"')
    except ValueError:
        return raw


def parse_locale_text(text: str) -> Dict[str, str]:
    """Extract top-level ``"key": "value"`` pairs from *text*."""
    entries: Dict[str, str] = {}
    depth = 0
    key: Optional[str] = None
    awaiting_value = False

    for match in _TOKEN_RE.finditer(text):
        kind = match.lastgroup
        if kind == "open":
            depth += 1
            key, awaiting_value = None, False
        elif kind == "close":
            depth = max(0, depth - 1)
            key, awaiting_value = None, False
        elif kind == "colon":
            awaiting_value = key is not None
        elif kind == "other":
            # Commas, numbers, true/false/null: anything but a string value.
            key, awaiting_value = None, False
        elif depth > 1:
            continue
        elif awaiting_value and key is not None:
            if key:
                entries.setdefault(key, _decode(match.group("string")))
            key, awaiting_value = None, False
        else:
            key = _decode(match.group("string"))
            awaiting_value = False
    return entries


def load_locale_file(path: Path, report: Optional[BuildReport] = None) -> Optional[LocaleTable]:
    """Load one locale file, returning ``None`` (and reporting) when it is unusable."""
    path = Path(path)
    try:
        size = path.stat().st_size
        if size <= 0 or size > MAX_LOCALE_FILE_BYTES:
            if report is not None:
                report.warn(f"Invalid file size for locale: {path}")
            return None
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        if report is not None:
            report.warn(f"Could not open locale file: {path} ({exc})")
        return None

    table = LocaleTable(code=path.stem, entries=parse_locale_text(text))
    print(f"Loaded locale with {len(table)} entries from {path}")
    return table


def load_all(locale_dir: Path, report: Optional[BuildReport] = None) -> LocaleSet:
    """Load every ``*.json`` file in *locale_dir*.

    A missing directory is not an error: it yields an empty, non-present set
    and the site is built once without localisation. A directory that exists
    but cannot be listed raises :class:`ReadFailure`.
    """
    locale_dir = Path(locale_dir)
    if not locale_dir.is_dir():
        print("No locale directory found")
        return LocaleSet(present=False)

    try:
        entries = sorted(locale_dir.iterdir())
    except OSError as exc:
        raise ReadFailure(locale_dir, exc) from exc

    tables: List[LocaleTable] = []
    for path in entries:
        if path.suffix != LOCALE_SUFFIX or not path.is_file():
            continue
        table = load_locale_file(path, report)
        if table is not None:
            tables.append(table)
    return LocaleSet(tables=tuple(tables), present=True)
