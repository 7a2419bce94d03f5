"""Resolve partial names to template text from ``src/partials``."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from .report import BuildReport

PARTIAL_SUFFIX = ".html"


class PartialLoader:
    """Read ``<partials_dir>/<name>.html`` on demand.

    Lookups go through Jinja2's ``FileSystemLoader`` so that names containing
    ``..`` segments cannot reach outside the partial directory; those are
    treated exactly like a missing partial.
    """

    def __init__(self, partials_dir: Path, report: Optional[BuildReport] = None) -> None:
        self.partials_dir = Path(partials_dir)
        self.report = report
        self._loader = FileSystemLoader(str(self.partials_dir), encoding="utf-8")
        self._env = Environment(loader=self._loader, autoescape=False)

    def path_for(self, name: str) -> Path:
        return self.partials_dir / f"{name}{PARTIAL_SUFFIX}"

    def load(self, name: str) -> Optional[str]:
        """Return the raw text of partial *name*, or ``None`` if it cannot be had."""
        if not name:
            return None
        try:
            source, _filename, _uptodate = self._loader.get_source(self._env, f"{name}{PARTIAL_SUFFIX}")
        except TemplateNotFound:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            if self.report is not None:
                self.report.warn(f"Could not read partial {self.path_for(name)}: {exc}")
            return None
        return source
