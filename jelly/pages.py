"""Render every page template once per locale into the output tree."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from .errors import ReadFailure, RenderError, WriteFailure
from .locales import LocaleSet, LocaleTable
from .renderer import Renderer
from .report import BuildReport

PAGE_SUFFIX = ".html"


@dataclass(frozen=True)
class RenderJob:
    """One (page, locale) pair and the file it produces."""

    relative: Path
    text: str
    locale: Optional[LocaleTable]
    destination: Path


def iter_pages(
    pages_dir: Path,
    on_error: Optional[Callable[[OSError], None]] = None,
) -> Iterator[Path]:
    """Yield page templates below *pages_dir* in a stable order.

    Subdirectories that cannot be listed are passed to *on_error* and skipped.
    """
    found: List[Path] = []
    for dirpath, _dirnames, filenames in os.walk(pages_dir, onerror=on_error):
        current = Path(dirpath)
        for filename in filenames:
            path = current / filename
            if path.suffix == PAGE_SUFFIX and path.is_file():
                found.append(path)
    yield from sorted(found)


def output_path(output_dir: Path, relative: Path, locale: Optional[LocaleTable]) -> Path:
    if locale is None:
        return Path(output_dir) / relative
    return Path(output_dir) / locale.code / relative


def write_output(path: Path, content: str) -> None:
    try:
        # Workers may race to create the same directory.
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise WriteFailure(path, exc) from exc


class PagePipeline:
    def __init__(
        self,
        renderer: Renderer,
        report: Optional[BuildReport] = None,
        *,
        workers: int = 1,
    ) -> None:
        self.renderer = renderer
        self.report = report or BuildReport()
        self.workers = max(1, workers)

    def plan(self, pages_dir: Path, output_dir: Path, locales: LocaleSet) -> List[RenderJob]:
        """Read every page and expand it into one job per locale.

        Unreadable pages are reported and left out. An unreadable
        ``pages_dir`` raises :class:`ReadFailure`.
        """
        pages_dir = Path(pages_dir)
        if not pages_dir.is_dir():
            raise ReadFailure(pages_dir, "not a directory")
        targets: List[Optional[LocaleTable]] = list(locales) if locales else [None]

        try:
            os.listdir(pages_dir)
        except OSError as exc:
            raise ReadFailure(pages_dir, exc) from exc

        def _skip_directory(exc: OSError) -> None:
            self.report.warn(f"Could not open pages directory: {exc.filename} ({exc.strerror})")

        jobs: List[RenderJob] = []
        pages = list(iter_pages(pages_dir, _skip_directory))
        for page in pages:
            relative = page.relative_to(pages_dir)
            self.report.add_pages_found()
            try:
                text = page.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                self.report.warn(f"Could not load file: {page} ({exc})")
                continue
            for locale in targets:
                jobs.append(
                    RenderJob(
                        relative=relative,
                        text=text,
                        locale=locale,
                        destination=output_path(output_dir, relative, locale),
                    )
                )
        return jobs

    def run_job(self, job: RenderJob) -> bool:
        label = job.relative.as_posix()
        if job.locale is not None:
            label = f"{job.locale.code}/{label}"
        print(f"Processing: {label}")
        try:
            content = self.renderer.render(job.text, job.locale)
            write_output(job.destination, content)
        except RenderError as exc:
            self.report.warn(f"Could not render {label}: {exc}")
            return False
        except WriteFailure as exc:
            self.report.warn(str(exc))
            return False
        self.report.add_page_written()
        return True

    def run(self, pages_dir: Path, output_dir: Path, locales: LocaleSet) -> BuildReport:
        jobs = self.plan(pages_dir, output_dir, locales)
        if self.workers == 1 or len(jobs) < 2:
            for job in jobs:
                self.run_job(job)
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                list(pool.map(self.run_job, jobs))
        return self.report


def run(
    pages_dir: Path,
    output_dir: Path,
    locales: LocaleSet,
    renderer: Renderer,
    report: Optional[BuildReport] = None,
    *,
    workers: int = 1,
) -> BuildReport:
    """Render ``pages_dir`` into ``output_dir`` for each locale in *locales*."""
    return PagePipeline(renderer, report, workers=workers).run(pages_dir, output_dir, locales)
