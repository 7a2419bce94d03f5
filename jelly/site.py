"""Run a complete site build: static trees, locales, then pages."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .assets import copy_tree
from .config import BuildConfig
from .errors import OutputRootError
from .locales import LocaleSet, load_all
from .pages import PagePipeline
from .partials import PartialLoader
from .renderer import Renderer
from .report import BuildReport


def _label(path: Path, config: BuildConfig) -> str:
    try:
        return path.relative_to(config.root).as_posix()
    except ValueError:
        return str(path)


def prepare_output(config: BuildConfig) -> None:
    try:
        config.output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputRootError(f"Could not create build directory {config.output_dir}: {exc}") from exc


def copy_static(config: BuildConfig, report: BuildReport) -> None:
    for source, target in config.static_dirs:
        label = source.name
        if not source.is_dir():
            print(f"No {label} directory found")
            continue
        print(f"Copying {label} directory...")
        copy_tree(source, target, report)


def announce_locales(locales: LocaleSet) -> None:
    if locales:
        print(f"Found {len(locales)} locales: {' '.join(locales.codes)}")
    else:
        print("No locales found, building single language version")


def make_renderer(config: BuildConfig, report: Optional[BuildReport] = None) -> Renderer:
    return Renderer(
        PartialLoader(config.partials_dir, report),
        max_output_bytes=config.max_output_bytes,
        max_include_depth=config.max_include_depth,
        strict_locales=config.strict_locales,
    )


def build_site(config: BuildConfig, report: Optional[BuildReport] = None) -> BuildReport:
    """Build the site described by *config*.

    Raises :class:`OutputRootError` when the output directory cannot be
    created and :class:`ReadFailure` when the page directory exists but
    cannot be walked. Everything else is reported and skipped.
    """
    report = report or BuildReport()
    prepare_output(config)
    copy_static(config, report)

    locales = load_all(config.locale_dir, report)
    report.locales = locales.codes
    announce_locales(locales)

    if config.pages_dir.is_dir():
        print("Processing pages...")
        pipeline = PagePipeline(make_renderer(config, report), report, workers=config.workers)
        pipeline.run(config.pages_dir, config.output_dir, locales)
    else:
        print(f"No {_label(config.pages_dir, config)} directory found")

    if config.health_dir is not None:
        report.write(config.health_dir)
    return report
