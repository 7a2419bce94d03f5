"""Copy static directories (vendor, public, assets) into the output tree."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Optional, Set, Tuple

from .report import BuildReport


def copy_file(src: Path, dest: Path, report: Optional[BuildReport] = None) -> bool:
    """Copy the bytes of *src* to *dest*, creating parent directories."""
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dest)
    except OSError as exc:
        if report is not None:
            report.warn(f"Could not copy {src} to {dest}: {exc}")
        return False
    return True


def copy_tree(src: Path, dest: Path, report: Optional[BuildReport] = None) -> int:
    """Mirror *src* below *dest* and return the number of files copied.

    Empty directories are recreated too. Failures on single entries are
    reported and skipped.
    """
    src = Path(src)
    dest = Path(dest)
    copied = 0

    def _on_error(exc: OSError) -> None:
        if report is not None:
            report.warn(f"Could not open directory: {exc.filename} ({exc.strerror})")

    # Symlinked directories are followed, so remember each real directory once.
    visited: Set[Tuple[int, int]] = set()
    for dirpath, dirnames, filenames in os.walk(src, onerror=_on_error, followlinks=True):
        current = Path(dirpath)
        try:
            info = current.stat()
        except OSError as exc:
            _on_error(exc)
            dirnames[:] = []
            continue
        identity = (info.st_dev, info.st_ino)
        if identity in visited:
            if report is not None:
                report.warn(f"Skipping directory link loop: {current}")
            dirnames[:] = []
            continue
        visited.add(identity)
        target_dir = dest / current.relative_to(src)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            if report is not None:
                report.warn(f"Could not create directory: {target_dir} ({exc})")
            # Nothing below this directory can be written either.
            dirnames[:] = []
            continue
        dirnames.sort()
        for filename in sorted(filenames):
            if copy_file(current / filename, target_dir / filename, report):
                copied += 1

    if report is not None:
        report.add_files_copied(copied)
    return copied
