"""Build configuration.

Every setting has a module-level default that an environment variable can
override, e.g. ``JELLY_WORKERS=4 jelly build``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .errors import ConfigError

DEFAULT_OUTPUT_DIR = "build"
DEFAULT_LOCALE_DIR = "locale"
DEFAULT_PARTIALS_DIR = "src/partials"
DEFAULT_PAGES_DIR = "src/pages"

# Rendered size ceiling per page, in UTF-8 bytes.
DEFAULT_MAX_OUTPUT_BYTES = 1024 * 1024
DEFAULT_MAX_INCLUDE_DEPTH = 32
# Each include level costs several interpreter frames.
MAX_INCLUDE_DEPTH_CEILING = 256
DEFAULT_WORKERS = 1

# (source directory, destination relative to the output root)
STATIC_DIRS: Tuple[Tuple[str, str], ...] = (
    ("vendor", "vendor"),
    ("public", ""),
    ("assets", "assets"),
)

_TRUTHY = {"1", "true", "yes", "on"}


def _positive_int(
    environ: Mapping[str, str],
    name: str,
    default: int,
    ceiling: Optional[int] = None,
) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    if ceiling is not None and value > ceiling:
        raise ConfigError(f"{name} must be at most {ceiling}, got {value}")
    return value


@dataclass(frozen=True)
class BuildConfig:
    root: Path
    output_dir: Path
    locale_dir: Path
    partials_dir: Path
    pages_dir: Path
    static_dirs: Tuple[Tuple[Path, Path], ...] = field(default=())
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH
    workers: int = DEFAULT_WORKERS
    strict_locales: bool = False
    health_dir: Optional[Path] = None

    @classmethod
    def for_root(cls, root: Path, **overrides) -> "BuildConfig":
        """Return the conventional layout below *root*."""
        root = Path(root)
        output_dir = root / overrides.pop("output_dir", DEFAULT_OUTPUT_DIR)
        static_dirs = tuple(
            (root / source, output_dir / target if target else output_dir)
            for source, target in STATIC_DIRS
        )
        values = {
            "root": root,
            "output_dir": output_dir,
            "locale_dir": root / DEFAULT_LOCALE_DIR,
            "partials_dir": root / DEFAULT_PARTIALS_DIR,
            "pages_dir": root / DEFAULT_PAGES_DIR,
            "static_dirs": static_dirs,
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        root: Optional[Path] = None,
    ) -> "BuildConfig":
        env = os.environ if environ is None else environ
        if root is None:
            root = Path(env.get("JELLY_ROOT") or Path.cwd())
        health = env.get("JELLY_HEALTH_DIR", "").strip()
        return cls.for_root(
            Path(root),
            output_dir=env.get("JELLY_OUTPUT_DIR", "").strip() or DEFAULT_OUTPUT_DIR,
            max_output_bytes=_positive_int(env, "JELLY_MAX_OUTPUT_BYTES", DEFAULT_MAX_OUTPUT_BYTES),
            max_include_depth=_positive_int(
                env, "JELLY_MAX_INCLUDE_DEPTH", DEFAULT_MAX_INCLUDE_DEPTH, MAX_INCLUDE_DEPTH_CEILING
            ),
            workers=_positive_int(env, "JELLY_WORKERS", DEFAULT_WORKERS),
            strict_locales=env.get("JELLY_STRICT_LOCALES", "").strip().lower() in _TRUTHY,
            health_dir=Path(root) / health if health else None,
        )
