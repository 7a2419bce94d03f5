"""Command line entry point: ``jelly build``."""

from __future__ import annotations

import argparse
import sys
from typing import Iterable

from .config import BuildConfig
from .errors import ConfigError, OutputRootError, ReadFailure
from .site import build_site


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jelly",
        description="Build the static site in the current directory into build/",
        add_help=False,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="build")
    subparsers.add_parser("build", add_help=False, help="Render pages and copy static files")
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.command != "build":
        parser.print_usage(sys.stderr)
        return 1

    print("Building Jelly CMS...")
    try:
        config = BuildConfig.from_env()
        report = build_site(config)
    except (ConfigError, OutputRootError, ReadFailure) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(report.summary())
    print("Build completed successfully!")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
