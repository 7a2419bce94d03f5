"""Build the site in the current directory into ``build/``.

Equivalent to ``jelly build``; kept so ``python build.py`` works from a checkout.
"""

from jelly.cli import main


if __name__ == "__main__":
    raise SystemExit(main(["build"]))
