"""Jelly: a small static-site generator with partials and locale fan-out."""

from .locales import LocaleSet, LocaleTable, load_all
from .renderer import Renderer
from .site import build_site

__all__ = ["LocaleSet", "LocaleTable", "Renderer", "build_site", "load_all"]
