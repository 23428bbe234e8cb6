"""
Deuteros distribution import namespace.

This package re-exports the core `entity_doubles` package for convenience
and shorter imports.
"""

from importlib.metadata import PackageNotFoundError, version

# src/deuteros/__init__.py
from entity_doubles import *  # noqa: F401,F403
from entity_doubles import __all__ as _core_all

try:
    __version__ = version("deuteros")
except PackageNotFoundError:  # pragma: no cover - local non-installed checkout
    __version__ = "0+unknown"

__all__ = [*_core_all, "__version__"]
