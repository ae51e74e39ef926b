# src/shufflestore/__init__.py
"""shufflestore - memory-mapped card deck and out-of-core line shuffler.

The public surface is exposed lazily so ``import shufflestore`` stays cheap
for callers that only need the codec or the config helpers.
"""

from __future__ import annotations

import tomllib
from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _v
from pathlib import Path

# Path to the project's pyproject.toml for local version fallback
PYPROJECT_TOML = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"

# Diagnostic message for fallback version retrieval
NO_PKG_MSG = "__package__ not detected, loading version from pyproject.toml"

__all__ = [  # loads lazily, that's why reportUnsupportedDunderAll is triggered
    "Card",  # pyright: ignore[reportUnsupportedDunderAll]
    "Rank",  # pyright: ignore[reportUnsupportedDunderAll]
    "Suit",  # pyright: ignore[reportUnsupportedDunderAll]
    "MappedDeck",  # pyright: ignore[reportUnsupportedDunderAll]
    "ExternalShuffler",  # pyright: ignore[reportUnsupportedDunderAll]
    "shuffle_file",  # pyright: ignore[reportUnsupportedDunderAll]
    "AppConfig",  # pyright: ignore[reportUnsupportedDunderAll]
    "load_app_config",  # pyright: ignore[reportUnsupportedDunderAll]
]

_LAZY_IMPORTS = {
    "Card": "shufflestore.cards",
    "Rank": "shufflestore.cards",
    "Suit": "shufflestore.cards",
    "MappedDeck": "shufflestore.store",
    "ExternalShuffler": "shufflestore.external",
    "shuffle_file": "shufflestore.baseline",
    "AppConfig": "shufflestore.config",
    "load_app_config": "shufflestore.config",
}


def __getattr__(name: str):  # pragma: no cover - simple dynamic loader
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(module_name)
    attr = getattr(module, name)
    globals()[name] = attr
    return attr


def _read_version_from_toml() -> str:
    """Return the package version declared in ``pyproject.toml``."""
    with PYPROJECT_TOML.open("rb") as fh:
        data = tomllib.load(fh)
    return data["project"]["version"]


try:
    assert __package__ is not None, NO_PKG_MSG
    __version__ = _v(__package__)  # importlib.metadata
except PackageNotFoundError:
    __version__ = _read_version_from_toml()
