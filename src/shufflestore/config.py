# src/shufflestore/config.py
"""Configuration schemas and helpers for shufflestore.

Dataclasses describe the mapped deck, the external shuffler and logging.
:func:`load_app_config` merges one or more YAML overlays into an
:class:`AppConfig`; :func:`apply_dot_overrides` applies ``section.option=value``
strings on top.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, get_args, get_origin, get_type_hints

import yaml  # type: ignore[import-untyped]

from shufflestore.utils.logging import configure_logging

# ─────────────────────────────────────────────────────────────────────────────
# Dataclasses (schema)
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class StoreConfig:
    """Parameters for :class:`~shufflestore.store.MappedDeck`."""

    iterations: int = 1
    tmp_dir: Path | None = None
    seed: int | None = None  # None -> time-derived


@dataclass
class ShufflerConfig:
    """Parameters for :class:`~shufflestore.external.ExternalShuffler`."""

    # chosen so that input_size / n_piles fits comfortably in memory
    n_piles: int = 6
    tmp_dir: Path | None = None
    buffer_size: int = 1_048_576
    seed: int | None = None


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_file: Path | None = None


@dataclass
class AppConfig:
    """Top-level configuration container."""

    store: StoreConfig = field(default_factory=StoreConfig)
    shuffler: ShufflerConfig = field(default_factory=ShufflerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def configure_logging(self) -> None:
        """Apply the ``logging`` section to the root logger."""
        configure_logging(level=self.logging.level, log_file=self.logging.log_file)


_SECTIONS: dict[str, type] = {
    "store": StoreConfig,
    "shuffler": ShufflerConfig,
    "logging": LoggingConfig,
}


# ─────────────────────────────────────────────────────────────────────────────
# Loader (one or more YAML overlays)
# ─────────────────────────────────────────────────────────────────────────────


def _deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``overlay`` onto ``base`` and return a new mapping."""
    result: dict[str, Any] = dict(base)
    for key, val in overlay.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(val, Mapping):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _annotation_contains(annotation: Any, target: type) -> bool:
    """Recursively inspect type annotations for the presence of ``target``."""
    if annotation is None:
        return False
    if annotation is target:
        return True
    origin = get_origin(annotation)
    if origin is None:
        return False
    return any(_annotation_contains(arg, target) for arg in get_args(annotation))


def _build(cls: type, section: Mapping[str, Any]) -> Any:
    """Instantiate dataclass ``cls`` from a mapping, coercing paths."""
    obj = cls()
    type_hints = get_type_hints(cls)
    names = {f.name for f in dataclasses.fields(cls)}
    for key, val in section.items():
        if key not in names:
            raise AttributeError(f"Unknown option {key!r} for {cls.__name__}")
        if _annotation_contains(type_hints.get(key), Path) and isinstance(val, str):
            val = Path(val)
        setattr(obj, key, val)
    return obj


def load_app_config(*overlays: Path) -> AppConfig:
    """Merge YAML overlays into an :class:`AppConfig`; later files win."""
    data: dict[str, Any] = {}
    for path in overlays:
        with Path(path).open("r", encoding="utf-8") as fh:
            overlay = yaml.safe_load(fh) or {}
        if not isinstance(overlay, Mapping):
            raise TypeError(f"Config file {path} must contain a mapping")
        data = _deep_merge(data, overlay)

    unknown = set(data) - set(_SECTIONS)
    if unknown:
        raise AttributeError(f"Unknown config section(s): {sorted(unknown)}")

    return AppConfig(**{name: _build(cls, data.get(name) or {}) for name, cls in _SECTIONS.items()})


def _coerce(value: str, current: Any, annotation: Any | None = None) -> Any:
    """Coerce ``value`` to the type of ``current``."""
    if value.lower() in {"none", "null"} and _annotation_contains(annotation, type(None)):
        return None
    if isinstance(current, bool) or _annotation_contains(annotation, bool):
        val_lower = value.lower()
        if val_lower in {"1", "true", "yes", "on"}:
            return True
        if val_lower in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"Cannot parse boolean value from {value!r}")
    if isinstance(current, int) or _annotation_contains(annotation, int):
        return int(value)
    if isinstance(current, Path) or _annotation_contains(annotation, Path):
        return Path(value)
    return value


def apply_dot_overrides(cfg: AppConfig, pairs: list[str]) -> AppConfig:
    """Apply ``section.option=value`` overrides to *cfg*."""
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid override {pair!r}")
        key, raw = pair.split("=", 1)
        if "." not in key:
            raise ValueError(f"Invalid override {pair!r}")
        section_name, option = key.split(".", 1)
        if section_name not in _SECTIONS:
            raise AttributeError(f"Unknown config section {section_name!r}")
        section = getattr(cfg, section_name)
        if not hasattr(section, option):
            raise AttributeError(f"Unknown option {option!r} in section {section_name!r}")
        annotation = get_type_hints(type(section)).get(option)
        setattr(section, option, _coerce(raw, getattr(section, option), annotation))
    return cfg


__all__ = [
    "StoreConfig",
    "ShufflerConfig",
    "LoggingConfig",
    "AppConfig",
    "load_app_config",
    "apply_dot_overrides",
]
