from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "filtertree.toml"
ENV_PREFIX = "FILTERTREE_"


class CodecSettings(BaseModel):
    """Decode-time limits and policy for untrusted wire input."""

    max_depth: Optional[int] = 64
    max_nodes: Optional[int] = 10_000
    exclusive_filters_children: bool = False

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("max_depth", "max_nodes", mode="before")
    @classmethod
    def validate_limit(cls, value: Any) -> Any:
        if value in (None, "", "none", "None"):
            return None
        return value

    @field_validator("max_depth", "max_nodes")
    @classmethod
    def require_positive(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("limit must be a positive integer or empty to disable")
        return value


class FilterTreeSettings(BaseModel):
    codec: CodecSettings = CodecSettings()

    model_config = ConfigDict(extra="ignore")


def resolve_config_path(config: Path | None) -> Path | None:
    if config is not None:
        return config if config.exists() else None
    candidate = Path.cwd() / DEFAULT_CONFIG_NAME
    return candidate if candidate.exists() else None


def _deep_update(target: Dict[str, Any], updates: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = dict(value) if isinstance(value, Mapping) else value
    return target


def _load_toml(path: Path | None) -> Dict[str, Any]:
    if path is None:
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def _extract_prefixed(source: Mapping[str, str], *, prefix: str = ENV_PREFIX, delimiter: str = "__") -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for key, value in source.items():
        if not key.startswith(prefix):
            continue
        path = key.removeprefix(prefix).split(delimiter)
        target = data
        for part in path[:-1]:
            target = target.setdefault(part.lower(), {})
        target[path[-1].lower()] = value
    return data


def load_settings(
    *,
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Dict[str, Any] | None = None,
) -> FilterTreeSettings:
    """Merge TOML config, ``FILTERTREE_*`` environment variables and overrides.

    Later sources win. ``FILTERTREE_CODEC__MAX_DEPTH=32`` sets ``codec.max_depth``.
    """

    resolved = resolve_config_path(config_path)
    if config_path is not None and resolved is None:
        raise FileNotFoundError(f"Config file not found at {config_path}")

    merged: Dict[str, Any] = {}
    _deep_update(merged, _load_toml(resolved))
    _deep_update(merged, _extract_prefixed(dict(os.environ if environ is None else environ)))
    if overrides:
        _deep_update(merged, overrides)

    settings = FilterTreeSettings(**merged)
    logger.debug("Loaded filtertree settings from %s: %s", resolved or "defaults", settings.model_dump())
    return settings


__all__ = [
    "CodecSettings",
    "FilterTreeSettings",
    "load_settings",
    "resolve_config_path",
]
