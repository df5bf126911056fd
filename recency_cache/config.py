from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .cache import LRUCache

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 128
DEFAULT_LOG_LEVEL = "WARNING"

_CAPACITY_ENV = "RECENCY_CACHE_CAPACITY"
_LOG_LEVEL_ENV = "RECENCY_CACHE_LOG_LEVEL"
_CONFIG_ENV = "RECENCY_CACHE_CONFIG"


class CacheConfigError(ValueError):
    """Raised when cache configuration is present but malformed."""


def _parse_capacity(raw: Any, source: str) -> int:
    if isinstance(raw, bool):
        raise CacheConfigError(f"{source}: capacity must be an integer, got {raw!r}")
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise CacheConfigError(
            f"{source}: capacity must be an integer, got {raw!r}"
        ) from exc


def load_settings() -> dict:
    load_dotenv()
    raw_capacity = os.getenv(_CAPACITY_ENV)
    capacity = (
        _parse_capacity(raw_capacity, _CAPACITY_ENV)
        if raw_capacity
        else DEFAULT_CAPACITY
    )
    return {
        "CAPACITY": capacity,
        "LOG_LEVEL": (os.getenv(_LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper(),
        "CONFIG_PATH": os.getenv(_CONFIG_ENV) or None,
    }


def load_cache_config(
    config_path: str | Path,
    default_capacity: int = DEFAULT_CAPACITY,
) -> dict:
    """Load cache configuration from a YAML file.

    A missing file or a missing ``capacity`` key is not an error:
    ``default_capacity`` is used instead.
    """
    path = Path(config_path)
    if not path.exists():
        logger.warning("Config file not found: %s. Using default configuration.", path)
        return {"capacity": default_capacity}

    try:
        config = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise CacheConfigError(f"failed to parse config file {path}") from exc
    if not isinstance(config, dict):
        raise CacheConfigError(f"config root must be a mapping: {path}")

    config["capacity"] = _parse_capacity(
        config.get("capacity", default_capacity), str(path)
    )
    logger.debug("Loaded cache config from %s", path)
    return config


def build_cache(
    capacity: int | None = None,
    *,
    config_path: str | Path | None = None,
) -> LRUCache:
    """Create an :class:`LRUCache`, resolving capacity from the most specific source.

    Precedence: explicit ``capacity``, then ``config_path`` (or the file named
    by ``RECENCY_CACHE_CONFIG``), then ``RECENCY_CACHE_CAPACITY``. A config
    file that is absent or has no ``capacity`` key falls through to the
    environment.
    """
    if capacity is not None:
        return LRUCache(capacity)

    settings = load_settings()
    path = config_path or settings["CONFIG_PATH"]
    if path:
        resolved = load_cache_config(path, default_capacity=settings["CAPACITY"])[
            "capacity"
        ]
    else:
        resolved = settings["CAPACITY"]
    logger.debug("Building cache with capacity=%d", resolved)
    return LRUCache(resolved)
