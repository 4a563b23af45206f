# backend/streamspawn/config.py
"""
ConfigStore - YAML-backed configuration with dotted-key lookup.

Provides:
- Typed getters with caller-supplied defaults (get_int, get_float, get_bool, get_str)
- Hot reload that swaps the whole tree at once
- Immutable per-event snapshots

Keys follow the layout of default_config.yaml, e.g. ``events.cheer.bits_per_mob``.
"""

from __future__ import annotations

import copy
import logging
import os
import shutil
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "STREAMSPAWN_CONFIG"
DEFAULT_CONFIG_NAME = "config.yml"
BUNDLED_DEFAULT_CONFIG = Path(__file__).parent / "default_config.yaml"

_MISSING = object()


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


def resolve_config_path(path: str | os.PathLike | None = None) -> Path:
    """Pick the config path: explicit argument, then env var, then ./config.yml."""
    if path is not None:
        return Path(path)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return Path.cwd() / DEFAULT_CONFIG_NAME


def ensure_default_config(path: str | os.PathLike) -> bool:
    """
    Write the bundled default config to ``path`` if nothing is there yet.

    Returns:
        True if a file was written
    """
    target = Path(path)
    if target.exists():
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(BUNDLED_DEFAULT_CONFIG, target)
    logger.info("Wrote default configuration to %s", target)
    return True


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping")
    return data


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


class _ConfigReader:
    """Dotted-key getters shared by the live store and its snapshots."""

    def _tree(self) -> Mapping[str, Any]:
        raise NotImplementedError

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._tree()
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return default
            node = node[part]
        return default if node is None else node

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            return default
        # bool is an int subclass; "enabled: true" is not a count
        if isinstance(value, bool):
            logger.warning("Config key %s: expected integer, got %r", key, value)
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        logger.warning("Config key %s: expected integer, got %r", key, value)
        return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            return default
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
        logger.warning("Config key %s: expected number, got %r", key, value)
        return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        logger.warning("Config key %s: expected boolean, got %r", key, value)
        return default

    def get_str(self, key: str, default: str | None = None) -> str | None:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            return default
        if isinstance(value, (Mapping, tuple, list)):
            logger.warning("Config key %s: expected string, got %r", key, value)
            return default
        return str(value)


class ConfigSnapshot(_ConfigReader):
    """Read-only copy of the configuration tree, frozen at creation."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = _freeze(copy.deepcopy(dict(data)))

    def _tree(self) -> Mapping[str, Any]:
        return self._data


class ConfigStore(_ConfigReader):
    """
    Live configuration backed by a YAML file.

    Usage:
        store = ConfigStore.from_file("config.yml")
        store.get_int("spawn.max_mobs_per_event", 50)
        snap = store.snapshot()     # frozen view for one event
        store.reload()              # pick up edits
    """

    def __init__(self, data: Mapping[str, Any] | None = None, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(data or {})

    @classmethod
    def from_file(cls, path: str | os.PathLike | None = None, *, write_default: bool = True) -> "ConfigStore":
        config_path = resolve_config_path(path)
        if write_default:
            ensure_default_config(config_path)
        store = cls(path=config_path)
        store.reload()
        return store

    def _tree(self) -> Mapping[str, Any]:
        return self._data

    def reload(self) -> None:
        """Re-read the backing file. On error the previous tree stays active."""
        if self.path is None:
            raise ConfigError("ConfigStore has no backing file to reload")
        data = _read_yaml(self.path)
        self._data = data
        logger.info("Configuration loaded from %s", self.path)

    def snapshot(self) -> ConfigSnapshot:
        return ConfigSnapshot(self._data)
