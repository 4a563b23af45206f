"""
Global pytest configuration and shared fixtures.

Provides common test infrastructure for all test suites including:
- Config files and snapshots built from the bundled defaults
- In-memory World with a streamer standing in a mines world
- Seeded random source
- StreamEngine wired to all of the above
"""

import copy
import random
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

# Add backend to path
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from streamspawn.config import BUNDLED_DEFAULT_CONFIG, ConfigSnapshot, ConfigStore  # noqa: E402
from streamspawn.engine import StreamEngine  # noqa: E402
from streamspawn.engine.world import Location, World, WorldActor  # noqa: E402

STREAMER_ID = "uuid-streamer"
STREAMER_NAME = "Streamer"


def deep_merge(base: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# ============================================================================
# Config Fixtures
# ============================================================================


@pytest.fixture
def config_data() -> dict[str, Any]:
    """Bundled defaults, targeting the test streamer."""
    with open(BUNDLED_DEFAULT_CONFIG, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    data["target"]["streamer_username"] = STREAMER_NAME
    return data


@pytest.fixture
def make_snapshot(config_data) -> Callable[..., ConfigSnapshot]:
    """Factory for snapshots with nested overrides applied."""

    def _make(overrides: dict | None = None) -> ConfigSnapshot:
        return ConfigSnapshot(deep_merge(config_data, overrides or {}))

    return _make


@pytest.fixture
def config_file(tmp_path: Path, config_data) -> Path:
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump(config_data), encoding="utf-8")
    return path


@pytest.fixture
def write_config(config_file: Path, config_data) -> Callable[[dict], Path]:
    """Rewrite the config file with overrides (call store.reload() after)."""

    def _write(overrides: dict) -> Path:
        config_file.write_text(yaml.safe_dump(deep_merge(config_data, overrides)), encoding="utf-8")
        return config_file

    return _write


@pytest.fixture
def config_store(config_file: Path) -> ConfigStore:
    return ConfigStore.from_file(config_file)


# ============================================================================
# World Fixtures
# ============================================================================


@pytest.fixture
def streamer() -> WorldActor:
    """Streamer in a mines world, facing +Z."""
    return WorldActor(
        id=STREAMER_ID,
        name=STREAMER_NAME,
        location=Location("mines/deep", 10.5, 40.0, -3.5),
        yaw=0.0,
        pitch=0.0,
    )


@pytest.fixture
def world(streamer: WorldActor) -> World:
    world = World()
    world.add_actor(streamer)
    world.add_actor(WorldActor(id="uuid-alice", name="Alice", location=Location("world", 0.0, 64.0, 0.0)))
    return world


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def engine(config_store: ConfigStore, world: World, rng: random.Random) -> StreamEngine:
    return StreamEngine(config_store, world, rng=rng)
