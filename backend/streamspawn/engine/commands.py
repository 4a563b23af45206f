# backend/streamspawn/engine/commands.py
"""
World commands - the value objects the core hands to the executor.

The policy, targeting and emitter stages never touch the game directly; they
produce an ordered list of these and a CommandExecutor applies them against a
GameAdapter on the game loop.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .world import ActorRef, Location, WorldName


# Section-sign colour codes understood by the game's chat
COLOR_CHAR = "§"
RED = COLOR_CHAR + "c"
YELLOW = COLOR_CHAR + "e"
GREEN = COLOR_CHAR + "a"
DARK_RED = COLOR_CHAR + "4"

# Marker colour carried only by hostiles we spawn (see CombatTagRule)
HOSTILE_TAG_COLOR = RED

_ALT_COLOR_CODE = re.compile(r"&([0-9a-fk-orA-FK-OR])")
_STRIP_COLOR = re.compile(COLOR_CHAR + r"[0-9a-fk-orA-FK-OR]")


def translate_color_codes(text: str, alt_char: str = "&") -> str:
    """Turn ``&c`` style codes into section-sign codes; other ``&`` are kept."""
    pattern = _ALT_COLOR_CODE if alt_char == "&" else re.compile(
        re.escape(alt_char) + r"([0-9a-fk-orA-FK-OR])"
    )
    return pattern.sub(lambda m: COLOR_CHAR + m.group(1).lower(), text)


def strip_color(text: str) -> str:
    return _STRIP_COLOR.sub("", text)


def hostile_name(label: str) -> str:
    """Visible name given to a spawned hostile."""
    return HOSTILE_TAG_COLOR + label


@dataclass(frozen=True)
class SpawnHostiles:
    """Spawn ``count`` hostiles of ``subject_kind`` at ``position`` targeting ``near_actor``."""
    near_actor: "ActorRef"
    count: int
    subject_kind: str
    label: str
    position: "Location"


@dataclass(frozen=True)
class GrantItem:
    to_actor: "ActorRef"
    item_kind: str
    count: int


@dataclass(frozen=True)
class Broadcast:
    text: str


@dataclass(frozen=True)
class DirectMessage:
    to_actor: "ActorRef"
    text: str


@dataclass(frozen=True)
class SetWorldDifficulty:
    world: "WorldName"
    level: str


@dataclass(frozen=True)
class ApplyStatusEffect:
    to_actor: "ActorRef"
    effect: str
    duration_ticks: int
    amplifier: int
    ambient: bool = True
    particles: bool = False


WorldCommand = Union[
    SpawnHostiles,
    GrantItem,
    Broadcast,
    DirectMessage,
    SetWorldDifficulty,
    ApplyStatusEffect,
]
