# backend/streamspawn/engine/systems/emitter.py
"""
CommandEmitter - Turns a DerivedAction and a target into ordered WorldCommands.

Spawn batches are gated to the mines zone: if the target stands in a world
whose name does not start with the reserved prefix, the batch becomes a single
warning message. Item grants are not gated. A broadcast built from the
message template closes every batch unless the template resolves to "".
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Mapping, Protocol

from ..commands import (
    RED,
    YELLOW,
    Broadcast,
    DirectMessage,
    GrantItem,
    SetWorldDifficulty,
    SpawnHostiles,
    WorldCommand,
    translate_color_codes,
)
from ..world import ActionKind, DerivedAction

if TYPE_CHECKING:
    from ..world import ActorRef, Location, Vector

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"%(\w+)%")


class ActorView(Protocol):
    """The lookup capabilities the emitter needs from the game adapter."""

    def current_location(self, actor: "ActorRef") -> "Location": ...

    def current_facing(self, actor: "ActorRef") -> "Vector": ...

    def display_name(self, actor: "ActorRef") -> str: ...


@dataclass
class EmitterConfig:
    mines_world_prefix: str = "mines/"
    spawn_distance: float = 3.0
    difficulty: str = "easy"


def render_template(template: str, substitutions: Mapping[str, str]) -> str:
    """Replace ``%token%`` placeholders; unknown tokens are left as written."""
    return _TOKEN.sub(lambda m: substitutions.get(m.group(1), m.group(0)), template)


class CommandEmitter:
    """
    Usage:
        emitter = CommandEmitter(world, EmitterConfig(mines_world_prefix="mines/"))
        commands = emitter.build(action, actor)
    """

    def __init__(self, view: ActorView, config: EmitterConfig | None = None) -> None:
        self.view = view
        self.config = config or EmitterConfig()

    def in_mines(self, location: "Location") -> bool:
        return location.world.startswith(self.config.mines_world_prefix)

    def build(self, action: DerivedAction, actor: "ActorRef | None") -> List[WorldCommand]:
        if actor is None:
            return []

        commands: List[WorldCommand] = []
        if action.kind is ActionKind.SPAWN_HOSTILES:
            commands.extend(self._spawn_batch(action, actor))
        elif action.kind is ActionKind.GRANT_ITEM:
            commands.append(GrantItem(to_actor=actor, item_kind=action.subject_kind, count=action.count))

        broadcast = self._broadcast(action, actor)
        if broadcast is not None:
            commands.append(broadcast)
        return commands

    def _spawn_batch(self, action: DerivedAction, actor: "ActorRef") -> List[WorldCommand]:
        location = self.view.current_location(actor)
        if not self.in_mines(location):
            logger.warning("Player is not in a mines world! Current world: %s", location.world)
            return [DirectMessage(actor, f"{RED}⚠ Mobs can only spawn in mines worlds!")]

        offset = self.view.current_facing(actor).multiply(self.config.spawn_distance)
        position = location.add(offset)

        commands: List[WorldCommand] = [SetWorldDifficulty(location.world, self.config.difficulty)]
        for _ in range(action.count):
            commands.append(SpawnHostiles(
                near_actor=actor,
                count=1,
                subject_kind=action.subject_kind,
                label=action.label,
                position=position,
            ))

        if action.count > 0:
            commands.append(DirectMessage(actor, f"{RED}⚠ {action.count} Twitch mob(s) spawned in the mines!"))
            commands.append(DirectMessage(actor, f"{YELLOW}⛏ Watch out - they slow down mining speed!"))
        return commands

    def _broadcast(self, action: DerivedAction, actor: "ActorRef") -> Broadcast | None:
        substitutions = dict(action.substitutions)
        substitutions["player"] = self.view.display_name(actor)
        text = render_template(action.message_template, substitutions)
        if not text:
            return None
        return Broadcast(translate_color_codes(text))
