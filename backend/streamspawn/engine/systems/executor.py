# backend/streamspawn/engine/systems/executor.py
"""
CommandExecutor - Applies WorldCommands against a game adapter.

Must run on the game loop: actor and world state are not safe for concurrent
mutation. Each command is applied independently; an AdapterError on one
command is logged and counted and the rest of the batch still runs. There is
no rollback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Protocol, Sequence

from ..commands import (
    ApplyStatusEffect,
    Broadcast,
    DirectMessage,
    GrantItem,
    SetWorldDifficulty,
    SpawnHostiles,
    WorldCommand,
    hostile_name,
)
from ..world import AdapterError

if TYPE_CHECKING:
    from ..world import ActorRef, Location, Vector, WorldName

logger = logging.getLogger(__name__)

__all__ = ["AdapterError", "CommandExecutor", "ExecutionReport", "GameAdapter"]


class GameAdapter(Protocol):
    """Capabilities a live game must provide. See engine.world.World for the in-memory one."""

    def list_online_actors(self) -> Sequence["ActorRef"]: ...

    def find_actor_exact(self, name: str) -> "ActorRef | None": ...

    def find_actor_case_insensitive(self, name: str) -> "ActorRef | None": ...

    def current_location(self, actor: "ActorRef") -> "Location": ...

    def current_facing(self, actor: "ActorRef") -> "Vector": ...

    def display_name(self, actor: "ActorRef") -> str: ...

    def set_difficulty(self, world: "WorldName", level: str) -> None: ...

    def spawn_hostile(
        self, position: "Location", kind: str, custom_name: str, target: "ActorRef | None" = None
    ) -> int | None: ...

    def grant_item(self, actor: "ActorRef", item_kind: str, count: int) -> None: ...

    def broadcast(self, text: str) -> None: ...

    def send_message(self, actor: "ActorRef", text: str) -> None: ...

    def apply_status_effect(
        self,
        actor: "ActorRef",
        effect: str,
        duration_ticks: int,
        amplifier: int,
        *,
        ambient: bool = True,
        particles: bool = False,
    ) -> None: ...


@dataclass
class ExecutionReport:
    applied: int = 0
    failed: int = 0
    spawn_attempted: int = 0
    spawned: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0


class CommandExecutor:
    """
    Usage:
        executor = CommandExecutor(world)
        report = executor.execute(commands)
    """

    def __init__(self, adapter: GameAdapter) -> None:
        self.adapter = adapter

    def execute(self, commands: Sequence[WorldCommand]) -> ExecutionReport:
        report = ExecutionReport()
        for command in commands:
            try:
                ok = self._apply(command, report)
            except AdapterError as e:
                ok = False
                report.errors.append(str(e))
                logger.error("  ✗ %s failed: %s", type(command).__name__, e)
            if ok:
                report.applied += 1
            else:
                report.failed += 1

        if report.spawn_attempted:
            logger.info("Spawned %d/%d mobs in mines world", report.spawned, report.spawn_attempted)
        return report

    def _apply(self, command: WorldCommand, report: ExecutionReport) -> bool:
        adapter = self.adapter

        if isinstance(command, SpawnHostiles):
            ok = True
            for _ in range(command.count):
                report.spawn_attempted += 1
                try:
                    entity_id = adapter.spawn_hostile(
                        command.position,
                        command.subject_kind,
                        hostile_name(command.label),
                        target=command.near_actor,
                    )
                except AdapterError as e:
                    ok = False
                    report.errors.append(str(e))
                    logger.error(
                        "  ✗ Failed to spawn %s #%d: %s", command.subject_kind, report.spawn_attempted, e
                    )
                    continue
                if entity_id is None:
                    ok = False
                    logger.warning("  ✗ Failed to spawn %s #%d", command.subject_kind, report.spawn_attempted)
                    continue
                report.spawned += 1
                logger.info(
                    "  ✓ Spawned %s #%d (EntityID: %s)",
                    command.subject_kind, report.spawn_attempted, entity_id,
                )
            return ok

        if isinstance(command, SetWorldDifficulty):
            adapter.set_difficulty(command.world, command.level)
        elif isinstance(command, GrantItem):
            adapter.grant_item(command.to_actor, command.item_kind, command.count)
        elif isinstance(command, Broadcast):
            adapter.broadcast(command.text)
        elif isinstance(command, DirectMessage):
            adapter.send_message(command.to_actor, command.text)
        elif isinstance(command, ApplyStatusEffect):
            adapter.apply_status_effect(
                command.to_actor,
                command.effect,
                command.duration_ticks,
                command.amplifier,
                ambient=command.ambient,
                particles=command.particles,
            )
        else:
            raise TypeError(f"Unknown world command: {command!r}")
        return True
