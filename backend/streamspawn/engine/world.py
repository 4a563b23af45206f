# backend/streamspawn/engine/world.py
from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping


# Simple type aliases for clarity
ActorId = str
WorldName = str
EntityId = int


class EventKind(Enum):
    """Stream notification kinds. Values are the wire ``eventType`` strings."""
    SUBSCRIBE = "subscribe"
    GIFT_SUBSCRIPTION = "gift_subscription"
    CHEER = "cheer"
    RAID = "raid"
    FOLLOW = "follow"

    @property
    def config_section(self) -> str:
        """Config path for this kind, e.g. ``events.giftsubscription``."""
        return "events." + self.value.replace("_", "")

    @classmethod
    def from_wire(cls, event_type: str) -> "EventKind | None":
        try:
            return cls(event_type)
        except ValueError:
            return None


class ActionKind(Enum):
    SPAWN_HOSTILES = "spawn_hostiles"
    GRANT_ITEM = "grant_item"


class TargetMode(Enum):
    FIXED_ACTOR = "streamer"
    RANDOM_ONLINE_ACTOR = "random"


@dataclass(frozen=True)
class Event:
    """
    One inbound notification. ``kind`` is None when ``event_type`` is not a
    kind we know; the engine skips those.
    """
    event_type: str
    fields: Mapping[str, Any]
    kind: EventKind | None = None
    # Validated pydantic model for known kinds (see payloads.py)
    payload: Any = field(default=None, compare=False)

    @classmethod
    def create(cls, event_type: str, fields: Mapping[str, Any], payload: Any = None) -> "Event":
        return cls(
            event_type=event_type,
            fields=MappingProxyType(dict(fields)),
            kind=EventKind.from_wire(event_type),
            payload=payload,
        )


@dataclass(frozen=True)
class ActorRef:
    """Handle to a connected player. Equality is by platform id only."""
    id: ActorId
    name: str = field(compare=False)


@dataclass(frozen=True)
class Vector:
    x: float
    y: float
    z: float

    def multiply(self, factor: float) -> "Vector":
        return Vector(self.x * factor, self.y * factor, self.z * factor)

    @classmethod
    def from_rotation(cls, yaw: float, pitch: float) -> "Vector":
        """Unit facing vector for a yaw/pitch pair in degrees (Minecraft convention)."""
        rot_x = math.radians(yaw)
        rot_y = math.radians(pitch)
        xz = math.cos(rot_y)
        return cls(-xz * math.sin(rot_x), -math.sin(rot_y), xz * math.cos(rot_x))


@dataclass(frozen=True)
class Location:
    world: WorldName
    x: float
    y: float
    z: float

    def add(self, offset: Vector) -> "Location":
        return Location(self.world, self.x + offset.x, self.y + offset.y, self.z + offset.z)

    @property
    def block(self) -> tuple[int, int, int]:
        return (math.floor(self.x), math.floor(self.y), math.floor(self.z))


@dataclass(frozen=True)
class TargetPolicy:
    """
    Who an event affects. ``mode`` is None when the configured mode name is
    not recognised; ``mode_name`` keeps the raw value for diagnostics.
    """
    mode: TargetMode | None
    fixed_actor_name: str | None = None
    mode_name: str = ""

    @classmethod
    def from_config(cls, config: Any) -> "TargetPolicy":
        mode_name = config.get_str("target.mode", "streamer") or ""
        try:
            mode = TargetMode(mode_name.strip().lower())
        except ValueError:
            mode = None
        return cls(
            mode=mode,
            fixed_actor_name=config.get_str("target.streamer_username"),
            mode_name=mode_name,
        )


@dataclass(frozen=True)
class EventConfig:
    """Per-kind settings pulled from one config snapshot."""
    enabled: bool
    amount: int
    subject_kind: str
    message_template: str
    rate_parameters: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class DerivedAction:
    kind: ActionKind
    count: int
    subject_kind: str
    label: str
    message_template: str
    substitutions: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Skip:
    """Policy result meaning "do nothing for this event"."""
    reason: str


# ---------- In-memory world ----------


class AdapterError(Exception):
    """A single world operation could not be carried out."""


@dataclass
class WorldActor:
    id: ActorId
    name: str
    location: Location
    yaw: float = 0.0
    pitch: float = 0.0
    inventory: Dict[str, int] = field(default_factory=dict)
    messages: List[str] = field(default_factory=list)
    effects: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def ref(self) -> ActorRef:
        return ActorRef(self.id, self.name)

    @property
    def facing(self) -> Vector:
        return Vector.from_rotation(self.yaw, self.pitch)


@dataclass
class SpawnedEntity:
    id: EntityId
    kind: str
    location: Location
    custom_name: str | None = None
    custom_name_visible: bool = False
    target_id: ActorId | None = None


class World:
    """
    In-memory game adapter.

    Stands in for a live server: tracks online actors, spawned entities,
    world difficulty and chat. The dev server runs against it until a real
    adapter is plugged in, and tests drive it directly.

    Usage:
        world = World()
        world.add_actor(WorldActor("uuid-1", "Steve", Location("mines/deep", 0, 64, 0)))
        engine = StreamEngine(store, world)
    """

    def __init__(self, unloadable_worlds: set[WorldName] | None = None) -> None:
        self.actors: Dict[ActorId, WorldActor] = {}
        self.entities: Dict[EntityId, SpawnedEntity] = {}
        self.difficulty: Dict[WorldName, str] = {}
        self.broadcasts: List[str] = []
        # Worlds whose chunks refuse to load; spawns there fail
        self.unloadable_worlds: set[WorldName] = set(unloadable_worlds or ())
        self._entity_ids = itertools.count(1)

    def add_actor(self, actor: WorldActor) -> WorldActor:
        self.actors[actor.id] = actor
        return actor

    def remove_actor(self, actor_id: ActorId) -> None:
        self.actors.pop(actor_id, None)

    def _actor(self, actor: ActorRef) -> WorldActor:
        found = self.actors.get(actor.id)
        if found is None:
            raise AdapterError(f"Actor {actor.name} ({actor.id}) is not online")
        return found

    # ---------- Lookup capabilities ----------

    def list_online_actors(self) -> List[ActorRef]:
        return [a.ref for a in self.actors.values()]

    def find_actor_exact(self, name: str) -> ActorRef | None:
        for actor in self.actors.values():
            if actor.name == name:
                return actor.ref
        return None

    def find_actor_case_insensitive(self, name: str) -> ActorRef | None:
        lowered = name.lower()
        for actor in self.actors.values():
            if actor.name.lower() == lowered:
                return actor.ref
        return None

    def current_location(self, actor: ActorRef) -> Location:
        return self._actor(actor).location

    def current_facing(self, actor: ActorRef) -> Vector:
        return self._actor(actor).facing

    def display_name(self, actor: ActorRef) -> str:
        return self._actor(actor).name

    # ---------- World mutations ----------

    def set_difficulty(self, world: WorldName, level: str) -> None:
        self.difficulty[world] = level

    def spawn_hostile(
        self,
        position: Location,
        kind: str,
        custom_name: str,
        target: ActorRef | None = None,
    ) -> EntityId | None:
        if position.world in self.unloadable_worlds:
            raise AdapterError(f"Chunk at {position.block} in {position.world} is unavailable")
        entity = SpawnedEntity(
            id=next(self._entity_ids),
            kind=kind,
            location=position,
            custom_name=custom_name,
            custom_name_visible=True,
            target_id=target.id if target else None,
        )
        self.entities[entity.id] = entity
        return entity.id

    def grant_item(self, actor: ActorRef, item_kind: str, count: int) -> None:
        inventory = self._actor(actor).inventory
        inventory[item_kind] = inventory.get(item_kind, 0) + count

    def broadcast(self, text: str) -> None:
        self.broadcasts.append(text)

    def send_message(self, actor: ActorRef, text: str) -> None:
        self._actor(actor).messages.append(text)

    def apply_status_effect(
        self,
        actor: ActorRef,
        effect: str,
        duration_ticks: int,
        amplifier: int,
        *,
        ambient: bool = True,
        particles: bool = False,
    ) -> None:
        self._actor(actor).effects.append({
            "effect": effect,
            "duration_ticks": duration_ticks,
            "amplifier": amplifier,
            "ambient": ambient,
            "particles": particles,
        })
