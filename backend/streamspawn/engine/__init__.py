# backend/streamspawn/engine/__init__.py
from .engine import EventOutcome, StreamEngine
from .payloads import EventParseError, parse_event
from .world import ActorRef, Event, EventKind, Location, World, WorldActor

__all__ = [
    "ActorRef",
    "Event",
    "EventKind",
    "EventOutcome",
    "EventParseError",
    "Location",
    "StreamEngine",
    "World",
    "WorldActor",
    "parse_event",
]
