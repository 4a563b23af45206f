# backend/streamspawn/engine/systems/targeting.py
"""
TargetResolver - Picks the player an event lands on.

Modes:
- streamer: the configured player, exact name first, then case-insensitive
- random:   any online player, chosen with an injectable RNG

Name matching goes through an ActorLookup, normally the game adapter.
"""

from __future__ import annotations

import logging
import random
from typing import Protocol, Sequence

from ..world import ActorRef, TargetMode, TargetPolicy

logger = logging.getLogger(__name__)


class ActorLookup(Protocol):
    """Name lookup capabilities of the game adapter."""

    def find_actor_exact(self, name: str) -> ActorRef | None: ...

    def find_actor_case_insensitive(self, name: str) -> ActorRef | None: ...


class OnlineActorLookup:
    """ActorLookup over a plain list of online actors."""

    def __init__(self, online_actors: Sequence[ActorRef]) -> None:
        self.online_actors = list(online_actors)

    def find_actor_exact(self, name: str) -> ActorRef | None:
        for actor in self.online_actors:
            if actor.name == name:
                return actor
        return None

    def find_actor_case_insensitive(self, name: str) -> ActorRef | None:
        lowered = name.lower()
        for actor in self.online_actors:
            if actor.name.lower() == lowered:
                return actor
        return None


class TargetResolver:
    """
    Usage:
        resolver = TargetResolver(rng=random.Random(42), lookup=adapter)
        actor = resolver.select(policy, adapter.list_online_actors())

    Without a lookup, names are matched against the ``online_actors`` passed
    to select().
    """

    def __init__(self, rng: random.Random | None = None, lookup: ActorLookup | None = None) -> None:
        self.rng = rng or random.Random()
        self.lookup = lookup

    def select(self, policy: TargetPolicy, online_actors: Sequence[ActorRef]) -> ActorRef | None:
        if policy.mode is TargetMode.FIXED_ACTOR:
            return self._fixed(policy.fixed_actor_name, online_actors)
        if policy.mode is TargetMode.RANDOM_ONLINE_ACTOR:
            return self._random(online_actors)

        logger.warning("Unknown target mode: %s", policy.mode_name)
        return None

    def _fixed(self, name: str | None, online_actors: Sequence[ActorRef]) -> ActorRef | None:
        if not name:
            logger.warning("target.streamer_username is not set")
            return None

        lookup = self.lookup if self.lookup is not None else OnlineActorLookup(online_actors)
        actor = lookup.find_actor_exact(name) or lookup.find_actor_case_insensitive(name)
        if actor is not None:
            return actor

        logger.warning("Target player '%s' not found!", name)
        logger.warning("Make sure they are online and the username matches exactly")
        logger.warning("Online players: %s", ", ".join(a.name for a in online_actors) or "(none)")
        return None

    def _random(self, online_actors: Sequence[ActorRef]) -> ActorRef | None:
        if not online_actors:
            logger.warning("No players online to target!")
            return None
        actors = list(online_actors)
        return actors[self.rng.randrange(len(actors))]
