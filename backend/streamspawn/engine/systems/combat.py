# backend/streamspawn/engine/systems/combat.py
"""
CombatTagRule - Mining fatigue for players hit by stream-spawned hostiles.

Hostiles spawned by the emitter carry a visible name in the reserved marker
colour. When one of them damages a player, the player gets mining fatigue.
Anything else that deals damage, named or not, is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..commands import DARK_RED, HOSTILE_TAG_COLOR, ApplyStatusEffect, DirectMessage, strip_color

if TYPE_CHECKING:
    from ...config import ConfigSnapshot
    from ..world import ActorRef

logger = logging.getLogger(__name__)

MINING_FATIGUE = "mining_fatigue"


@dataclass(frozen=True)
class Damager:
    """What the game tells us about the entity that dealt damage."""
    entity_id: int | None = None
    custom_name: str | None = None


def is_tagged_hostile(damager: Damager | None) -> bool:
    return bool(damager and damager.custom_name and damager.custom_name.startswith(HOSTILE_TAG_COLOR))


class CombatTagRule:
    """
    Usage:
        rule = CombatTagRule()
        command = rule.on_actor_damaged(victim, damager, store.snapshot())
    """

    default_duration: int = 200  # ticks (10 seconds)
    default_amplifier: int = 1  # level II

    def on_actor_damaged(
        self,
        victim: "ActorRef | None",
        damager: Damager | None,
        config: "ConfigSnapshot",
    ) -> ApplyStatusEffect | None:
        if victim is None or not is_tagged_hostile(damager):
            return None

        duration = config.get_int("effects.mining_fatigue.duration", self.default_duration)
        amplifier = config.get_int("effects.mining_fatigue.amplifier", self.default_amplifier)
        logger.info(
            "Twitch mob (%s) hit %s - Applied Mining Fatigue %d",
            strip_color(damager.custom_name), victim.name, amplifier + 1,
        )
        return ApplyStatusEffect(
            to_actor=victim,
            effect=MINING_FATIGUE,
            duration_ticks=duration,
            amplifier=amplifier,
            ambient=True,
            particles=False,
        )

    def feedback(self, victim: "ActorRef", damager: Damager) -> DirectMessage:
        mob_name = strip_color(damager.custom_name or "")
        return DirectMessage(victim, f"{DARK_RED}⛏ Mining speed reduced by {mob_name}!")
