# backend/streamspawn/engine/systems/policy.py
"""
EventPolicyEngine - Turns a raw event plus configuration into a DerivedAction.

Provides:
- Enabled / gift-subscription gating
- Per-kind count derivation with clamping
- Mob / item selection and message template lookup
- The substitution tokens each kind contributes (%user%, %bits%, ...)

Pure: reads a config snapshot, never touches the world.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict

from ..world import ActionKind, DerivedAction, EventConfig, EventKind, Skip

if TYPE_CHECKING:
    from ...config import ConfigSnapshot

logger = logging.getLogger(__name__)

PolicyResult = DerivedAction | Skip


@dataclass
class PolicyDefaults:
    """Fallbacks used when a config key is absent."""
    max_mobs_per_event: int = 50
    subscribe_amount: int = 1
    subscribe_action: str = "spawn_zombie"
    gift_amount: int = 5
    gift_mob_type: str = "zombie"
    bits_per_mob: int = 100
    cheer_mob_type: str = "skeleton"
    viewers_per_mob: int = 10
    raid_max_mobs: int = 20
    raid_mob_type: str = "creeper"
    follow_item: str = "GOLDEN_APPLE"
    follow_amount: int = 1


def trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def action_mob_kind(action: str) -> str:
    """``spawn_zombie`` -> ``zombie``."""
    action = action.strip().lower()
    return action[len("spawn_"):] if action.startswith("spawn_") else action


class EventPolicyEngine:
    """
    Derives action parameters per event kind.

    Usage:
        policy = EventPolicyEngine()
        result = policy.resolve(event.kind, event.payload, store.snapshot())
        if isinstance(result, Skip):
            ...
    """

    def __init__(self, defaults: PolicyDefaults | None = None) -> None:
        self.defaults = defaults or PolicyDefaults()
        self._handlers: Dict[EventKind, Callable[[Any, EventConfig, "ConfigSnapshot"], PolicyResult]] = {
            EventKind.SUBSCRIBE: self._subscribe,
            EventKind.GIFT_SUBSCRIPTION: self._gift_subscription,
            EventKind.CHEER: self._cheer,
            EventKind.RAID: self._raid,
            EventKind.FOLLOW: self._follow,
        }

    # ---------- Config ----------

    def event_config(self, kind: EventKind, config: "ConfigSnapshot") -> EventConfig:
        """Read the settings for one kind out of a snapshot."""
        d = self.defaults
        section = kind.config_section
        enabled = config.get_bool(f"{section}.enabled", False)
        message = config.get_str(f"{section}.message", "") or ""

        if kind is EventKind.SUBSCRIBE:
            amount = config.get_int(f"{section}.amount", d.subscribe_amount)
            subject = action_mob_kind(config.get_str(f"{section}.action", d.subscribe_action))
            rates: Dict[str, int] = {}
        elif kind is EventKind.GIFT_SUBSCRIPTION:
            amount = config.get_int(f"{section}.amount", d.gift_amount)
            subject = config.get_str(f"{section}.mob_type", d.gift_mob_type)
            rates = {}
        elif kind is EventKind.CHEER:
            amount = 0
            subject = config.get_str(f"{section}.mob_type", d.cheer_mob_type)
            rates = {"bits_per_mob": self._divisor(config, f"{section}.bits_per_mob", d.bits_per_mob)}
        elif kind is EventKind.RAID:
            amount = 0
            subject = config.get_str(f"{section}.mob_type", d.raid_mob_type)
            rates = {
                "viewers_per_mob": self._divisor(config, f"{section}.viewers_per_mob", d.viewers_per_mob),
                "max_mobs": config.get_int(f"{section}.max_mobs", d.raid_max_mobs),
            }
        else:
            amount = config.get_int(f"{section}.amount", d.follow_amount)
            subject = config.get_str(f"{section}.item", d.follow_item)
            rates = {}

        return EventConfig(
            enabled=enabled,
            amount=amount,
            subject_kind=subject.strip().lower() if kind is not EventKind.FOLLOW else subject.strip(),
            message_template=message,
            rate_parameters=rates,
        )

    def _divisor(self, config: "ConfigSnapshot", key: str, default: int) -> int:
        value = config.get_int(key, default)
        if value <= 0:
            logger.warning("Config key %s must be positive (got %d), using 1", key, value)
            return 1
        return value

    def max_per_event(self, config: "ConfigSnapshot") -> int:
        return max(0, config.get_int("spawn.max_mobs_per_event", self.defaults.max_mobs_per_event))

    # ---------- Resolution ----------

    def resolve(self, kind: EventKind | None, payload: Any, config: "ConfigSnapshot") -> PolicyResult:
        """
        Derive the action for one event.

        Args:
            kind: The event kind, or None for an unrecognised event type
            payload: Validated payload model for the kind
            config: Config snapshot frozen for this event

        Returns:
            DerivedAction, or Skip when the event produces no effect
        """
        if kind is None:
            return Skip("unknown event type")

        event_config = self.event_config(kind, config)
        if not event_config.enabled:
            logger.info("Event type %s is disabled", kind.value)
            return Skip(f"{kind.value} disabled")

        return self._handlers[kind](payload, event_config, config)

    def _subscribe(self, payload: Any, cfg: EventConfig, config: "ConfigSnapshot") -> PolicyResult:
        if payload.is_gift:
            # Credited through the gift_subscription notification instead
            return Skip("gift subscription")

        count = min(max(0, cfg.amount), self.max_per_event(config))
        return DerivedAction(
            kind=ActionKind.SPAWN_HOSTILES,
            count=count,
            subject_kind=cfg.subject_kind,
            label=payload.user_name,
            message_template=cfg.message_template,
            substitutions={"user": payload.user_name},
        )

    def _gift_subscription(self, payload: Any, cfg: EventConfig, config: "ConfigSnapshot") -> PolicyResult:
        user = payload.user_name or "Anonymous"
        total = max(0, payload.total)
        count = min(max(0, cfg.amount) * total, self.max_per_event(config))
        return DerivedAction(
            kind=ActionKind.SPAWN_HOSTILES,
            count=count,
            subject_kind=cfg.subject_kind,
            label=user,
            message_template=cfg.message_template,
            substitutions={"user": user, "amount": str(count)},
        )

    def _cheer(self, payload: Any, cfg: EventConfig, config: "ConfigSnapshot") -> PolicyResult:
        bits = payload.bits
        count = max(1, trunc_div(bits, cfg.rate_parameters["bits_per_mob"]))
        count = max(1, min(count, self.max_per_event(config)))
        return DerivedAction(
            kind=ActionKind.SPAWN_HOSTILES,
            count=count,
            subject_kind=cfg.subject_kind,
            label=payload.user_name,
            message_template=cfg.message_template,
            substitutions={"user": payload.user_name, "bits": str(bits), "amount": str(count)},
        )

    def _raid(self, payload: Any, cfg: EventConfig, config: "ConfigSnapshot") -> PolicyResult:
        viewers = payload.viewers
        rates = cfg.rate_parameters
        count = min(trunc_div(viewers, rates["viewers_per_mob"]), rates["max_mobs"])
        count = max(1, count)
        broadcaster = payload.from_broadcaster_name
        return DerivedAction(
            kind=ActionKind.SPAWN_HOSTILES,
            count=count,
            subject_kind=cfg.subject_kind,
            label=broadcaster,
            message_template=cfg.message_template,
            substitutions={"user": broadcaster, "viewers": str(viewers), "amount": str(count)},
        )

    def _follow(self, payload: Any, cfg: EventConfig, config: "ConfigSnapshot") -> PolicyResult:
        return DerivedAction(
            kind=ActionKind.GRANT_ITEM,
            count=max(0, cfg.amount),
            subject_kind=cfg.subject_kind,
            label=payload.user_name,
            message_template=cfg.message_template,
            substitutions={"user": payload.user_name},
        )
