# backend/streamspawn/engine/systems/__init__.py
"""
Engine systems.

Each system owns one step of turning a stream event into world changes:
- EventPolicyEngine: derive counts, mob/item kind and message
- TargetResolver: pick the affected player
- CommandEmitter: build the ordered WorldCommand list
- CommandExecutor: apply commands through a GameAdapter
- CombatTagRule: mining fatigue when a tagged hostile hits a player
- AdminCommandRouter: operator chat commands
"""

from .combat import CombatTagRule, Damager, is_tagged_hostile
from .emitter import CommandEmitter, EmitterConfig, render_template
from .executor import AdapterError, CommandExecutor, ExecutionReport, GameAdapter
from .policy import EventPolicyEngine, PolicyDefaults
from .router import AdminCommandRouter
from .targeting import ActorLookup, OnlineActorLookup, TargetResolver

__all__ = [
    "ActorLookup",
    "AdapterError",
    "AdminCommandRouter",
    "CombatTagRule",
    "CommandEmitter",
    "CommandExecutor",
    "Damager",
    "EmitterConfig",
    "EventPolicyEngine",
    "ExecutionReport",
    "GameAdapter",
    "OnlineActorLookup",
    "PolicyDefaults",
    "TargetResolver",
    "is_tagged_hostile",
    "render_template",
]
