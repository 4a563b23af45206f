"""System test specific fixtures."""

import pytest

from streamspawn.engine.payloads import validate_fields
from streamspawn.engine.systems import (
    CombatTagRule,
    CommandEmitter,
    CommandExecutor,
    EmitterConfig,
    EventPolicyEngine,
    TargetResolver,
)
from streamspawn.engine.world import EventKind


@pytest.fixture
def policy():
    """Create EventPolicyEngine with built-in defaults."""
    return EventPolicyEngine()


@pytest.fixture
def resolver(rng):
    """Create TargetResolver with a seeded random source."""
    return TargetResolver(rng=rng)


@pytest.fixture
def emitter(world):
    """Create CommandEmitter over the in-memory world."""
    return CommandEmitter(world, EmitterConfig())


@pytest.fixture
def executor(world):
    return CommandExecutor(world)


@pytest.fixture
def combat_rule():
    return CombatTagRule()


@pytest.fixture
def make_payload():
    """Validate a wire-format data dict for a kind."""

    def _make(kind: EventKind, **data):
        return validate_fields(kind, data)

    return _make
