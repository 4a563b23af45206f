"""
Tests for CommandEmitter.

Covers batch ordering, mines-zone gating, spawn position and broadcast
rendering.
"""

import pytest

from streamspawn.engine.commands import (
    Broadcast,
    DirectMessage,
    GrantItem,
    SetWorldDifficulty,
    SpawnHostiles,
)
from streamspawn.engine.systems import CommandEmitter, EmitterConfig
from streamspawn.engine.world import ActionKind, DerivedAction, Location

CHEER_TEMPLATE = "&6%user% cheered %bits% bits! %amount% skeletons for %player%!"


def spawn_action(count=5, template=CHEER_TEMPLATE, subject="skeleton"):
    return DerivedAction(
        kind=ActionKind.SPAWN_HOSTILES,
        count=count,
        subject_kind=subject,
        label="Bitsy",
        message_template=template,
        substitutions={"user": "Bitsy", "bits": "500", "amount": str(count)},
    )


@pytest.mark.systems
def test_cheer_batch_in_mines(emitter, streamer):
    commands = emitter.build(spawn_action(), streamer.ref)

    assert len(commands) == 9
    assert commands[0] == SetWorldDifficulty("mines/deep", "easy")
    spawns = commands[1:6]
    assert all(isinstance(c, SpawnHostiles) for c in spawns)
    assert all(c.count == 1 and c.subject_kind == "skeleton" and c.label == "Bitsy" for c in spawns)
    assert all(c.near_actor == streamer.ref for c in spawns)
    assert commands[6] == DirectMessage(streamer.ref, "§c⚠ 5 Twitch mob(s) spawned in the mines!")
    assert commands[7] == DirectMessage(streamer.ref, "§e⛏ Watch out - they slow down mining speed!")
    assert commands[8] == Broadcast("§6Bitsy cheered 500 bits! 5 skeletons for Streamer!")


@pytest.mark.systems
def test_spawn_position_is_ahead_of_actor(emitter, streamer):
    spawn = next(c for c in emitter.build(spawn_action(count=1), streamer.ref) if isinstance(c, SpawnHostiles))

    # Facing +Z with the default distance of 3
    assert spawn.position.world == "mines/deep"
    assert spawn.position.x == pytest.approx(10.5)
    assert spawn.position.y == pytest.approx(40.0)
    assert spawn.position.z == pytest.approx(-0.5)


@pytest.mark.systems
def test_spawn_distance_is_configurable(world, streamer):
    emitter = CommandEmitter(world, EmitterConfig(spawn_distance=5))
    spawn = next(c for c in emitter.build(spawn_action(count=1), streamer.ref) if isinstance(c, SpawnHostiles))
    assert spawn.position.z == pytest.approx(1.5)


@pytest.mark.systems
def test_outside_mines_only_warns(emitter, world):
    alice = world.find_actor_exact("Alice")

    commands = emitter.build(spawn_action(), alice)

    assert commands[0] == DirectMessage(alice, "§c⚠ Mobs can only spawn in mines worlds!")
    assert not any(isinstance(c, (SpawnHostiles, SetWorldDifficulty)) for c in commands)
    # The broadcast still closes the batch
    assert commands[1:] == [Broadcast("§6Bitsy cheered 500 bits! 5 skeletons for Alice!")]


@pytest.mark.systems
def test_zone_gating_is_stable(emitter, world):
    alice = world.find_actor_exact("Alice")
    assert emitter.build(spawn_action(), alice) == emitter.build(spawn_action(), alice)


@pytest.mark.systems
def test_prefix_must_match_at_start(emitter, world, streamer):
    streamer.location = Location("overworld/mines/deep", 0.0, 0.0, 0.0)
    commands = emitter.build(spawn_action(), streamer.ref)
    assert not any(isinstance(c, SpawnHostiles) for c in commands)


@pytest.mark.systems
def test_no_target_emits_nothing(emitter):
    assert emitter.build(spawn_action(), None) == []


@pytest.mark.systems
def test_zero_count_has_no_spawn_messages(emitter, streamer):
    commands = emitter.build(spawn_action(count=0, template=""), streamer.ref)
    assert commands == [SetWorldDifficulty("mines/deep", "easy")]


@pytest.mark.systems
def test_empty_template_suppresses_broadcast(emitter, streamer):
    commands = emitter.build(spawn_action(count=2, template=""), streamer.ref)
    assert not any(isinstance(c, Broadcast) for c in commands)
    assert len(commands) == 5


@pytest.mark.systems
def test_unknown_placeholders_left_in_broadcast(emitter, streamer):
    commands = emitter.build(spawn_action(count=1, template="%user% vs %boss%"), streamer.ref)
    assert commands[-1] == Broadcast("Bitsy vs %boss%")


@pytest.mark.systems
def test_grant_item_not_zone_gated(emitter, world):
    alice = world.find_actor_exact("Alice")
    action = DerivedAction(
        kind=ActionKind.GRANT_ITEM,
        count=1,
        subject_kind="GOLDEN_APPLE",
        label="Fan",
        message_template="&a%user% followed! %player% received a golden apple!",
        substitutions={"user": "Fan"},
    )

    commands = emitter.build(action, alice)

    assert commands == [
        GrantItem(alice, "GOLDEN_APPLE", 1),
        Broadcast("§aFan followed! Alice received a golden apple!"),
    ]
