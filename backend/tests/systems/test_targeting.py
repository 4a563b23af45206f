"""Tests for TargetResolver."""

import logging
import random

import pytest

from streamspawn.engine.systems import TargetResolver
from streamspawn.engine.world import ActorRef, TargetMode, TargetPolicy

BOB = ActorRef("id-bob", "bob")
ALICE = ActorRef("id-alice", "Alice")
BOB_EXACT = ActorRef("id-bob2", "Bob")


def streamer_policy(name):
    return TargetPolicy(mode=TargetMode.FIXED_ACTOR, fixed_actor_name=name, mode_name="streamer")


RANDOM_POLICY = TargetPolicy(mode=TargetMode.RANDOM_ONLINE_ACTOR, mode_name="random")


@pytest.mark.systems
def test_fixed_mode_falls_back_to_case_insensitive(resolver):
    assert resolver.select(streamer_policy("Bob"), [BOB, ALICE]) == BOB


@pytest.mark.systems
def test_fixed_mode_prefers_exact_match(resolver):
    assert resolver.select(streamer_policy("Bob"), [BOB, BOB_EXACT, ALICE]) == BOB_EXACT


@pytest.mark.systems
def test_fixed_mode_missing_player_logs_online_list(resolver, caplog):
    with caplog.at_level(logging.WARNING):
        result = resolver.select(streamer_policy("Carol"), [BOB, ALICE])

    assert result is None
    assert "Target player 'Carol' not found!" in caplog.text
    assert "bob, Alice" in caplog.text


@pytest.mark.systems
def test_fixed_mode_without_name(resolver):
    assert resolver.select(streamer_policy(None), [BOB]) is None


@pytest.mark.systems
def test_random_mode_is_reproducible_with_seed():
    online = [ActorRef(f"id-{i}", f"P{i}") for i in range(10)]

    first = [TargetResolver(random.Random(7)).select(RANDOM_POLICY, online) for _ in range(5)]
    second = [TargetResolver(random.Random(7)).select(RANDOM_POLICY, online) for _ in range(5)]

    assert first == second
    assert all(actor in online for actor in first)


@pytest.mark.systems
def test_random_mode_only_picks_online_actors(resolver):
    online = [BOB, ALICE]
    picks = {resolver.select(RANDOM_POLICY, online) for _ in range(50)}
    assert picks <= set(online)
    assert picks


@pytest.mark.systems
def test_random_mode_with_nobody_online(resolver, caplog):
    with caplog.at_level(logging.WARNING):
        assert resolver.select(RANDOM_POLICY, []) is None
    assert "No players online" in caplog.text


@pytest.mark.systems
def test_unknown_mode_selects_nobody(resolver, caplog):
    policy = TargetPolicy(mode=None, fixed_actor_name="bob", mode_name="chat_vote")

    with caplog.at_level(logging.WARNING):
        assert resolver.select(policy, [BOB]) is None
    assert "chat_vote" in caplog.text


@pytest.mark.systems
def test_fixed_mode_uses_adapter_lookup(rng):
    class RecordingLookup:
        def __init__(self):
            self.calls = []

        def find_actor_exact(self, name):
            self.calls.append(("exact", name))
            return None

        def find_actor_case_insensitive(self, name):
            self.calls.append(("case_insensitive", name))
            return BOB

    lookup = RecordingLookup()
    resolver = TargetResolver(rng=rng, lookup=lookup)

    assert resolver.select(streamer_policy("Bob"), [BOB, ALICE]) == BOB
    assert lookup.calls == [("exact", "Bob"), ("case_insensitive", "Bob")]


@pytest.mark.systems
def test_fixed_mode_against_world(rng, world, streamer):
    resolver = TargetResolver(rng=rng, lookup=world)

    assert resolver.select(streamer_policy("STREAMER"), world.list_online_actors()) == streamer.ref
    assert resolver.select(streamer_policy("Nobody"), world.list_online_actors()) is None


@pytest.mark.systems
def test_engine_resolves_through_adapter(engine, world):
    assert engine.targets.lookup is world
