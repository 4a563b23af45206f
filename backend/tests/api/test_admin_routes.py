"""
Tests for admin API routes.

Tests configuration reload, sample event triggers and status.
"""

import pytest


@pytest.mark.api
def test_reload_config(test_client, stream_engine, write_config):
    write_config({"events": {"cheer": {"bits_per_mob": 25}}})

    response = test_client.post("/api/admin/reload")

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": "Configuration reloaded"}
    assert stream_engine.store.get_int("events.cheer.bits_per_mob") == 25


@pytest.mark.api
def test_reload_broken_yaml_keeps_old_config(test_client, stream_engine, config_file):
    config_file.write_text("events: {cheer: [\n", encoding="utf-8")

    response = test_client.post("/api/admin/reload")

    assert response.status_code == 500
    assert "Invalid YAML" in response.json()["detail"]
    assert stream_engine.store.get_int("events.cheer.bits_per_mob") == 100


@pytest.mark.api
def test_trigger_sample_by_alias(test_client, stream_engine):
    response = test_client.post("/api/admin/test/gift")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["event_type"] == "gift_subscription"
    assert data["data"]["userName"] == "TestGifter"
    assert data["data"]["total"] == 5

    outcomes = stream_engine.process_pending()
    # 5 gifts * 5 zombies, under the global max
    assert outcomes[0].report.spawned == 25


@pytest.mark.api
def test_trigger_unknown_event(test_client, stream_engine):
    response = test_client.post("/api/admin/test/host")

    assert response.status_code == 404
    assert "Unknown event type: host" in response.json()["detail"]
    assert stream_engine.pending == 0


@pytest.mark.api
def test_status(test_client, stream_engine, write_config):
    write_config({"events": {"follow": {"enabled": False}}})
    test_client.post("/api/admin/reload")
    test_client.post("/event", json={"eventType": "follow", "data": {"userName": "Fan"}})

    response = test_client.get("/api/admin/status")

    assert response.status_code == 200
    data = response.json()
    assert data["target_mode"] == "streamer"
    assert data["target_player"] == "Streamer"
    assert data["enabled_events"] == ["subscribe", "gift_subscription", "cheer", "raid"]
    assert sorted(data["online_players"]) == ["Alice", "Streamer"]
    assert data["pending_events"] == 1
