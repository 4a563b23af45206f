"""API test specific fixtures."""

import pytest
from fastapi.testclient import TestClient

from streamspawn.main import create_app


@pytest.fixture
def app(config_store, world, rng):
    return create_app(config_store, world, rng=rng)


@pytest.fixture
def stream_engine(app):
    return app.state.stream_engine


@pytest.fixture
def test_client(app):
    """
    TestClient without the lifespan context: the game loop is not started,
    so queued events stay queued until the test drains them with
    stream_engine.process_pending().
    """
    return TestClient(app)


@pytest.fixture
def live_client(app):
    """TestClient with the lifespan running (game loop consuming the queue)."""
    with TestClient(app) as client:
        yield client
