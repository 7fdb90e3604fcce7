"""Shared fixtures for placement config tests."""

import pytest
from fastapi.testclient import TestClient

from affinity_placement.main import app
from affinity_placement.services.placement_config import PlacementConfigStore, get_store


@pytest.fixture
def store():
    """Fresh store holding the default config."""
    return PlacementConfigStore()


@pytest.fixture
def client(store):
    """API client wired to the per-test store."""
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
