"""
Test configuration and fixtures for cube-api tests.
"""
import random

import pytest
from fastapi.testclient import TestClient

from cube_api.config import Settings
from cube_api.main import create_app
from cube_api.domain.catalog import BlockCatalog
from cube_api.domain.entities import Position
from cube_api.domain.events import DomainEventPublisher
from cube_api.application.graph_store import GraphStore
from cube_api.application.device_registry import DeviceRegistry
from cube_api.application.simulation import SimulationEngine
from cube_api.application.deployment import DeploymentPipeline


@pytest.fixture
def test_settings():
    """Settings with fast timings so background steps finish quickly."""
    return Settings(
        SIMULATION_TICK_SECONDS=0.01,
        SIMULATION_LOG_PROBABILITY=0.3,
        SIMULATION_SEED=42,
        DEPLOY_STEP_SECONDS=0.01,
        DEPLOY_TIMEOUT_GRACE_SECONDS=1.0,
    )


@pytest.fixture
def client(test_settings):
    """Test client; the context manager keeps one event loop for the whole test."""
    app = create_app(test_settings)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def publisher():
    return DomainEventPublisher()


@pytest.fixture
def catalog():
    return BlockCatalog()


@pytest.fixture
def store(catalog, publisher):
    return GraphStore(catalog, publisher)


@pytest.fixture
def registry():
    return DeviceRegistry()


@pytest.fixture
def engine(registry, publisher):
    """Engine whose scheduled tick never fires during a test; call tick() by hand."""
    return SimulationEngine(
        registry=registry,
        publisher=publisher,
        tick_seconds=3600,
        log_probability=0.3,
        rng=random.Random(7),
    )


@pytest.fixture
def pipeline(store, registry, publisher):
    return DeploymentPipeline(
        graph_store=store,
        registry=registry,
        publisher=publisher,
        step_seconds=0.01,
        timeout_grace=1.0,
    )


@pytest.fixture
def current_sketch(store):
    """A sketch with one committed moisture -> pump connection, set as current."""
    sketch = store.create_sketch(name="Irrigation")
    store.set_current(sketch.id)
    sensor = store.add_node("moisture-01", Position(0, 0))
    pump = store.add_node("pump-01", Position(100, 0))
    store.connect(sensor.id, pump.id, "value", "trigger")
    store.save_current()
    return sketch
