"""
Tests for FastAPI endpoints.
"""
import time

import pytest
from fastapi.testclient import TestClient

from cube_api.config import Settings
from cube_api.main import create_app
from cube_api.application.deployment import DEPLOYMENT_STEPS
from cube_api.domain.entities import DeploymentStatus, SimulationState


def _create_current_sketch(client, name="Irrigation"):
    """Create a sketch, open it and wire moisture -> pump on the canvas."""
    sketch_id = client.post("/sketches", json={"name": name}).json()["id"]
    client.put("/sketches/current", json={"sketchId": sketch_id})
    sensor = client.post("/canvas/nodes", json={"templateId": "moisture-01"}).json()
    pump = client.post(
        "/canvas/nodes", json={"templateId": "pump-01", "position": {"x": 100, "y": 0}}
    ).json()
    edge = client.post("/canvas/edges", json={
        "source": sensor["id"],
        "target": pump["id"],
        "sourceHandle": "value",
        "targetHandle": "trigger",
    }).json()
    return sketch_id, sensor, pump, edge


def _wait_for_deployment(client, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        data = client.get("/deployment").json()
        if data["status"] != "deploying":
            return data
        time.sleep(0.02)
    pytest.fail("Deployment did not finish in time")


class TestRootEndpoints:
    """Test root and health endpoints."""

    def test_root(self, client):
        """Test the welcome message."""
        response = client.get("/")
        assert response.status_code == 200
        assert "Cube API" in response.json()["message"]

    def test_health(self, client):
        """Test the basic health check."""
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"

    def test_runtime_health(self, client):
        """Test the runtime summary."""
        data = client.get("/health/runtime").json()
        assert data["sketches"] == 0
        assert data["current_sketch"] is None
        assert data["devices"] == {"total": 1, "online": 1}
        assert data["simulation"]["state"] == "idle"
        assert data["deployment"]["status"] == "idle"


class TestBlockEndpoints:
    """Test block library endpoints."""

    def test_list_blocks(self, client):
        """Test listing every template with camelCase fields."""
        blocks = client.get("/blocks").json()

        assert len(blocks) == 16
        pump = next(block for block in blocks if block["id"] == "pump-01")
        assert pump["type"] == "actuator"
        assert pump["inputs"] == ["trigger"]
        assert pump["defaultConfig"]["duration"] == 5

    def test_blocks_by_category(self, client):
        """Test grouping by category."""
        groups = client.get("/blocks/categories").json()
        assert list(groups) == ["Sensors", "Actuators", "Logic", "AI"]

    def test_get_block(self, client):
        """Test fetching one template."""
        response = client.get("/blocks/threshold-01")
        assert response.status_code == 200
        assert response.json()["outputs"] == ["above", "below"]

    def test_unknown_block(self, client):
        """Test fetching a missing template."""
        response = client.get("/blocks/nope-01")
        assert response.status_code == 404
        assert "nope-01" in response.json()["detail"]


class TestSketchEndpoints:
    """Test sketch collection endpoints."""

    def test_create_sketch_defaults(self, client):
        """Test creating a sketch without a name."""
        response = client.post("/sketches", json={})
        assert response.status_code == 201

        data = response.json()
        assert data["name"] == "New Sketch 1"
        assert data["description"] == "A new IoT workflow sketch"
        assert data["nodes"] == []
        assert "createdAt" in data and "updatedAt" in data

    def test_create_does_not_set_current(self, client):
        """Test a new sketch is not opened automatically."""
        client.post("/sketches", json={"name": "Greenhouse"})

        response = client.get("/sketches/current")
        assert response.status_code == 200
        assert response.json() is None

    def test_list_and_get(self, client):
        """Test listing and fetching sketches."""
        sketch_id = client.post("/sketches", json={"name": "Greenhouse"}).json()["id"]

        assert [s["id"] for s in client.get("/sketches").json()] == [sketch_id]
        assert client.get(f"/sketches/{sketch_id}").json()["name"] == "Greenhouse"
        assert client.get("/sketches/missing").status_code == 404

    def test_update_sketch(self, client):
        """Test renaming a sketch."""
        sketch_id = client.post("/sketches", json={"name": "Old"}).json()["id"]

        response = client.patch(f"/sketches/{sketch_id}", json={"name": "New"})

        assert response.status_code == 200
        assert response.json()["name"] == "New"

    def test_set_current(self, client):
        """Test opening and closing a sketch."""
        sketch_id = client.post("/sketches", json={}).json()["id"]

        assert client.put("/sketches/current", json={"sketchId": sketch_id}).json()["id"] == sketch_id
        assert client.get("/sketches/current").json()["id"] == sketch_id
        assert client.put("/sketches/current", json={"sketchId": None}).json() is None
        assert client.put("/sketches/current", json={"sketchId": "missing"}).status_code == 404

    def test_delete_sketch(self, client):
        """Test deleting the current sketch clears the focus."""
        sketch_id, *_ = _create_current_sketch(client)

        response = client.delete(f"/sketches/{sketch_id}")
        assert response.status_code == 200
        assert response.json() == {"success": True, "sketchId": sketch_id}
        assert client.get("/sketches/current").json() is None
        assert client.get("/canvas").json()["nodes"] == []

        assert client.delete(f"/sketches/{sketch_id}").status_code == 404

    def test_save_graph(self, client):
        """Test replacing a sketch's graph; omitted node fields come from the template."""
        sketch_id = client.post("/sketches", json={}).json()["id"]

        response = client.put(f"/sketches/{sketch_id}/graph", json={
            "nodes": [
                {"id": "n1", "templateId": "moisture-01"},
                {"id": "n2", "templateId": "pump-01", "config": {"duration": 10}},
            ],
            "edges": [
                {"id": "e1", "source": "n1", "target": "n2",
                 "sourceHandle": "value", "targetHandle": "trigger"},
            ],
        })

        assert response.status_code == 200
        data = response.json()
        assert data["nodes"][0]["label"] == "Soil Moisture Sensor"
        assert data["nodes"][0]["outputs"] == ["value"]
        assert data["nodes"][1]["config"] == {"duration": 10}
        assert data["edges"][0]["type"] == "logic"

    def test_save_graph_is_atomic(self, client):
        """Test a payload with a dangling edge changes nothing."""
        sketch_id = client.post("/sketches", json={}).json()["id"]
        client.put(f"/sketches/{sketch_id}/graph", json={
            "nodes": [{"id": "n1", "templateId": "led-01"}],
            "edges": [],
        })

        response = client.put(f"/sketches/{sketch_id}/graph", json={
            "nodes": [{"id": "n2", "templateId": "led-01"}],
            "edges": [{"id": "e1", "source": "n2", "target": "ghost"}],
        })

        assert response.status_code == 400
        assert [n["id"] for n in client.get(f"/sketches/{sketch_id}").json()["nodes"]] == ["n1"]

    def test_save_graph_unknown_template(self, client):
        """Test nodes must reference catalogued templates."""
        sketch_id = client.post("/sketches", json={}).json()["id"]
        response = client.put(f"/sketches/{sketch_id}/graph", json={
            "nodes": [{"id": "n1", "templateId": "warp-drive-01"}],
        })
        assert response.status_code == 404


class TestCanvasEndpoints:
    """Test editing the working graph."""

    def test_moisture_pump_flow(self, client):
        """Test adding, connecting and deleting nodes."""
        sketch_id, sensor, pump, edge = _create_current_sketch(client)

        assert sensor["type"] == "sensor"
        assert sensor["templateId"] == "moisture-01"
        assert edge["sourceHandle"] == "value"

        canvas = client.get("/canvas").json()
        assert canvas["sketchId"] == sketch_id
        assert len(canvas["nodes"]) == 2
        assert len(canvas["edges"]) == 1

        assert client.delete(f"/canvas/nodes/{sensor['id']}").json() == {"success": True}

        canvas = client.get("/canvas").json()
        assert [n["id"] for n in canvas["nodes"]] == [pump["id"]]
        assert canvas["edges"] == []

    def test_edits_need_save(self, client):
        """Test canvas edits reach the sketch only after saving."""
        sketch_id, *_ = _create_current_sketch(client)
        assert client.get(f"/sketches/{sketch_id}").json()["nodes"] == []

        response = client.post("/canvas/save")

        assert response.status_code == 200
        saved = client.get(f"/sketches/{sketch_id}").json()
        assert len(saved["nodes"]) == 2
        assert len(saved["edges"]) == 1

    def test_save_without_current(self, client):
        """Test saving with no sketch open."""
        response = client.post("/canvas/save")
        assert response.status_code == 409

    def test_invalid_connections(self, client):
        """Test dangling and undeclared-handle edges are rejected."""
        _, sensor, pump, _ = _create_current_sketch(client)

        dangling = client.post("/canvas/edges", json={"source": sensor["id"], "target": "ghost"})
        bad_handle = client.post("/canvas/edges", json={
            "source": sensor["id"], "target": pump["id"], "sourceHandle": "trigger",
        })

        assert dangling.status_code == 400
        assert bad_handle.status_code == 400
        assert len(client.get("/canvas").json()["edges"]) == 1

    def test_unknown_template(self, client):
        """Test dropping an uncatalogued block."""
        response = client.post("/canvas/nodes", json={"templateId": "warp-drive-01"})
        assert response.status_code == 404

    def test_update_config_and_position(self, client):
        """Test configuring and moving a node."""
        _, sensor, _, _ = _create_current_sketch(client)

        client.put(f"/canvas/nodes/{sensor['id']}/config", json={"key": "interval", "value": 30})
        client.put(f"/canvas/nodes/{sensor['id']}/position", json={"x": 40, "y": 50})

        node = next(n for n in client.get("/canvas").json()["nodes"] if n["id"] == sensor["id"])
        assert node["config"]["interval"] == 30
        assert node["position"] == {"x": 40, "y": 50}

    def test_config_rejects_non_scalars(self, client):
        """Test only numbers and text are accepted as config values."""
        _, sensor, _, _ = _create_current_sketch(client)

        for value in (True, [1, 2], {"a": 1}, None):
            response = client.put(
                f"/canvas/nodes/{sensor['id']}/config", json={"key": "interval", "value": value}
            )
            assert response.status_code == 422

    def test_idempotent_deletes(self, client):
        """Test deleting absent nodes and edges succeeds."""
        _, _, _, edge = _create_current_sketch(client)

        assert client.delete(f"/canvas/edges/{edge['id']}").status_code == 200
        assert client.delete(f"/canvas/edges/{edge['id']}").status_code == 200
        assert client.delete("/canvas/nodes/missing").status_code == 200

    def test_clear_canvas(self, client):
        """Test removing everything from the canvas."""
        _create_current_sketch(client)

        client.delete("/canvas")

        canvas = client.get("/canvas").json()
        assert canvas["nodes"] == [] and canvas["edges"] == []


class TestDeviceEndpoints:
    """Test device endpoints."""

    def test_list_devices(self, client):
        """Test the seeded cube."""
        devices = client.get("/devices").json()

        assert len(devices) == 1
        assert devices[0]["id"] == "cube-001"
        assert devices[0]["status"] == "online"
        assert "lastSeen" in devices[0]

    def test_get_unknown_device(self, client):
        """Test fetching a missing device."""
        assert client.get("/devices/cube-999").status_code == 404

    def test_set_status(self, client):
        """Test taking a device offline."""
        response = client.put("/devices/cube-001/status", json={"status": "offline"})
        assert response.json()["status"] == "offline"

        assert client.put("/devices/cube-001/status", json={"status": "asleep"}).status_code == 422


class TestSimulationEndpoints:
    """Test simulation endpoints."""

    def test_initial_state(self, client):
        """Test the baseline state."""
        data = client.get("/simulation").json()

        assert data["isRunning"] is False
        assert data["state"] == "idle"
        assert data["sensorValues"]["moisture"] == 65
        assert data["actuatorStates"]["motor"] == "stopped"
        assert data["logs"] == []

    def test_start_and_stop(self, client):
        """Test transitions and no-op repeats."""
        assert client.post("/simulation/start").json() == {"changed": True, "state": "running"}
        assert client.post("/simulation/start").json() == {"changed": False, "state": "running"}

        time.sleep(0.1)
        assert client.post("/simulation/stop").json() == {"changed": True, "state": "idle"}
        assert client.post("/simulation/stop").json()["changed"] is False

        logs = client.get("/simulation/logs").json()
        assert logs[0]["message"] == "Simulation started"
        assert logs[-1]["message"] == "Simulation stopped"

        count = len(logs)
        time.sleep(0.1)
        assert len(client.get("/simulation/logs").json()) == count

    def test_ticks_mirror_device(self, client):
        """Test device readings follow the running simulation."""
        client.post("/simulation/start")
        time.sleep(0.1)
        client.post("/simulation/stop")

        values = client.get("/simulation").json()["sensorValues"]
        device = client.get("/devices/cube-001").json()
        moisture = next(s for s in device["sensors"] if s["type"] == "moisture")
        assert moisture["value"] == pytest.approx(values["moisture"])
        assert 0 <= values["moisture"] <= 100

    def test_toggle_and_reset(self, client):
        """Test toggling the pump then resetting."""
        response = client.post("/simulation/actuators/pump/toggle")
        assert response.json() == {"name": "pump", "state": "on"}
        client.put("/simulation/sensors/moisture", json={"value": 12})

        data = client.post("/simulation/reset").json()

        assert data["sensorValues"]["moisture"] == 65
        assert data["actuatorStates"]["pump"] == "off"
        assert data["logs"][-1]["message"] == "pump turned on"

    def test_reset_after_running(self, client):
        """Test start, let ticks run with the pump on, then reset."""
        client.post("/simulation/start")
        client.post("/simulation/actuators/pump/toggle")
        time.sleep(0.1)

        data = client.post("/simulation/reset").json()
        client.post("/simulation/stop")

        assert data["isRunning"] is True
        assert data["sensorValues"]["moisture"] == 65
        assert data["actuatorStates"]["pump"] == "off"

    def test_unknown_actuator(self, client):
        """Test toggling an actuator that does not exist."""
        assert client.post("/simulation/actuators/heater/toggle").status_code == 404

    def test_sensor_override_clamped(self, client):
        """Test manual sensor values are clamped."""
        response = client.put("/simulation/sensors/moisture", json={"value": 150})
        assert response.json() == {"name": "moisture", "value": 100}
        assert client.put("/simulation/sensors/pressure", json={"value": 1}).status_code == 404

    def test_log_limit(self, client):
        """Test limiting the log window."""
        for _ in range(3):
            client.post("/simulation/actuators/led/toggle")

        assert len(client.get("/simulation/logs", params={"limit": 2}).json()) == 2
        assert client.get("/simulation/logs", params={"limit": 0}).json() == []
        assert len(client.get("/simulation", params={"logLimit": 1}).json()["logs"]) == 1


class TestDeploymentEndpoints:
    """Test deployment endpoints."""

    def test_deploy_without_sketch(self, client):
        """Test deploying with no sketch open."""
        response = client.post("/deployment")

        assert response.status_code == 409
        assert client.get("/deployment").json() == {"status": "idle", "run": None}
        assert client.get("/deployment/logs").json() == []

    def test_successful_deployment(self, client):
        """Test a deployment runs through every step."""
        sketch_id, *_ = _create_current_sketch(client)

        response = client.post("/deployment")
        assert response.status_code == 202
        assert response.json()["status"] == "deploying"
        assert response.json()["sketchId"] == sketch_id

        data = _wait_for_deployment(client)

        assert data["status"] == "success"
        messages = [entry["message"] for entry in client.get("/deployment/logs").json()]
        assert messages == list(DEPLOYMENT_STEPS)
        assert len(client.get("/deployment/logs", params={"limit": 1}).json()) == 1
        assert len(client.get("/deployment/runs").json()) == 1

    def test_unknown_device(self, client):
        """Test deploying to a device that does not exist."""
        _create_current_sketch(client)
        response = client.post("/deployment", json={"deviceId": "cube-999"})
        assert response.status_code == 404

    def test_offline_device(self, client):
        """Test an offline device fails the deployment."""
        _create_current_sketch(client)
        client.put("/devices/cube-001/status", json={"status": "offline"})

        client.post("/deployment", json={"deviceId": "cube-001"})
        data = _wait_for_deployment(client)

        assert data["status"] == "error"
        assert data["run"]["error"] == "Device RuBEk Cube #001 is offline"

    def test_cancel_when_idle(self, client):
        """Test cancelling with nothing in flight."""
        assert client.post("/deployment/cancel").json() == {"cancelled": False, "status": "idle"}


@pytest.fixture
def slow_deploy_client():
    """Client whose deployment steps are slow enough to cancel mid-run."""
    app = create_app(Settings(DEPLOY_STEP_SECONDS=0.5))
    with TestClient(app) as client:
        yield client


class TestDeploymentCancel:
    """Test cancelling an in-flight deployment."""

    def test_double_deploy_returns_same_run(self, slow_deploy_client):
        """Test deploying twice while in flight starts only one run."""
        _create_current_sketch(slow_deploy_client)

        first = slow_deploy_client.post("/deployment").json()
        second = slow_deploy_client.post("/deployment").json()

        assert first["id"] == second["id"]
        assert len(slow_deploy_client.get("/deployment/runs").json()) == 1
        slow_deploy_client.post("/deployment/cancel")

    def test_cancel(self, slow_deploy_client):
        """Test cancelling ends the run in error with its log kept."""
        _create_current_sketch(slow_deploy_client)
        slow_deploy_client.post("/deployment")

        response = slow_deploy_client.post("/deployment/cancel")

        assert response.json() == {"cancelled": True, "status": "error"}
        logs = slow_deploy_client.get("/deployment/logs").json()
        assert logs[-1]["message"] == "Deployment cancelled"
        assert logs[-1]["level"] == "ERROR"

        time.sleep(0.6)
        assert slow_deploy_client.get("/deployment/logs").json() == logs


class TestShutdown:
    """Test application shutdown with background work in progress."""

    def test_shutdown_stops_simulation_and_cancels_deployment(self):
        """Test leaving the app stops the simulation and fails the in-flight run."""
        app = create_app(Settings(DEPLOY_STEP_SECONDS=0.5, SIMULATION_TICK_SECONDS=0.01))
        with TestClient(app) as client:
            _create_current_sketch(client)
            assert client.post("/simulation/start").json()["state"] == "running"
            assert client.post("/deployment").json()["status"] == "deploying"

        runtime = app.state.runtime
        assert runtime.simulation.state == SimulationState.IDLE
        assert runtime.deployment.status == DeploymentStatus.ERROR
        assert runtime.deployment.logs[-1].message == "Deployment cancelled: service shutting down"
        assert runtime.deployment.current_run.error == "Deployment cancelled: service shutting down"


class TestAssistantEndpoint:
    """Test the assistant endpoint."""

    def test_reply(self, client):
        """Test a keyword reply."""
        response = client.post("/assistant", json={"message": "Please create a sketch"})
        assert response.status_code == 200
        assert response.json()["reply"].startswith("I'll help you create a sketch!")

    def test_empty_message(self, client):
        """Test empty messages are rejected."""
        assert client.post("/assistant", json={"message": ""}).status_code == 422
