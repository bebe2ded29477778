"""
HTTP adapter tests via FastAPI TestClient.
"""

import uuid
from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from commandhub.api.main import create_app
from commandhub.application.bootstrap import create_runtime
from commandhub.config import Settings
from commandhub.domain.command import CommandCategory, CommandHandler, ParameterSchema
from commandhub.infrastructure.persistence import InMemoryPersistence

USER = {"X-User-Id": "u-1", "X-User-Email": "user@example.com"}


def _create_widget(params, ctx):
    return {"name": params["name"], "created_by": ctx.user.id}


def _explode(params, ctx):
    raise RuntimeError("widget factory on fire")


PROVIDERS = {
    CommandCategory.project: [
        CommandHandler(
            name="create_widget",
            description="Create a widget",
            execute=_create_widget,
            parameters=[ParameterSchema(name="name", type="string", required=True)],
        ),
        CommandHandler(name="explode", description="Always fails", execute=_explode),
    ]
}


def _settings(**permissions):
    data = {"database": {"backend": "memory"}, "orchestrator": {"event_log": ["memory"]}}
    if permissions:
        data["permissions"] = permissions
    return Settings.from_dict(data)


@pytest.fixture
def runtime():
    rt = create_runtime(_settings(), providers=PROVIDERS)
    yield rt
    rt.close()


@pytest.fixture
def client(runtime):
    return TestClient(create_app(runtime))


def _post(client, body, headers=USER, path="/api/commands"):
    return client.post(path, json=body, headers=headers)


class TestExecuteEndpoint:
    def test_success(self, client):
        resp = _post(client, {"action": "create_widget", "parameters": {"name": "Chair"}, "metadata": {"requestId": "abc-123"}})
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["name"] == "Chair"
        assert body["data"]["created_by"] == "u-1"
        assert body["metadata"]["requestId"] == "abc-123"
        assert body["metadata"]["executionTime"] >= 0

    def test_validation_failure_is_400(self, client):
        resp = _post(client, {"action": "create_widget", "parameters": {}})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]["code"] == "VALIDATION_FAILED"
        assert "Missing required parameter: name" in body["error"]["details"]["errors"]

    def test_unknown_command_is_404(self, client):
        resp = _post(client, {"action": "ghost", "parameters": {}})
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "COMMAND_NOT_FOUND"

    def test_handler_failure_is_500(self, client):
        resp = _post(client, {"action": "explode", "parameters": {}})
        assert resp.status_code == 500
        body = resp.json()
        assert body["error"]["code"] == "EXECUTION_FAILED"
        assert body["error"]["message"] == "widget factory on fire"
        assert "details" not in body["error"]

    def test_missing_identity_is_401(self, client):
        resp = _post(client, {"action": "create_widget", "parameters": {"name": "Chair"}}, headers={})
        assert resp.status_code == 401
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"
        assert body["metadata"]["requestId"] == "unknown"

    def test_invalid_json_is_400(self, client):
        resp = client.post(
            "/api/commands",
            content=b"{not json",
            headers={**USER, "Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]["code"] == "INVALID_COMMAND"
        assert body["error"]["message"] == "Invalid JSON in request body"

    def test_malformed_command_is_400(self, client):
        resp = _post(client, {"parameters": {}, "metadata": {"requestId": "bad-1"}})
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"]["code"] == "INVALID_COMMAND"
        assert body["error"]["message"] == "Command must have a valid action field"
        assert body["metadata"]["requestId"] == "bad-1"

    def test_missing_parameters_object_is_400(self, client):
        resp = _post(client, {"action": "create_widget"})
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Command must have a parameters object"

    def test_permission_denied_is_401(self):
        rt = create_runtime(_settings(policy="role", role_grants={"user": ["tasks:read"]}), providers=PROVIDERS)
        client = TestClient(create_app(rt))
        resp = _post(client, {"action": "set_command_enabled", "parameters": {"name": "ping", "enabled": False}})
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Insufficient permissions to execute this command"

    def test_admin_header_role_bypasses_policy(self):
        rt = create_runtime(_settings(policy="role"), providers=PROVIDERS)
        client = TestClient(create_app(rt))
        headers = {**USER, "X-User-Role": "admin"}
        resp = _post(client, {"action": "set_command_enabled", "parameters": {"name": "explode", "enabled": False}}, headers)
        assert resp.status_code == 200
        assert "explode" not in rt.registry.get_enabled()

    def test_non_json_native_data_is_encoded(self):
        stamp = CommandHandler(
            name="stamp",
            description="Return rich types",
            execute=lambda params, ctx: {
                "at": datetime(2026, 1, 1, 12, 30),
                "price": Decimal("2.5"),
                "ref": uuid.UUID(int=1),
            },
        )
        rt = create_runtime(_settings(), providers={CommandCategory.workflow: [stamp]})
        client = TestClient(create_app(rt))

        resp = _post(client, {"action": "stamp", "parameters": {}})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        data = resp.json()["data"]
        assert data["at"] == "2026-01-01T12:30:00"
        assert data["price"] == 2.5
        assert data["ref"] == str(uuid.UUID(int=1))

        resp = _post(client, {"commands": [{"action": "stamp", "parameters": {}}]}, path="/api/commands/parallel")
        assert resp.status_code == 200
        assert resp.json()["results"][0]["data"]["at"] == "2026-01-01T12:30:00"


class TestBatchEndpoints:
    def test_sequence_short_circuits(self, client):
        resp = _post(
            client,
            {
                "commands": [
                    {"action": "create_widget", "parameters": {"name": "A"}},
                    {"action": "explode", "parameters": {}},
                    {"action": "create_widget", "parameters": {"name": "C"}},
                ]
            },
            path="/api/commands/sequence",
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is False
        assert body["total"] == 3
        assert body["completed"] == 2
        assert [r["success"] for r in body["results"]] == [True, False]

    def test_parallel_keeps_order(self, client):
        resp = _post(
            client,
            {
                "commands": [
                    {"action": "create_widget", "parameters": {"name": "A"}},
                    {"action": "ping", "parameters": {}},
                ]
            },
            path="/api/commands/parallel",
        )
        body = resp.json()
        assert body["success"] is True
        assert body["results"][0]["data"]["name"] == "A"
        assert body["results"][1]["data"]["pong"] is True

    def test_batch_requires_commands_array(self, client):
        resp = _post(client, {"commands": "nope"}, path="/api/commands/parallel")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_COMMAND"

    def test_batch_reports_malformed_item(self, client):
        resp = _post(client, {"commands": [{"action": "ping", "parameters": {}}, {"action": "ping"}]}, path="/api/commands/sequence")
        assert resp.status_code == 400
        assert resp.json()["error"]["message"].startswith("commands[1]:")

    def test_batch_requires_identity(self, client):
        resp = _post(client, {"commands": []}, headers={}, path="/api/commands/sequence")
        assert resp.status_code == 401


class TestIntrospection:
    def test_available_commands(self, client):
        resp = client.get("/api/commands", headers=USER)
        assert resp.status_code == 200
        body = resp.json()
        assert "create_widget" in body["commands"]
        assert body["total"] == len(body["commands"])

    def test_available_commands_requires_identity(self, client):
        assert client.get("/api/commands").status_code == 401

    def test_documentation(self, client):
        body = client.get("/api/commands/documentation").json()
        assert body["documentation"]["create_widget"]["parameters"][0]["name"] == "name"
        assert body["categories"]["project"] == 2
        assert body["categories"]["system"] == 6
        assert body["total"] == 8

    def test_health_ok(self, client):
        resp = client.get("/api/commands/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_health_degraded_is_still_200(self, runtime, client):
        runtime.persistence.report_error = "slow replica"
        resp = client.get("/api/commands/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "degraded"

    def test_health_unhealthy_is_503(self):
        persistence = InMemoryPersistence()
        persistence.raise_error = ConnectionError("db unreachable")
        rt = create_runtime(_settings(), providers=PROVIDERS, persistence=persistence)
        client = TestClient(create_app(rt))

        resp = client.get("/api/commands/health")
        assert resp.status_code == 503
        assert resp.json()["status"] == "unhealthy"

    def test_liveness_and_service_info(self, client):
        assert client.get("/health").json()["status"] == "healthy"
        info = client.get("/").json()
        assert info["endpoints"]["execute"] == "POST /api/commands"


def test_app_builds_runtime_on_startup(monkeypatch, tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text("database:\n  backend: memory\norchestrator:\n  event_log: [memory]\n", encoding="utf-8")
    monkeypatch.setenv("COMMANDHUB_CONFIG", str(cfg))

    app = create_app()
    with TestClient(app) as client:
        resp = client.post("/api/commands", json={"action": "ping", "parameters": {}}, headers=USER)
        assert resp.status_code == 200
        assert app.state.runtime is not None
    assert app.state.runtime is None
