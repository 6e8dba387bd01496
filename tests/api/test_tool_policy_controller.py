"""Tests for the tool policy REST endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from controller.tool_policy_controller import router
from service.tool_policy.settings import ToolPolicySettings


def _client(settings: ToolPolicySettings) -> TestClient:
    app = FastAPI()
    app.state.tool_policy_settings = settings
    app.include_router(router)
    return TestClient(app)


@pytest.fixture
def client() -> TestClient:
    """Client with no server-wide defaults."""
    return _client(ToolPolicySettings())


class TestCatalogEndpoints:
    """Groups and profiles."""

    def test_list_groups(self, client: TestClient) -> None:
        response = client.get("/api/tool-policy/groups")

        assert response.status_code == 200
        names = [g["name"] for g in response.json()["groups"]]
        assert names == ["core", "web", "canvas", "soul", "workspace"]

    def test_get_group_by_name_or_key(self, client: TestClient) -> None:
        assert client.get("/api/tool-policy/groups/web").json()["tool_names"] == ["web_search", "web_fetch"]
        assert client.get("/api/tool-policy/groups/group:web").json()["name"] == "web"

    def test_get_unknown_group(self, client: TestClient) -> None:
        assert client.get("/api/tool-policy/groups/nope").status_code == 404

    def test_list_profiles(self, client: TestClient) -> None:
        profiles = client.get("/api/tool-policy/profiles").json()["profiles"]

        assert profiles["full"] == {"tokens": [], "tool_names": [], "unrestricted": True}
        assert "memory_search" in profiles["minimal"]["tool_names"]

    def test_get_profile(self, client: TestClient) -> None:
        body = client.get("/api/tool-policy/profiles/coding").json()
        assert body["tokens"] == ["group:core", "group:web", "group:workspace"]
        assert client.get("/api/tool-policy/profiles/bogus").status_code == 404


class TestEvaluationEndpoints:
    """check / filter."""

    def test_filter(self, client: TestClient) -> None:
        response = client.post("/api/tool-policy/filter", json={
            "policy": {"allow": ["web_*"], "deny": ["web_fetch"]},
            "tool_names": ["web_search", "web_fetch", "memory_search"],
        })

        assert response.status_code == 200
        body = response.json()
        assert body["allowed"] == ["web_search"]
        assert body["removed"] == ["web_fetch", "memory_search"]
        assert body["summary"].startswith("1 tools available:")

    def test_check(self, client: TestClient) -> None:
        response = client.post("/api/tool-policy/check", json={
            "policy": {"profile": "minimal", "alsoAllow": ["web_search"]},
            "tool_names": ["memory_get", "web_search", "canvas_undo"],
        })

        assert response.status_code == 200
        assert response.json() == {
            "decisions": {"memory_get": True, "web_search": True, "canvas_undo": False},
            "unrestricted": False,
        }

    def test_check_without_policy_is_unrestricted(self, client: TestClient) -> None:
        body = client.post("/api/tool-policy/check", json={"tool_names": ["x"]}).json()
        assert body == {"decisions": {"x": True}, "unrestricted": True}

    def test_server_defaults_apply(self) -> None:
        client = _client(ToolPolicySettings(deny=["canvas_*"]))
        body = client.post("/api/tool-policy/filter", json={
            "policy": {"profile": "full"},
            "tool_names": ["canvas_undo", "web_search"],
        }).json()
        assert body["allowed"] == ["web_search"]

    def test_request_overrides_default_deny(self) -> None:
        client = _client(ToolPolicySettings(deny=["canvas_*"]))
        body = client.post("/api/tool-policy/filter", json={
            "policy": {"deny": []},
            "tool_names": ["canvas_undo"],
        }).json()
        assert body["allowed"] == ["canvas_undo"]

    def test_provider_override(self, client: TestClient) -> None:
        payload = {
            "policy": {"profile": "full", "byProvider": {"gemini": {"profile": "minimal"}}},
            "tool_names": ["web_search"],
            "provider": "gemini",
        }
        assert client.post("/api/tool-policy/check", json=payload).json()["decisions"] == {"web_search": False}

    def test_invalid_body(self, client: TestClient) -> None:
        response = client.post("/api/tool-policy/check", json={"tool_names": "web_search"})
        assert response.status_code == 422


class TestGroupRequestEndpoint:
    """Loading groups mid-conversation."""

    def test_request_new_and_loaded_groups(self, client: TestClient) -> None:
        response = client.post("/api/tool-policy/groups/request", json={
            "groups": "web, canvas, bogus, web",
            "loaded_tools": ["memory_search", "web_search"],
            "policy": {"deny": ["canvas_undo"]},
        })

        assert response.status_code == 200
        body = response.json()
        assert body["loaded"] == ["canvas"]
        assert body["already_loaded"] == ["web"]
        assert body["invalid_groups"] == ["bogus"]
        assert "canvas_get_state" in body["tool_names"]
        assert "canvas_undo" not in body["tool_names"]
        assert body["hint"].startswith("Groups loaded: canvas.")
        assert body["hint"].endswith("Ignored invalid groups: bogus.")

    def test_request_only_loaded_groups(self, client: TestClient) -> None:
        body = client.post("/api/tool-policy/groups/request", json={
            "groups": "core",
            "loaded_tools": ["memory_get"],
        }).json()

        assert body["loaded"] == []
        assert body["tool_names"] == []
        assert body["hint"] == "All requested groups were already loaded."

    def test_request_requires_groups(self, client: TestClient) -> None:
        response = client.post("/api/tool-policy/groups/request", json={"loaded_tools": []})
        assert response.status_code == 422


class TestMetricsEndpoints:
    """metrics / metrics/record."""

    def test_empty_metrics(self, client: TestClient) -> None:
        assert client.get("/api/tool-policy/metrics").json() == {"tools": {}, "summary": ""}

    def test_record_and_read(self, client: TestClient) -> None:
        client.post("/api/tool-policy/metrics/record", json={"tool_name": "web_search", "duration_ms": 150})
        client.post("/api/tool-policy/metrics/record", json={"tool_name": "web_search", "duration_ms": 200})
        client.post("/api/tool-policy/metrics/record",
                    json={"tool_name": "web_fetch", "duration_ms": 500, "is_error": True})

        body = client.get("/api/tool-policy/metrics").json()
        assert body["tools"]["web_search"]["count"] == 2
        assert body["tools"]["web_fetch"]["errors"] == 1
        assert "web_search: 2 calls" in body["summary"]

    def test_record_rejects_negative_duration(self, client: TestClient) -> None:
        response = client.post("/api/tool-policy/metrics/record", json={"tool_name": "x", "duration_ms": -1})
        assert response.status_code == 422
