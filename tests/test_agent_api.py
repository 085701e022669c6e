from datetime import datetime, timedelta, timezone
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from conftest import AUTH_HEADERS, TEST_USER
from shared.auth import get_auth
from shared.database import get_store
from shared.errors import NotFoundError
from functions.agent_deployment.routes.api import AgentAction, dispatcher, router
from functions.agent_deployment.services.lifecycle import AgentLifecycle

URL = "/functions/v1/agent-deployment"
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def client(store, auth):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_auth] = lambda: auth
    return TestClient(app)


def agent(agent_id, user_id="user-1", status="stopped", **extra):
    return {"id": agent_id, "user_id": user_id, "name": f"agent {agent_id}", "status": status, **extra}


def test_every_action_has_a_handler():
    dispatcher.ensure_exhaustive()
    assert {a.value for a in AgentAction} == {"deploy", "stop", "delete", "status"}


def test_preflight(client):
    resp = client.options(URL)
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-methods"] == "POST, GET, OPTIONS, PUT, DELETE, PATCH"


def test_bad_token(client):
    resp = client.post(URL, json={"action": "status", "agentId": "a1"}, headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.json()["error"] == {"code": "AGENT_DEPLOYMENT_ERROR", "message": "Invalid token"}


def test_unknown_action(client):
    resp = client.post(URL, json={"action": "restart"}, headers=AUTH_HEADERS)
    assert resp.status_code == 500
    assert resp.json()["error"]["message"] == "Unknown action: restart"


def test_deploy_new_agent(client, store):
    resp = client.post(URL, headers=AUTH_HEADERS, json={
        "action": "deploy",
        "agentData": {"name": "Whale Hunter", "description": "tracks ETH whales"},
    })
    assert resp.status_code == 200
    [created] = resp.json()["data"]
    assert created["user_id"] == TEST_USER["id"]
    assert created["type"] == "whale_tracker"
    assert created["status"] == "running"
    assert created["configuration"] == {}
    assert created["deployment_info"]["region"] == "us-east-1"
    assert len(created["deployment_info"]["instance_id"]) == 36
    assert created["metrics"] == {"transactions_scanned": 0, "alerts_generated": 0, "uptime_seconds": 0}


def test_deploy_new_agent_requires_name(client, store):
    resp = client.post(URL, headers=AUTH_HEADERS, json={"action": "deploy", "agentData": {"type": "x"}})
    assert resp.status_code == 500
    assert store.tables["agents"] == []


def test_deploy_without_id_or_data(client):
    resp = client.post(URL, headers=AUTH_HEADERS, json={"action": "deploy"})
    assert resp.status_code == 500
    assert "agentData" in resp.json()["error"]["message"]


def test_store_failures_on_create_include_detail(client, store):
    store.failing.add("agents")
    created = client.post(URL, headers=AUTH_HEADERS, json={"action": "deploy", "agentData": {"name": "W"}})
    assert created.json()["error"]["message"] == "Failed to create agent: boom"
    stopped = client.post(URL, headers=AUTH_HEADERS, json={"action": "stop", "agentId": "a1"})
    assert stopped.json()["error"]["message"] == "Failed to stop agent"


def test_redeploy_existing_agent(client, store):
    store.tables["agents"] = [agent("a1"), agent("a2", user_id="someone-else")]
    data = client.post(URL, headers=AUTH_HEADERS, json={"action": "deploy", "agentId": "a1"}).json()["data"]
    assert [a["id"] for a in data] == ["a1"]
    assert data[0]["status"] == "running"
    assert "updated_at" in data[0]
    assert store.tables["agents"][1]["status"] == "stopped"


def test_cannot_touch_another_users_agent(client, store):
    store.tables["agents"] = [agent("a2", user_id="someone-else", status="running")]
    data = client.post(URL, headers=AUTH_HEADERS, json={"action": "stop", "agentId": "a2"}).json()["data"]
    assert data == []
    assert store.tables["agents"][0]["status"] == "running"


def test_stop(client, store):
    store.tables["agents"] = [agent("a1", status="running")]
    data = client.post(URL, headers=AUTH_HEADERS, json={"action": "stop", "agentId": "a1"}).json()["data"]
    assert data[0]["status"] == "stopped"


def test_delete(client, store):
    store.tables["agents"] = [agent("a1")]
    resp = client.post(URL, headers=AUTH_HEADERS, json={"action": "delete", "agentId": "a1"})
    assert resp.json()["data"] == {"success": True, "message": "Agent deleted"}
    assert store.tables["agents"] == []


def test_status_not_found(client):
    resp = client.post(URL, headers=AUTH_HEADERS, json={"action": "status", "agentId": "missing"})
    assert resp.status_code == 500
    assert resp.json()["error"] == {"code": "AGENT_DEPLOYMENT_ERROR", "message": "Agent not found"}


def test_status_requires_agent_id(client):
    resp = client.post(URL, headers=AUTH_HEADERS, json={"action": "status"})
    assert resp.status_code == 500
    assert "agentId" in resp.json()["error"]["message"]


async def test_status_reports_uptime_for_running_agents(store):
    deployed = (NOW - timedelta(minutes=5)).isoformat().replace("+00:00", "Z")
    store.tables["agents"] = [agent(
        "a1", status="running",
        deployment_info={"deployed_at": deployed},
        metrics={"transactions_scanned": 7, "alerts_generated": 2, "uptime_seconds": 0},
    )]
    result = await AgentLifecycle(store, "user-1", clock=lambda: NOW).status("a1")
    assert result["metrics"] == {"transactions_scanned": 7, "alerts_generated": 2, "uptime_seconds": 300}


async def test_status_uptime_falls_back_to_created_at(store):
    store.tables["agents"] = [agent("a1", status="running", created_at=(NOW - timedelta(hours=1)).isoformat())]
    result = await AgentLifecycle(store, "user-1", clock=lambda: NOW).status("a1")
    assert result["metrics"]["uptime_seconds"] == 3600


async def test_status_leaves_stopped_agents_alone(store):
    store.tables["agents"] = [agent("a1", metrics={"uptime_seconds": 12})]
    result = await AgentLifecycle(store, "user-1", clock=lambda: NOW).status("a1")
    assert result["metrics"] == {"uptime_seconds": 12}


async def test_status_raises_not_found(store):
    with pytest.raises(NotFoundError):
        await AgentLifecycle(store, "user-1").status("nope")
