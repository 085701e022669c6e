import random
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from conftest import AUTH_HEADERS
from shared.auth import get_auth
from shared.database import get_store
from functions.alert_processor.config import TEST_ALERT_TYPES, TEST_BLOCKCHAINS, TEST_SEVERITIES
from functions.alert_processor.routes.api import AlertAction, dispatcher, router
from functions.alert_processor.services.alerts import AlertInbox

URL = "/functions/v1/alert-processor"


@pytest.fixture
def client(store, auth):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_auth] = lambda: auth
    return TestClient(app)


def alert(alert_id, user_id="user-1", is_read=False, severity="info", type="whale_transaction", created_at="2025-01-01"):
    return {
        "id": alert_id, "user_id": user_id, "title": f"alert {alert_id}", "message": "m",
        "type": type, "severity": severity, "is_read": is_read, "created_at": created_at,
    }


def post(client, **body):
    return client.post(URL, headers=AUTH_HEADERS, json=body)


def test_every_action_has_a_handler():
    dispatcher.ensure_exhaustive()
    assert len(AlertAction) == 7


def test_preflight(client):
    assert client.options(URL).status_code == 200


def test_missing_token(client):
    resp = client.post(URL, json={"action": "get_alerts"})
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "ALERT_PROCESSOR_ERROR"


def test_unknown_action(client):
    resp = post(client, action="snooze")
    assert resp.status_code == 500
    assert resp.json()["error"]["message"] == "Unknown action: snooze"


def test_get_alerts_is_user_scoped_and_newest_first(client, store):
    store.tables["alerts"] = [
        alert("a1", created_at="2025-01-01"),
        alert("a2", created_at="2025-01-03"),
        alert("x1", user_id="other", created_at="2025-01-05"),
    ]
    data = post(client, action="get_alerts").json()["data"]
    assert [a["id"] for a in data] == ["a2", "a1"]
    _, _, filters, order, limit, _ = store.calls[-1]
    assert order == "created_at.desc"
    assert limit == 50


def test_get_alerts_filters(client, store):
    store.tables["alerts"] = [
        alert("a1", is_read=True, severity="critical"),
        alert("a2", severity="critical"),
        alert("a3", severity="info"),
    ]
    data = post(client, action="get_alerts", filters={"is_read": False, "severity": "critical", "limit": 5}).json()["data"]
    assert [a["id"] for a in data] == ["a2"]
    _, _, filters, _, limit, _ = store.calls[-1]
    assert ("is_read", "eq.false") in filters
    assert limit == 5


def test_mark_read(client, store):
    store.tables["alerts"] = [alert("a1")]
    data = post(client, action="mark_read", alertId="a1").json()["data"]
    assert data[0]["is_read"] is True


def test_mark_all_read_only_touches_own_alerts(client, store):
    store.tables["alerts"] = [alert("a1"), alert("a2"), alert("x1", user_id="other")]
    resp = post(client, action="mark_all_read")
    assert resp.json()["data"] == {"success": True, "message": "All alerts marked as read"}
    assert [a["is_read"] for a in store.tables["alerts"]] == [True, True, False]


def test_create_alert_defaults(client, store):
    data = post(client, action="create_alert", alertData={"title": "Big move", "message": "1000 ETH"}).json()["data"]
    assert data[0]["type"] == "whale_transaction"
    assert data[0]["severity"] == "info"
    assert data[0]["metadata"] == {}
    assert data[0]["user_id"] == "user-1"


def test_create_alert_keeps_caller_severity(client, store):
    data = post(client, action="create_alert", alertData={"title": "t", "message": "m", "severity": "high"}).json()["data"]
    assert data[0]["severity"] == "high"
    assert store.tables["alerts"][0]["severity"] == "high"


def test_create_alert_without_message(client, store):
    resp = post(client, action="create_alert", alertData={"title": "Only a title"})
    assert resp.status_code == 200
    assert resp.json()["data"][0]["message"] is None


def test_create_alert_requires_title(client):
    resp = post(client, action="create_alert", alertData={"message": "m"})
    assert resp.status_code == 500
    assert resp.json()["error"]["message"].startswith("Invalid payload for create_alert")


def test_get_alerts_filters_by_any_severity(client, store):
    store.tables["alerts"] = [alert("a1", severity="medium"), alert("a2", severity="high")]
    data = post(client, action="get_alerts", filters={"severity": "medium"}).json()["data"]
    assert [a["id"] for a in data] == ["a1"]
    _, _, filters, _, _, _ = store.calls[-1]
    assert ("severity", "eq.medium") in filters


def test_delete_alert(client, store):
    store.tables["alerts"] = [alert("a1"), alert("a2")]
    resp = post(client, action="delete_alert", alertId="a1")
    assert resp.json()["data"] == {"success": True, "message": "Alert deleted"}
    assert [a["id"] for a in store.tables["alerts"]] == ["a2"]


def test_unread_count(client, store):
    store.tables["alerts"] = [alert("a1"), alert("a2", is_read=True), alert("a3"), alert("x", user_id="other")]
    assert post(client, action="get_unread_count").json()["data"] == {"unread_count": 2}


def test_generate_test_alerts(client, store):
    data = post(client, action="generate_test_alerts").json()["data"]
    assert len(data) == 5
    for i, row in enumerate(data, start=1):
        assert row["type"] in TEST_ALERT_TYPES
        assert row["severity"] in TEST_SEVERITIES
        assert row["metadata"]["source"] == "test_generator"
        assert row["metadata"]["blockchain"] in TEST_BLOCKCHAINS
        assert row["title"] == f"[{row['type'].upper()}] Alert {i}"


async def test_generated_alerts_are_reproducible_with_a_seed(store):
    a = await AlertInbox(store, "user-1", rng=random.Random(7)).generate_test_alerts()
    b = await AlertInbox(store, "user-1", rng=random.Random(7)).generate_test_alerts()
    assert [(r["type"], r["severity"]) for r in a] == [(r["type"], r["severity"]) for r in b]


def test_store_error_is_enveloped(client, store):
    store.failing.add("alerts")
    resp = post(client, action="mark_read", alertId="a1")
    assert resp.status_code == 500
    assert resp.json()["error"]["message"].startswith("Failed to mark alert as read")


def test_large_limit_is_passed_through(client, store):
    resp = post(client, action="get_alerts", filters={"limit": 5000})
    assert resp.status_code == 200
    _, _, _, _, limit, _ = store.calls[-1]
    assert limit == 5000
