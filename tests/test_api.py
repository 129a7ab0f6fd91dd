"""
HTTP tests for the FastAPI app (TestClient, in-memory backend).
"""
import pytest

ADMIN = {"X-User-Id": "admin-1"}
ALICE = {"X-User-Id": "alice"}


@pytest.fixture
def stocked(client, alice, fill_pools):
    fill_pools(100, 50)
    return client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"


def test_readiness(client):
    response = client.get("/health/ready")
    assert response.status_code == 200
    assert response.json()["backend"] == "memory"


def test_ingest_and_pool_status(client):
    response = client.post("/pools/data1/lines", json={"text": "a\n\n b \n"}, headers=ADMIN)
    assert response.status_code == 200
    assert response.json() == {"pool": "data1", "added": 2, "length": 2}

    response = client.get("/pools", params={"fresh": True})
    assert response.json()["data1"] == 2
    assert response.json()["data2"] == 0


def test_unknown_pool(client):
    response = client.post("/pools/data9/lines", json={"text": "a"}, headers=ADMIN)
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_request"


def test_allocate(stocked):
    response = stocked.post(
        "/allocations",
        json={"count1": 2, "count2": 1, "inserts": [{"position": 1, "text": "hello"}]},
        headers=ALICE,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["text"] == "hello\na1\na2\nb1"
    assert (body["count1_drawn"], body["count2_drawn"], body["inserted"], body["total"]) == (2, 1, 1, 4)
    assert body["log_id"].startswith("meq-")

    activity = stocked.get("/activity").json()
    assert activity["count"] == 1
    assert activity["entries"][0]["user_id"] == "alice"
    assert activity["entries"][0]["total_generated"] == 4


def test_allocate_with_presets(stocked):
    response = stocked.post(
        "/allocations",
        json={
            "count1": 1,
            "presets": {"Personal Text Mail": "hi"},
            "preset_positions": {"Personal Text Mail": 2},
        },
        headers=ALICE,
    )
    assert response.json()["text"] == "a1\nhi"


def test_list_presets(client):
    presets = client.get("/allocations/presets").json()
    assert len(presets) == 8
    assert {"label": "Mother Text mail", "position": 350, "fixed": True} in presets


def test_missing_user_header(stocked):
    response = stocked.post("/allocations", json={"count1": 1})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_request"


def test_unknown_user(stocked):
    response = stocked.post("/allocations", json={"count1": 1}, headers={"X-User-Id": "ghost"})
    assert response.status_code == 404
    assert response.json()["error"] == "user_not_found"


def test_nothing_requested(stocked):
    response = stocked.post("/allocations", json={"count1": 0, "count2": 0}, headers=ALICE)
    assert response.status_code == 400


def test_quota_exceeded(stocked):
    stocked.put("/quota/alice", json={"daily_limit": 20, "max_per_request": 15}, headers=ADMIN)
    assert stocked.post("/allocations", json={"count1": 10, "count2": 5}, headers=ALICE).status_code == 200

    response = stocked.post("/allocations", json={"count1": 10}, headers=ALICE)
    assert response.status_code == 429
    assert response.json()["error"] == "quota_exceeded"
    assert "5 more lines" in response.json()["message"]


def test_request_too_large(stocked):
    stocked.put("/quota/alice", json={"daily_limit": 100, "max_per_request": 5}, headers=ADMIN)
    response = stocked.post("/allocations", json={"count1": 6}, headers=ALICE)
    assert response.status_code == 413
    assert response.json()["error"] == "request_too_large"


def test_inventory_changed(stocked):
    response = stocked.post("/allocations", json={"count1": 5, "count2": 60}, headers=ALICE)
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "inventory_changed"
    assert body["available"] == {"data1": 100, "data2": 50}
    assert stocked.get("/pools", params={"fresh": True}).json()["data1"] == 100


def test_system_lock(stocked):
    response = stocked.put("/settings/lock", json={"enabled": True}, headers=ADMIN)
    assert response.json()["locked"] is True

    response = stocked.post("/allocations", json={"count1": 1}, headers=ALICE)
    assert response.status_code == 423
    assert response.json()["error"] == "system_locked"

    assert stocked.post("/allocations", json={"count1": 1}, headers=ADMIN).status_code == 200


def test_lock_requires_admin(stocked):
    response = stocked.put("/settings/lock", json={"enabled": True}, headers=ALICE)
    assert response.status_code == 403
    assert response.json()["error"] == "permission_denied"
    assert stocked.get("/settings").json()["locked"] is False


def test_contribution_switch(stocked):
    response = stocked.post("/pools/data2/lines", json={"text": "mine"}, headers=ALICE)
    assert response.status_code == 403

    stocked.put("/settings/contribution", json={"enabled": True}, headers=ADMIN)
    response = stocked.post("/pools/data2/lines", json={"text": "mine"}, headers=ALICE)
    assert response.status_code == 200
    assert response.json()["length"] == 51


def test_clear_pool_admin_only(stocked):
    assert stocked.delete("/pools/data1", headers=ALICE).status_code == 403

    response = stocked.delete("/pools/data1", headers=ADMIN)
    assert response.json() == {"pool": "data1", "removed": 100}


def test_quota_views(stocked, bob):
    response = stocked.get("/quota/alice", headers=ALICE)
    assert response.status_code == 200
    assert response.json()["remaining"] == 100
    assert response.json()["percent_used"] == 0.0

    assert stocked.get("/quota/bob", headers=ALICE).status_code == 403
    assert stocked.get("/quota/bob", headers=ADMIN).status_code == 200


def test_quota_reset(stocked):
    stocked.post("/allocations", json={"count1": 3}, headers=ALICE)
    response = stocked.post("/quota/alice/reset", headers=ADMIN)
    assert response.status_code == 200
    assert response.json()["used"] == 0


def test_invalid_quota_limits(stocked):
    response = stocked.put("/quota/alice", json={"daily_limit": -5, "max_per_request": 1}, headers=ADMIN)
    assert response.status_code == 400


def test_user_lifecycle(client):
    response = client.post(
        "/users", json={"name": "Carol", "user_id": "carol", "email": "carol@example.com"}, headers=ADMIN
    )
    assert response.status_code == 201
    assert response.json()["quota"]["daily_limit"] == 100
    assert response.json()["role"] == "user"

    ids = [u["id"] for u in client.get("/users", headers=ADMIN).json()]
    assert ids == ["admin-1", "carol"]

    response = client.put("/users/carol/status", json={"status": "suspended"}, headers=ADMIN)
    assert response.json()["status"] == "suspended"

    client.post("/pools/data1/lines", json={"text": "x"}, headers=ADMIN)
    response = client.post("/allocations", json={"count1": 1}, headers={"X-User-Id": "carol"})
    assert response.status_code == 403
    assert response.json()["error"] == "account_inactive"

    assert client.delete("/users/carol", headers=ADMIN).status_code == 204
    assert client.get("/users/carol", headers=ADMIN).status_code == 404


def test_user_routes_require_admin(client, alice):
    assert client.get("/users", headers=ALICE).status_code == 403
    assert client.post("/users", json={"name": "Eve"}, headers=ALICE).status_code == 403
    assert client.get("/users/alice", headers=ALICE).status_code == 200
    assert client.get("/users/admin-1", headers=ALICE).status_code == 403
