from datetime import timedelta

from scheduling.dates import today_in


def _create(client, **fields):
    r = client.post("/tasks", json=fields)
    assert r.status_code == 201
    return r.json()


def test_create_get_patch_delete(client):
    task = _create(client, title="Write release notes", estimated_minutes=45, start_time="9:00")
    assert task["priority"] == "medium"
    assert task["start_time"] == "09:00"

    assert client.get(f"/tasks/{task['id']}").json()["title"] == "Write release notes"

    patched = client.patch(f"/tasks/{task['id']}", json={"priority": "high", "due_date": "2024-05-15"})
    assert patched.status_code == 200
    assert patched.json()["priority"] == "high"
    assert patched.json()["estimated_minutes"] == 45

    deleted = client.delete(f"/tasks/{task['id']}")
    assert deleted.json() == {"status": "deleted", "task_id": task["id"]}
    assert client.get(f"/tasks/{task['id']}").status_code == 404


def test_create_validates_payload(client):
    assert client.post("/tasks", json={"title": ""}).status_code == 422
    assert client.post("/tasks", json={"title": "X", "estimated_minutes": 0}).status_code == 422
    assert client.post("/tasks", json={"title": "X", "end_time": "24:30"}).status_code == 422


def test_unknown_task_returns_404(client):
    assert client.get("/tasks/ghost").status_code == 404
    assert client.patch("/tasks/ghost", json={"priority": "low"}).status_code == 404
    assert client.post("/tasks/ghost/complete").status_code == 404
    assert client.delete("/tasks/ghost").status_code == 404


def test_complete_moves_task_out_of_inbox(client):
    task = _create(client, title="Call the bank")
    assert [t["id"] for t in client.get("/tasks/inbox").json()["tasks"]] == [task["id"]]

    done = client.post(f"/tasks/{task['id']}/complete").json()

    assert done["completed"] is True
    assert done["completed_at"] is not None
    assert client.get("/tasks/inbox").json()["count"] == 0


def test_list_filters(client):
    _create(client, title="A", due_date="2024-05-15", priority="high")
    _create(client, title="B", due_date="2024-05-20")
    _create(client, title="C")

    day = client.get("/tasks", params={"date": "2024-05-15"}).json()
    assert [t["title"] for t in day["tasks"]] == ["A"]

    span = client.get("/tasks", params={"start_date": "2024-05-14", "end_date": "2024-05-31"}).json()
    assert span["count"] == 2

    high = client.get("/tasks", params={"priority": "high"}).json()
    assert [t["title"] for t in high["tasks"]] == ["A"]

    assert client.get("/tasks", params={"limit": 1}).json()["count"] == 1
    assert client.get("/tasks").json()["tasks"][-1]["title"] == "C"


def test_list_with_date_shortcut(client):
    today = today_in("America/Sao_Paulo")
    _create(client, title="Today", due_date=today.isoformat())
    _create(client, title="Tomorrow", due_date=(today + timedelta(days=1)).isoformat())

    r = client.get("/tasks", params={"date": "tomorrow"})
    assert [t["title"] for t in r.json()["tasks"]] == ["Tomorrow"]

    week = client.get("/tasks", params={"date": "next_7_days"}).json()
    assert week["count"] == 2


def test_list_rejects_bad_date(client):
    assert client.get("/tasks", params={"date": "someday"}).status_code == 400


def test_patch_rejects_null_required_fields(client):
    task = _create(client, title="Keep me", priority="high")

    for field in ("title", "priority", "completed"):
        r = client.patch(f"/tasks/{task['id']}", json={field: None})
        assert r.status_code == 422

    stored = client.get(f"/tasks/{task['id']}").json()
    assert (stored["title"], stored["priority"], stored["completed"]) == ("Keep me", "high", False)


def test_patch_can_clear_the_slot(client):
    task = _create(client, title="Unschedule me", due_date="2024-05-15", start_time="10:00")

    r = client.patch(f"/tasks/{task['id']}", json={"due_date": None, "start_time": None})

    assert r.status_code == 200
    assert (r.json()["due_date"], r.json()["start_time"]) == (None, None)
