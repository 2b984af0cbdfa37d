from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def _attempt(**overrides):
    body = {
        "quiz_id": "quiz-1",
        "total": 3,
        "correct": 2,
        "duration_ms": 61000,
        "items": [
            {"index": 0, "question_id": "a", "answer": 0, "correct": True},
            {"index": 1, "question_id": "b", "answer": 2, "correct": True},
            {"index": 2, "question_id": "c", "answer": None, "correct": False},
        ],
    }
    body.update(overrides)
    return body


def test_get_attempt_roundtrip():
    # create one
    r = client.post("/attempts", json=_attempt())
    assert r.status_code == 201
    attempt_id = r.json().get("id")
    assert isinstance(attempt_id, int)

    # read it back
    r2 = client.get(f"/attempts/{attempt_id}")
    assert r2.status_code == 200
    body = r2.json()
    assert body["id"] == attempt_id
    assert body["total"] == 3
    assert body["score_pct"] == 67
    assert body["duration_ms"] == 61000
    assert "created_at" in body


def test_attempt_correct_cannot_exceed_total():
    r = client.post("/attempts", json=_attempt(correct=4))
    assert r.status_code == 422


def test_get_attempt_404():
    assert client.get("/attempts/999999").status_code == 404


def test_recent_list_requires_client_key():
    client.post("/attempts", json=_attempt())
    assert client.get("/attempts/recent-list").status_code == 401

    r = client.get("/attempts/recent-list", headers={"x-api-key": "client-key"})
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True and body["count"] >= 1
    assert "items" not in body["items"][0]
