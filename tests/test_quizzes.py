import pytest
from fastapi.testclient import TestClient

from main import app

client = TestClient(app)

ADMIN = {"x-admin-token": "secret"}


def _quiz_body(**overrides):
    body = {
        "title": "Kinematics drill",
        "subject": "physics",
        "difficulty": "beginner",
        "is_published": True,
        "questions": [
            {
                "kind": "static",
                "prompt": "Unit of force?",
                "options": ["Joule", "Newton", "Watt", "Pascal"],
                "correct_answer": "2",
            },
            {
                "kind": "dynamic",
                "generator": "projectile-motion",
                "generator_params": {"velocity_min": 12, "angle_max": None},
            },
        ],
    }
    body.update(overrides)
    return body


def test_create_requires_admin_token():
    r = client.post("/quizzes", json=_quiz_body())
    assert r.status_code == 401


def test_create_and_fetch_quiz():
    r = client.post("/quizzes", json=_quiz_body(), headers=ADMIN)
    assert r.status_code == 201
    body = r.json()
    quiz_id = body["id"]
    dynamic = body["questions"][1]
    assert isinstance(dynamic["seed"], int)

    r2 = client.get(f"/quizzes/{quiz_id}")
    assert r2.status_code == 200
    assert r2.json()["questions"][1]["seed"] == dynamic["seed"]


def test_render_is_stable_for_stored_quiz():
    quiz_id = client.post("/quizzes", json=_quiz_body(), headers=ADMIN).json()["id"]
    first = client.get(f"/quizzes/{quiz_id}/render").json()
    second = client.get(f"/quizzes/{quiz_id}/render").json()
    assert first == second

    static, dynamic = first["questions"]
    assert static["correct_option"] == 2 and static["correct_answer"] == "Newton"
    assert len(dynamic["options"]) == 4
    assert dynamic["options"][dynamic["correct_option"] - 1] == dynamic["correct_answer"]


def test_missing_title_is_rejected():
    r = client.post("/quizzes", json=_quiz_body(title=""), headers=ADMIN)
    assert r.status_code == 422


def test_correct_option_out_of_range_is_rejected():
    body = _quiz_body()
    body["questions"][0]["correct_answer"] = "5"
    r = client.post("/quizzes", json=body, headers=ADMIN)
    assert r.status_code == 422


def test_unknown_generator_is_rejected():
    body = _quiz_body()
    body["questions"][1]["generator"] = "warp-drive"
    r = client.post("/quizzes", json=body, headers=ADMIN)
    assert r.status_code == 422


def test_unrenderable_generator_params_are_rejected():
    body = _quiz_body()
    body["questions"][1] = {
        "kind": "dynamic",
        "generator": "simple-harmonic",
        "generator_params": {"spring_constant_min": 0, "spring_constant_max": 0},
    }
    r = client.post("/quizzes", json=body, headers=ADMIN)
    assert r.status_code == 422


def test_overlong_quiz_id_is_rejected():
    r = client.put("/quizzes/" + "x" * 33, json=_quiz_body(), headers=ADMIN)
    assert r.status_code == 422


def test_get_missing_quiz_404():
    assert client.get("/quizzes/missing").status_code == 404
    assert client.get("/quizzes/missing/render").status_code == 404


def test_replace_and_delete():
    quiz_id = client.post("/quizzes", json=_quiz_body(), headers=ADMIN).json()["id"]

    r = client.put(f"/quizzes/{quiz_id}", json=_quiz_body(title="Renamed", questions=[]), headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["title"] == "Renamed" and r.json()["questions"] == []

    assert client.delete(f"/quizzes/{quiz_id}", headers=ADMIN).json()["ok"] is True
    assert client.get(f"/quizzes/{quiz_id}").status_code == 404
    assert client.delete(f"/quizzes/{quiz_id}", headers=ADMIN).status_code == 404


def test_list_and_search():
    client.post("/quizzes", json=_quiz_body(title="Thermodynamics sampler"), headers=ADMIN)
    client.post("/quizzes", json=_quiz_body(title="Draft optics", is_published=False), headers=ADMIN)

    listed = client.get("/quizzes", params={"published": True}).json()
    assert listed and all(q["is_published"] for q in listed)
    assert {"id", "title", "question_count"}.issubset(listed[0].keys())

    found = client.get("/quizzes", params={"q": "THERMO"}).json()
    assert [q["title"] for q in found] == ["Thermodynamics sampler"]


def test_list_generators():
    r = client.get("/generators")
    assert r.status_code == 200
    keys = {g["key"] for g in r.json()}
    assert "snells-law" in keys and len(keys) == 12


def test_generate_endpoint_is_seeded():
    body = {"seed": 9, "question_type": "free_response"}
    a = client.post("/generators/wave/generate", json=body).json()
    b = client.post("/generators/wave/generate", json=body).json()
    assert a == b
    assert a["options"] is None and a["seed"] == 9


def test_generate_unknown_and_bad_params():
    assert client.post("/generators/warp-drive/generate").status_code == 404
    r = client.post("/generators/wave/generate", json={"params": {"frequency_min": 5000}})
    assert r.status_code == 422


@pytest.mark.parametrize(
    "key, params",
    [
        ("circular-motion", {"radius_min": 0, "radius_max": 0}),
        ("simple-harmonic", {"mass_min": -1}),
        ("doppler-effect", {"source_speed_max": 343}),
        ("ideal-gas", {"temperature_min": 0}),
        ("snells-law", {"theta1_max": 120}),
    ],
)
def test_generate_rejects_unphysical_params(key, params):
    r = client.post(f"/generators/{key}/generate", json={"params": params})
    assert r.status_code == 422
    assert "must be" in r.json()["detail"]
