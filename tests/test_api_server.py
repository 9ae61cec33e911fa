from __future__ import annotations

import time

from fastapi.testclient import TestClient
import pytest

from exam_portal.constants.exam_constants import CHEATING_REDIRECT_URL
from exam_portal.core.exam_manager import ExamManager
from exam_portal.server.api_server import create_api_app


@pytest.fixture
def manager(seeded_backend) -> ExamManager:
    # Long tick so the countdowns stay put for the duration of a test.
    return ExamManager(seeded_backend, tick_seconds=600.0)


@pytest.fixture
def client(manager):
    with TestClient(create_api_app(manager, secret_key="test-secret")) as test_client:
        yield test_client


def _login(client: TestClient, email: str = "ada@example.com") -> dict:
    response = client.post("/api/login", json={"email": email, "display_name": "Ada"})
    assert response.status_code == 200
    return response.json()


def _start(client: TestClient) -> dict:
    response = client.post("/api/exams/general-knowledge/start")
    assert response.status_code == 201
    return response.json()


@pytest.mark.parametrize("path", ["/", "/login", "/exam/general-knowledge", "/result?attempt_id=x"])
def test_pages_are_served(client, path):
    response = client.get(path)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")


def test_subjects_are_listed(client):
    payload = client.get("/api/subjects").json()
    assert payload["subjects"] == [
        {"id": 1, "name": "General Knowledge", "slug": "general-knowledge", "question_count": 3}
    ]


def test_login_sets_identity_cookie(client):
    anonymous = client.get("/api/identity").json()
    assert anonymous["authenticated"] is False
    assert anonymous["role"] is None
    identity = _login(client)
    assert identity["authenticated"] is True
    assert identity["role"] == "user"
    assert client.get("/api/identity").json()["user_id"] == identity["user_id"]

    client.post("/api/logout")
    assert client.get("/api/identity").json()["authenticated"] is False


def test_login_rejects_invalid_email(client):
    assert client.post("/api/login", json={"email": "nope"}).status_code == 422


def test_start_requires_login(client):
    response = client.post("/api/exams/general-knowledge/start")
    assert response.status_code == 401
    assert response.json()["detail"] == "User not authenticated"


def test_start_unknown_subject(client):
    _login(client)
    response = client.post("/api/exams/unknown/start")
    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid test selected"


def test_start_subject_without_questions(client, seeded_backend):
    seeded_backend.create_subject("Empty")
    _login(client)
    response = client.post("/api/exams/empty/start")
    assert response.status_code == 422
    assert response.json()["detail"] == "No questions available for this subject"


def test_start_returns_rendered_question_without_answer(client):
    _login(client)
    state = _start(client)

    assert state["phase"] == "active"
    assert state["question_count"] == 3
    assert state["remaining_seconds"] == 90
    assert state["question_seconds_remaining"] == 30
    assert state["statuses"] == ["not_visited"] * 3
    assert state["subject"] == {"name": "General Knowledge", "slug": "general-knowledge"}
    assert "<p>What is $2 + 2$?</p>" in state["question"]["html"]
    assert [option["html"] for option in state["question"]["options"]] == ["3", "4", "5"]
    assert "correct_option_id" not in state["question"]


def test_answer_navigate_and_review(client):
    _login(client)
    state = _start(client)
    session_id = state["session_id"]
    option_id = state["question"]["options"][1]["id"]

    state = client.post(f"/api/sessions/{session_id}/select", json={"option_id": option_id}).json()
    assert state["statuses"][0] == "answered"
    assert state["answers"] == {"0": option_id}

    state = client.post(f"/api/sessions/{session_id}/review").json()
    assert state["current_index"] == 1
    assert state["statuses"][0] == "answered_and_review"

    state = client.post(f"/api/sessions/{session_id}/goto", json={"index": 2}).json()
    assert state["current_index"] == 2
    assert state["statuses"] == ["answered_and_review", "not_answered", "not_answered"]
    assert state["question"]["comprehension_html"] == "<p>The solar system has eight planets.</p>\n"

    state = client.post(f"/api/sessions/{session_id}/previous").json()
    assert state["current_index"] == 1
    state = client.post(f"/api/sessions/{session_id}/next").json()
    assert state["current_index"] == 2


def test_invalid_actions_are_rejected(client):
    _login(client)
    session_id = _start(client)["session_id"]

    assert client.post(f"/api/sessions/{session_id}/goto", json={"index": 7}).status_code == 422
    assert client.post(f"/api/sessions/{session_id}/select", json={"option_id": 9999}).status_code == 422
    assert client.get("/api/sessions/does-not-exist").status_code == 404


def test_sessions_are_private(client):
    _login(client)
    session_id = _start(client)["session_id"]
    _login(client, "eve@example.com")
    assert client.get(f"/api/sessions/{session_id}").status_code == 404


def test_submit_modal_toggle(client):
    _login(client)
    session_id = _start(client)["session_id"]

    state = client.post(f"/api/sessions/{session_id}/submit-modal", json={"open": True}).json()
    assert state["show_submit_modal"] is True
    state = client.post(f"/api/sessions/{session_id}/submit-modal", json={"open": False}).json()
    assert state["show_submit_modal"] is False


def test_submit_and_review_results(client):
    _login(client)
    state = _start(client)
    session_id = state["session_id"]
    client.post(f"/api/sessions/{session_id}/select", json={"option_id": state["question"]["options"][1]["id"]})
    state = client.post(f"/api/sessions/{session_id}/next").json()
    client.post(f"/api/sessions/{session_id}/select", json={"option_id": state["question"]["options"][2]["id"]})

    receipt = client.post(f"/api/sessions/{session_id}/submit").json()
    assert receipt["redirect_url"] == f"/result?attempt_id={receipt['attempt_id']}"
    assert receipt["answers_saved"] is True
    assert client.get(f"/api/sessions/{session_id}").status_code == 404

    result = client.get(f"/api/results/{receipt['attempt_id']}").json()
    assert result["source"] == "cache"
    assert result["attempt"]["correct"] == 1
    assert result["attempt"]["wrong"] == 1
    assert result["attempt"]["not_attended"] == 1
    assert [q["status"] for q in result["questions"]] == ["correct", "wrong", "not_attended"]

    again = client.get(f"/api/results/{receipt['attempt_id']}").json()
    assert again["source"] == "backend"
    assert [q["status"] for q in again["questions"]] == ["correct", "wrong", "not_attended"]


def test_results_require_owner(client):
    _login(client)
    session_id = _start(client)["session_id"]
    attempt_id = client.post(f"/api/sessions/{session_id}/submit").json()["attempt_id"]

    _login(client, "eve@example.com")
    assert client.get(f"/api/results/{attempt_id}").status_code == 404
    client.post("/api/logout")
    assert client.get(f"/api/results/{attempt_id}").status_code == 401


def test_tab_switching_escalates_to_termination(client, seeded_backend):
    _login(client)
    session_id = _start(client)["session_id"]

    state = client.post(f"/api/sessions/{session_id}/visibility", json={"visible": False}).json()
    warning = state["integrity"]["warning"]
    assert warning["count"] == 1
    assert warning["dismissible"] is True
    assert client.post(f"/api/sessions/{session_id}/warning/dismiss").status_code == 200

    client.post(f"/api/sessions/{session_id}/visibility", json={"visible": True})
    window = {"outer_width": 1600, "inner_width": 1000, "outer_height": 900, "inner_height": 880}
    state = client.post(f"/api/sessions/{session_id}/window", json=window).json()

    warning = state["integrity"]["warning"]
    assert warning["final"] is True
    assert warning["redirect_url"] == CHEATING_REDIRECT_URL
    assert state["phase"] == "terminated"
    assert client.post(f"/api/sessions/{session_id}/warning/dismiss").status_code == 409
    assert client.post(f"/api/sessions/{session_id}/submit").status_code == 409
    assert seeded_backend.list_attempts() == []


def test_leave_discards_session(client, seeded_backend):
    _login(client)
    session_id = _start(client)["session_id"]
    assert client.post(f"/api/sessions/{session_id}/leave").status_code == 204
    assert client.get(f"/api/sessions/{session_id}").status_code == 404
    assert seeded_backend.list_attempts() == []


def test_shutdown_closes_sessions(manager, seeded_backend):
    with TestClient(create_api_app(manager, secret_key="test-secret")) as client:
        _login(client)
        _start(client)
        assert manager.active_exam_count() == 1
    assert manager.active_exam_count() == 0


def test_slow_submission_does_not_stall_other_clocks(seeded_backend, monkeypatch):
    physics = seeded_backend.create_subject("Physics")
    seeded_backend.add_question(physics.id, "Unit of force?", ["Newton", "Joule"], 0)
    manager = ExamManager(seeded_backend, seconds_per_question=600, tick_seconds=0.01)
    create_attempt = seeded_backend.create_attempt

    def slow_create_attempt(**kwargs):
        time.sleep(0.5)
        return create_attempt(**kwargs)

    monkeypatch.setattr(seeded_backend, "create_attempt", slow_create_attempt)

    with TestClient(create_api_app(manager, secret_key="test-secret")) as client:
        _login(client)
        submitting = _start(client)["session_id"]
        watched = client.post("/api/exams/physics/start").json()["session_id"]

        before = client.get(f"/api/sessions/{watched}").json()["remaining_seconds"]
        assert client.post(f"/api/sessions/{submitting}/submit").status_code == 200
        after = client.get(f"/api/sessions/{watched}").json()["remaining_seconds"]

    assert before - after >= 10
