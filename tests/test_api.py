import inspect
import json

import pytest
from fastapi.testclient import TestClient

import api.session as session
import config
from api.app import SESSION_COOKIE, create_app
from conftest import make_document
from timed_quiz.services.storage import MemoryStorage


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(session, "_storage", MemoryStorage())
    with TestClient(create_app(cleanup=False)) as c:
        yield c
        c.post("/api/reset")


def _load(client, **kwargs):
    resp = client.post("/api/load", json=make_document(**kwargs))
    assert resp.status_code == 200
    return resp.json()["view"]


def test_state_before_load_is_404(client):
    assert client.get("/api/state").status_code == 404
    assert SESSION_COOKIE in client.cookies


def test_load_document_body(client):
    view = _load(client, correct=(0, 1, 2))
    assert view["title"] == "Sample"
    assert view["position"] == 1
    assert view["total"] == 3
    assert sorted(view["options"]) == ["q1-a", "q1-b", "q1-c"]
    assert client.get("/api/state").json() == view


def test_load_from_configured_file(client, monkeypatch, tmp_path):
    path = tmp_path / "questions.json"
    path.write_text(json.dumps(make_document(correct=(1,))), encoding="utf-8")
    monkeypatch.setattr(config, "QUESTIONS_FILE", str(path))
    resp = client.post("/api/load")
    assert resp.status_code == 200
    assert resp.json()["view"]["total"] == 1


def test_load_invalid_document(client):
    resp = client.post("/api/load", json={"questions": "broken"})
    assert resp.status_code == 422
    assert client.get("/api/state").status_code == 404


def test_answer_navigate_finish_flow(client):
    view = _load(client, correct=(0, 1), threshold=0.5)
    correct = view["options"].index("q1-a")

    resp = client.post("/api/answer", json={"index": correct})
    assert resp.status_code == 200
    assert resp.json()["analytics"]["correct"] is True
    assert resp.json()["analytics"]["questionId"] == "q1"

    view = client.post("/api/next").json()
    assert view["position"] == 2 and view["is_last"] is True
    view = client.post("/api/next").json()
    assert view["position"] == 2

    view = client.post("/api/prev").json()
    assert view["selected"] == correct

    assert client.get("/api/results").status_code == 400

    result = client.post("/api/finish").json()
    assert result["correct_count"] == 1
    assert result["percent"] == 50
    assert result["passed"] is True
    assert result["analytics"][1]["timeSpentSec"] == 0
    assert client.get("/api/results").json() == result
    assert client.post("/api/finish").json() == result


def test_next_with_pending_selection(client):
    _load(client)
    view = client.post("/api/next", json={"selected": 2}).json()
    assert view["index"] == 1
    view = client.post("/api/prev").json()
    assert view["selected"] == 2


def test_invalid_answer_is_422(client):
    _load(client)
    assert client.post("/api/answer", json={"index": 9}).status_code == 422


def test_finished_session_rejects_answers(client):
    _load(client)
    client.post("/api/finish")
    assert client.post("/api/answer", json={"index": 0}).status_code == 400
    assert client.post("/api/next").status_code == 400


def test_review_rows(client):
    _load(client, correct=(0, 1))
    client.post("/api/finish")
    rows = client.get("/api/review").json()["rows"]
    assert [r["number"] for r in rows] == [1, 2]
    assert all(sum(o["is_correct"] for o in r["options"]) == 1 for r in rows)


def test_restart_after_finish(client):
    _load(client)
    client.post("/api/next", json={"selected": 0})
    client.post("/api/finish")
    view = client.post("/api/restart").json()
    assert view["position"] == 1
    assert view["is_finished"] is False
    assert view["selected"] is None


def test_sample_quiz_is_timed(client):
    resp = client.post("/api/start-sample")
    assert resp.status_code == 200
    view = resp.json()["view"]
    assert view["title"] == "Python Basics"
    assert view["is_timed"] is True
    assert view["remaining_text"] == "05:00"


def test_reset_drops_session_progress(client):
    _load(client)
    assert client.post("/api/reset").json() == {"ok": True}
    assert client.get("/api/state").status_code == 404


def test_unknown_session_cookie_resumes_snapshot(monkeypatch):
    storage = MemoryStorage()
    monkeypatch.setattr(session, "_storage", storage)
    app = create_app(cleanup=False)

    with TestClient(app) as first:
        view = first.post("/api/load", json=make_document()).json()["view"]
        first.post("/api/next", json={"selected": 1})
        sid = first.cookies[SESSION_COOKIE]

    # simulate a server restart: the in-memory session is gone, the snapshot is not
    session._sessions.pop(sid)
    session._timestamps.pop(sid)

    with TestClient(app, cookies={SESSION_COOKIE: sid}) as second:
        resumed = second.post("/api/load", json=make_document()).json()["view"]
        assert resumed["index"] == 1
        prev = second.post("/api/prev").json()
        assert prev["selected"] == 1
        assert prev["options"] == view["options"]
        second.post("/api/reset")


def test_no_page_is_served(client):
    assert client.get("/").status_code == 404


def test_quiz_endpoints_run_in_threadpool():
    app = create_app(cleanup=False)
    endpoints = [r.endpoint for r in app.routes if getattr(r, "path", "").startswith("/api/")]
    assert endpoints
    assert not any(inspect.iscoroutinefunction(fn) for fn in endpoints)
