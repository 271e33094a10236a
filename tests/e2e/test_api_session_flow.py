import base64
import json

from fastapi.testclient import TestClient

from api_server import app
from config.registry import GENERATION_KEY, TRANSCRIPTION_KEY, bind_model
from services.sessions import store

client = TestClient(app)
BASE = "/api/interview-sessions"


class BulletAwareGenerator:
    """Fails follow-ups, answers bullet requests with JSON."""

    def generate(self, prompt, constraints):
        if constraints.json_reply:
            return json.dumps({"bullets": [{"text": "Shipped a React dashboard serving 10,000 requests a day"}]})
        raise RuntimeError("follow-ups unavailable")


def _start(**body):
    resp = client.post(f"{BASE}/start", json=body)
    assert resp.status_code == 200
    return resp.json()


def test_start_respond_finalize_flow():
    bind_model(GENERATION_KEY, BulletAwareGenerator())
    started = _start(prior_context="Senior React developer")
    session_id = started["session_id"]
    assert started["status"] == "started"
    assert "React" in started["message"]

    first = client.post(f"{BASE}/respond", json={"session_id": session_id, "text": "I built a react dashboard for 3 users"})
    assert first.status_code == 200
    assert first.json()["status"] == "continue"

    for _ in range(4):
        body = client.post(
            f"{BASE}/respond",
            json={"session_id": session_id, "text": "It handles 10,000 requests/day, improved load time 40%"},
        ).json()
        assert body["status"] == "continue"

    snap = client.get(f"{BASE}/{session_id}").json()
    assert snap["state"] == "active"
    assert snap["respondent_turn_count"] == 5

    final = client.post(f"{BASE}/respond", json={"session_id": session_id, "text": "We used python too"}).json()
    assert final["status"] == "finalize"
    assert final["reason"] == "quality_sufficient"
    assert final["transcript"][-1]["speaker"] == "interviewer"
    assert final["bullets"][0]["text"].startswith("Shipped a React dashboard")

    assert client.get(f"{BASE}/{session_id}").status_code == 404
    again = client.post(f"{BASE}/respond", json={"session_id": session_id, "text": "hello?"})
    assert again.status_code == 404


def test_empty_text_is_rejected_without_state_change():
    session_id = _start()["session_id"]
    for body in ({"session_id": session_id, "text": ""}, {"session_id": session_id}):
        resp = client.post(f"{BASE}/respond", json=body)
        assert resp.status_code == 400
    snap = client.get(f"{BASE}/{session_id}").json()
    assert snap["respondent_turn_count"] == 0
    assert len(snap["transcript"]) == 1
    store.delete(session_id)


def test_short_budget_finalizes_with_time_exceeded():
    session_id = _start(budget_seconds=60)["session_id"]
    final = client.post(f"{BASE}/respond", json={"session_id": session_id, "text": "my first answer"}).json()
    assert final["status"] == "finalize"
    assert final["reason"] == "time_exceeded"
    assert len(final["bullets"]) == 1


def test_voice_turn_finalizes_with_role_bullets(fake_transcriber):
    bind_model(GENERATION_KEY, BulletAwareGenerator())
    bind_model(TRANSCRIPTION_KEY, fake_transcriber("I tuned our postgres queries"))
    session_id = _start(role="Database Engineer", budget_seconds=60)["session_id"]

    audio = base64.b64encode(b"fake-wav-bytes").decode("ascii")
    final = client.post(f"{BASE}/respond-audio", json={"session_id": session_id, "audio_b64": audio}).json()
    assert final["status"] == "finalize"
    assert final["reason"] == "time_exceeded"
    assert final["transcript"][1]["text"] == "I tuned our postgres queries"
    assert final["bullets"][0]["context"] == "Database Engineer"


def test_unknown_session_is_404():
    assert client.post(f"{BASE}/respond", json={"session_id": "missing", "text": "hi"}).status_code == 404
    assert client.get(f"{BASE}/missing").status_code == 404


def test_health():
    assert client.get("/health").json() == {"status": "ok"}
