"""
Unit tests for the HTTP surface: refinement endpoint and event webhooks.
"""
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from chat_companion.api.auth import create_access_token
from chat_companion.core.config import settings
from chat_companion.main import create_app


@pytest.fixture
def client(pipeline):
    with TestClient(create_app(pipeline=pipeline)) as test_client:
        yield test_client


@pytest.fixture
def chat(store):
    return store.insert("chats", {"id": "c1", "participants": ["alice", "bob"]})


def _auth(user_id):
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_refinement_requires_token(client, chat):
    response = client.post("/api/v1/refinements", json={"chat_id": "c1", "text": "gimme"})
    assert response.status_code == 401


def test_refinement_rejects_invalid_token(client, chat):
    response = client.post(
        "/api/v1/refinements",
        json={"chat_id": "c1", "text": "gimme"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


def test_refinement_rejects_expired_token(client, chat):
    token = create_access_token({"sub": "alice"}, expires_delta=timedelta(minutes=-5))
    response = client.post(
        "/api/v1/refinements",
        json={"chat_id": "c1", "text": "gimme"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 401


def test_refinement_rejects_non_participant(client, chat, oracle):
    response = client.post("/api/v1/refinements", json={"chat_id": "c1", "text": "gimme"}, headers=_auth("mallory"))
    assert response.status_code == 403
    assert response.json()["error"] == "unauthorized"
    assert oracle.prompts == []


def test_refinement_rejects_unknown_chat(client):
    response = client.post("/api/v1/refinements", json={"chat_id": "nope", "text": "gimme"}, headers=_auth("alice"))
    assert response.status_code == 403


@pytest.mark.parametrize(
    "body",
    [{"chat_id": "c1"}, {"chat_id": "c1", "text": "   "}, {"text": "gimme"}, {"chat_id": "", "text": "x"}],
)
def test_refinement_rejects_missing_fields(client, chat, body):
    response = client.post("/api/v1/refinements", json=body, headers=_auth("alice"))
    assert response.status_code == 400


def test_refinement_rejects_malformed_body(client, chat):
    response = client.post("/api/v1/refinements", json={"chat_id": ["c1"], "text": 3}, headers=_auth("alice"))
    assert response.status_code == 400


def test_refinement_for_participant(client, chat, oracle, seed_message):
    seed_message("c1", "bob", "can you send the file?", minutes_ago=2)
    oracle.queue("Sure, I'll send the file shortly.")

    response = client.post("/api/v1/refinements", json={"chat_id": "c1", "text": "fine"}, headers=_auth("alice"))

    assert response.status_code == 200
    assert response.json() == {"refined_message": "Sure, I'll send the file shortly."}
    assert "bob: can you send the file?" in oracle.prompts[0]


def test_refinement_with_nothing_produced(client, chat, oracle):
    oracle.queue("")
    response = client.post("/api/v1/refinements", json={"chat_id": "c1", "text": "fine"}, headers=_auth("bob"))
    assert response.status_code == 200
    assert response.json() == {"refined_message": None}


def test_message_created_webhook(client, store, oracle, seed_message):
    doc = seed_message("c1", "alice", "I will bring cake")
    oracle.queue("1. Yum\n2. Thanks")

    response = client.post("/api/v1/events/message-created", json={"message": doc})

    assert response.status_code == 200
    report = response.json()
    assert report["event"] == "message.created"
    assert {h["handler"] for h in report["handlers"]} == {
        "record_context",
        "attach_suggested_replies",
        "attach_reminder",
    }
    assert all(h["ok"] for h in report["handlers"])
    assert store.all("messages")[0]["suggested_replies"] == ["Yum", "Thanks"]
    assert len(store.all("chat_context")) == 1


def test_message_updated_webhook(client, store, oracle, seed_message):
    doc = seed_message("c1", "alice", "no")
    oracle.queue("No, thank you.")

    response = client.post(
        "/api/v1/events/message-updated",
        json={"before": doc, "after": {**doc, "text": "nope"}},
    )

    assert response.status_code == 200
    assert store.all("messages")[0]["refined_message"] == "No, thank you."


def test_store_failure_answers_503(client, store, seed_message):
    doc = seed_message("c1", "alice", "I will bring cake")
    store.fail_on.add("create")

    response = client.post("/api/v1/events/message-created", json={"message": doc})

    assert response.status_code == 503
    assert response.json()["error_code"] == "3005"


def test_webhook_secret_enforced(client, seed_message, monkeypatch):
    monkeypatch.setattr(settings, "webhook_secret", "s3cret")
    doc = seed_message("c1", "alice", "hello")

    denied = client.post("/api/v1/events/message-created", json={"message": doc})
    allowed = client.post(
        "/api/v1/events/message-created", json={"message": doc}, headers={"X-Webhook-Secret": "s3cret"}
    )

    assert denied.status_code == 401
    assert allowed.status_code == 200
