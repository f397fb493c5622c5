"""
Tests for the chat HTTP endpoints used by the host page
"""
import json
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.routers import chat
from app.routers.chat import get_presentation_delay, get_store_factory
from app.services.conversation_state import Category, WELCOME_TEXT
from app.services.response_composer import compose
from app.services.session_store import InMemorySessionStore


class TestChatRouter:

    @pytest.fixture
    def stores(self):
        return {}

    @pytest.fixture
    def client(self, stores):
        app.dependency_overrides[get_store_factory] = lambda: (
            lambda chat_session_id: stores.setdefault(chat_session_id, InMemorySessionStore())
        )
        app.dependency_overrides[get_presentation_delay] = lambda: 0.0
        yield TestClient(app)
        app.dependency_overrides.clear()
        chat._controllers.clear()

    def send(self, client, text, session="s1"):
        return client.post(f"/api/chat/{session}/messages", json={"message": text})

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_new_session_has_welcome(self, client):
        response = client.get("/api/chat/s1/messages")
        assert response.status_code == 200
        body = response.json()
        assert body["chat_session_id"] == "s1"
        assert len(body["messages"]) == 1
        assert body["messages"][0]["text"] == WELCOME_TEXT
        assert body["messages"][0]["is_from_user"] is False

    def test_hello_then_hello_again(self, client):
        first = self.send(client, "Hello").json()
        assert first["accepted"] is True
        assert first["category"] == "greeting"
        assert first["reply"]["text"] == compose(Category.GREETING, False).text

        second = self.send(client, "hello ").json()
        assert second["reply"]["text"] == compose(Category.GREETING, True).text

        messages = client.get("/api/chat/s1/messages").json()["messages"]
        assert [m["id"] for m in messages] == [1, 2, 3, 4, 5]

    def test_blank_message_ignored(self, client):
        response = self.send(client, "   ")
        assert response.status_code == 200
        assert response.json() == {"accepted": False, "category": None, "reply": None}
        assert len(client.get("/api/chat/s1/messages").json()["messages"]) == 1

    def test_name_prefix(self, client):
        self.send(client, "My name is Thabo")
        reply = self.send(client, "What courses do you have").json()["reply"]
        assert reply["text"].startswith("Thabo, ")

    def test_rejects_turn_while_presenting(self, client):
        client.get("/api/chat/s1/messages")
        chat._controllers["s1"].is_loading = True
        assert self.send(client, "Hello").status_code == 409

    def test_handoff(self, client, stores):
        reply = self.send(client, "I want to speak to someone").json()["reply"]
        assert reply["suggests_handoff"] is True

        response = client.post("/api/chat/s1/handoff", json={"message_id": reply["id"]})
        assert response.status_code == 200
        assert response.json() == {"navigate_to": "contact-us"}
        assert stores["s1"].payload is None
        assert "s1" not in chat._controllers

    def test_handoff_rejected_for_plain_reply(self, client):
        reply = self.send(client, "Hello").json()["reply"]
        response = client.post("/api/chat/s1/handoff", json={"message_id": reply["id"]})
        assert response.status_code == 400

    def test_end_session_clears_history(self, client, stores):
        self.send(client, "Hello")
        assert client.delete("/api/chat/s1").status_code == 204
        assert stores["s1"].payload is None

        messages = client.get("/api/chat/s1/messages").json()["messages"]
        assert len(messages) == 1
        assert messages[0]["text"] == WELCOME_TEXT

    def test_end_session_without_live_controller(self, client, stores):
        stores["s2"] = InMemorySessionStore(payload="[]")
        assert client.delete("/api/chat/s2").status_code == 204
        assert stores["s2"].payload is None

    def test_rehydrates_saved_history(self, client, stores):
        stores["s3"] = InMemorySessionStore(payload=json.dumps([
            {"id": 1, "text": WELCOME_TEXT, "is_from_user": False, "created_at": "2025-03-01T09:30:00+00:00"},
            {"id": 2, "text": "Cape Town", "is_from_user": True, "created_at": "2025-03-01T09:31:00+00:00"},
            {"id": 3, "text": "Graduin covers...", "is_from_user": False, "created_at": "2025-03-01T09:31:01+00:00"},
        ]))
        messages = client.get("/api/chat/s3/messages").json()["messages"]
        assert [m["id"] for m in messages] == [1, 2, 3]

        reply = self.send(client, "cape town", session="s3").json()["reply"]
        assert reply["id"] == 5
        assert reply["text"] == compose(Category.LOCATION, True).text

    def test_sessions_are_isolated(self, client):
        self.send(client, "Hello", session="a")
        reply = self.send(client, "Hello", session="b").json()["reply"]
        assert reply["text"] == compose(Category.GREETING, False).text
