"""
Tests for session persistence: codec, validation on load, SQL backend
"""
import json
import pytest
from datetime import datetime, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.models import ChatSession
from app.services.conversation_state import ConversationState, Message, WELCOME_TEXT
from app.services.session_store import (
    InMemorySessionStore, InvalidPayload, SqlSessionStore, decode_messages, encode_messages, rebuild_state
)


def make_state():
    created = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)
    return ConversationState(
        messages=[
            Message(id=1, text=WELCOME_TEXT, is_from_user=False, created_at=created),
            Message(id=2, text="My name is Thabo", is_from_user=True, created_at=created),
            Message(id=3, text="Thabo, I'm here to help", is_from_user=False, created_at=created,
                    suggests_handoff=True),
        ],
        history=["My name is Thabo"],
        known_name="Thabo",
    )


class TestCodec:

    def test_round_trip(self):
        """Test: save then load reproduces ids, text, author flag and timestamps"""
        state = make_state()
        store = InMemorySessionStore()
        store.save(state)

        loaded = store.load()
        assert loaded.messages == state.messages
        assert [m.created_at for m in loaded.messages] == [m.created_at for m in state.messages]

    def test_timestamps_are_iso_strings(self):
        payload = json.loads(encode_messages(make_state().messages))
        assert payload[0]["created_at"] == "2025-03-01T09:30:00+00:00"

    def test_rebuild_recovers_history_and_name(self):
        loaded = rebuild_state(make_state().messages)
        assert loaded.history == ["My name is Thabo"]
        assert loaded.known_name == "Thabo"

    def test_rebuild_keeps_first_name(self):
        created = datetime(2025, 3, 1, tzinfo=timezone.utc)
        messages = [
            Message(id=1, text="call me Sipho", is_from_user=True, created_at=created),
            Message(id=2, text="my name is Thabo", is_from_user=True, created_at=created),
        ]
        assert rebuild_state(messages).known_name == "Sipho"

    @pytest.mark.parametrize("payload", [
        "not json",
        "{}",
        "[]",
        json.dumps([{"id": 1}]),
        json.dumps([{"id": 1, "text": "hi", "is_from_user": False, "created_at": "yesterday"}]),
        json.dumps([{"id": "one", "text": "hi", "is_from_user": False, "created_at": "2025-03-01T09:30:00"}]),
        json.dumps([
            {"id": 2, "text": "a", "is_from_user": False, "created_at": "2025-03-01T09:30:00"},
            {"id": 2, "text": "b", "is_from_user": True, "created_at": "2025-03-01T09:31:00"},
        ]),
    ])
    def test_malformed_payload_rejected(self, payload):
        with pytest.raises(InvalidPayload):
            decode_messages(payload)

    def test_load_treats_malformed_as_missing(self):
        store = InMemorySessionStore(payload="{broken")
        assert store.load() is None

    def test_load_missing(self):
        assert InMemorySessionStore().load() is None

    def test_missing_handoff_flag_defaults_false(self):
        payload = json.dumps([{"id": 1, "text": "hi", "is_from_user": False, "created_at": "2025-03-01T09:30:00"}])
        assert decode_messages(payload)[0].suggests_handoff is False

    def test_save_failure_is_not_raised(self):
        class BrokenStore(InMemorySessionStore):
            def write_payload(self, payload):
                raise OSError("quota exceeded")

        BrokenStore().save(make_state())

    def test_clear(self):
        store = InMemorySessionStore()
        store.save(make_state())
        store.clear()
        assert store.payload is None
        assert store.load() is None


class TestSqlSessionStore:

    @pytest.fixture
    def engine(self):
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        yield engine
        engine.dispose()

    @pytest.fixture
    def session_factory(self, engine):
        Base.metadata.create_all(bind=engine)
        return sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def test_save_and_load(self, session_factory):
        store = SqlSessionStore(session_factory, "abc")
        state = make_state()
        store.save(state)
        assert store.load().messages == state.messages

    def test_save_overwrites_single_row(self, session_factory):
        store = SqlSessionStore(session_factory, "abc")
        state = make_state()
        store.save(state)
        state.append_message("Hello", is_from_user=True)
        store.save(state)

        db = session_factory()
        try:
            rows = db.query(ChatSession).filter(ChatSession.chat_session_id == "abc").all()
        finally:
            db.close()
        assert len(rows) == 1
        assert len(json.loads(rows[0].payload)) == 4

    def test_sessions_are_keyed(self, session_factory):
        SqlSessionStore(session_factory, "abc").save(make_state())
        assert SqlSessionStore(session_factory, "other").load() is None

    def test_clear(self, session_factory):
        store = SqlSessionStore(session_factory, "abc")
        store.save(make_state())
        store.clear()
        assert store.load() is None

    def test_database_errors_are_not_raised(self, engine):
        """Test: without the table, load returns None and save/clear only log"""
        factory = sessionmaker(bind=engine)
        store = SqlSessionStore(factory, "abc")
        assert store.load() is None
        store.save(make_state())
        store.clear()
