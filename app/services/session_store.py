"""
Session Store - persists the message log of one browsing session

Two backends share the same JSON codec:
- InMemorySessionStore: keeps the serialized payload in memory (tests, hosts without a DB)
- SqlSessionStore: one row per chat_session_id in the chat_sessions table
"""
import json
import logging
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import ChatSession
from app.services.conversation_state import ConversationState, Message
from app.services.name_extractor import extract_name

logger = logging.getLogger(__name__)


class MessageRecord(BaseModel):
    """Shape of one persisted message"""
    id: int
    text: str
    is_from_user: bool
    created_at: datetime
    suggests_handoff: bool = False


class InvalidPayload(ValueError):
    pass


def encode_messages(messages: List[Message]) -> str:
    return json.dumps([
        {
            "id": m.id,
            "text": m.text,
            "is_from_user": m.is_from_user,
            "created_at": m.created_at.isoformat(),
            "suggests_handoff": m.suggests_handoff,
        }
        for m in messages
    ])


def decode_messages(payload: str) -> List[Message]:
    """Parse and validate a persisted payload. Raises InvalidPayload on any problem."""
    try:
        raw = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise InvalidPayload(f"payload is not JSON: {e}") from e

    if not isinstance(raw, list) or not raw:
        raise InvalidPayload("payload must be a non-empty list of messages")

    try:
        records = [MessageRecord.model_validate(item) for item in raw]
    except ValidationError as e:
        raise InvalidPayload(f"malformed message record: {e}") from e

    ids = [r.id for r in records]
    if any(later <= earlier for earlier, later in zip(ids, ids[1:])):
        raise InvalidPayload("message ids must be strictly increasing")

    return [
        Message(
            id=r.id,
            text=r.text,
            is_from_user=r.is_from_user,
            created_at=r.created_at,
            suggests_handoff=r.suggests_handoff and not r.is_from_user,
        )
        for r in records
    ]


def rebuild_state(messages: List[Message]) -> ConversationState:
    """Rehydrate history and the sticky name from the persisted messages"""
    state = ConversationState(messages=list(messages))
    for message in messages:
        if not message.is_from_user:
            continue
        state.history.append(message.text)
        state.remember_name(extract_name(message.text))
    return state


class SessionStore:
    """load / save / clear contract used by the ConversationController"""

    def read_payload(self) -> Optional[str]:
        raise NotImplementedError

    def write_payload(self, payload: str) -> None:
        raise NotImplementedError

    def delete_payload(self) -> None:
        raise NotImplementedError

    def load(self) -> Optional[ConversationState]:
        """Return the saved state, or None if nothing valid is stored. Never raises."""
        try:
            payload = self.read_payload()
        except SQLAlchemyError as e:
            logger.warning(f"Could not read chat history: {e}")
            return None
        if payload is None:
            return None
        try:
            messages = decode_messages(payload)
        except InvalidPayload as e:
            logger.warning(f"Discarding saved chat history: {e}")
            return None
        return rebuild_state(messages)

    def save(self, state: ConversationState) -> None:
        """Best-effort: failures are logged and the conversation continues in memory"""
        try:
            self.write_payload(encode_messages(state.messages))
        except Exception:
            logger.exception("Error saving chat history")

    def clear(self) -> None:
        try:
            self.delete_payload()
        except Exception:
            logger.exception("Error clearing chat history")


class InMemorySessionStore(SessionStore):
    def __init__(self, payload: Optional[str] = None):
        self.payload = payload

    def read_payload(self) -> Optional[str]:
        return self.payload

    def write_payload(self, payload: str) -> None:
        self.payload = payload

    def delete_payload(self) -> None:
        self.payload = None


class SqlSessionStore(SessionStore):
    """Keyed record in chat_sessions; a fresh DB session is opened per operation"""

    def __init__(self, session_factory: Callable[[], Session], chat_session_id: str):
        self.session_factory = session_factory
        self.chat_session_id = chat_session_id

    def _find(self, db: Session) -> Optional[ChatSession]:
        return db.query(ChatSession).filter(
            ChatSession.chat_session_id == self.chat_session_id
        ).first()

    def read_payload(self) -> Optional[str]:
        db = self.session_factory()
        try:
            row = self._find(db)
            return row.payload if row else None
        finally:
            db.close()

    def write_payload(self, payload: str) -> None:
        db = self.session_factory()
        try:
            row = self._find(db)
            if row is None:
                row = ChatSession(chat_session_id=self.chat_session_id, payload=payload)
                db.add(row)
            else:
                row.payload = payload
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()

    def delete_payload(self) -> None:
        db = self.session_factory()
        try:
            db.query(ChatSession).filter(
                ChatSession.chat_session_id == self.chat_session_id
            ).delete()
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        finally:
            db.close()
