"""
Pydantic schemas for the chat widget endpoints
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.services.conversation_state import Message


class ChatMessageOut(BaseModel):
    id: int
    text: str
    is_from_user: bool
    created_at: datetime
    suggests_handoff: bool = False  # Show the "Contact Support" button under this reply

    @classmethod
    def from_message(cls, message: Message) -> "ChatMessageOut":
        return cls(
            id=message.id,
            text=message.text,
            is_from_user=message.is_from_user,
            created_at=message.created_at,
            suggests_handoff=message.suggests_handoff,
        )


class ChatRequest(BaseModel):
    message: str = Field(..., description="Raw text typed by the user")


class ChatResponse(BaseModel):
    accepted: bool  # False when the input was blank and ignored
    category: Optional[str] = None
    reply: Optional[ChatMessageOut] = None


class ConversationOut(BaseModel):
    chat_session_id: str
    messages: List[ChatMessageOut]
    is_loading: bool = False


class HandoffRequest(BaseModel):
    message_id: int


class HandoffResponse(BaseModel):
    navigate_to: str
