"""
Conversation State - messages, categories and the per-session conversation log
"""
import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


WELCOME_TEXT = (
    "Hi! I'm your Graduin AI assistant. I'm here to help you with university applications, "
    "course selection, accommodation, and all things related to Graduin's services. "
    "How can I assist you today?"
)


class Category(str, enum.Enum):
    GREETING = "greeting"
    CONTACT_REQUEST = "contact-request"
    INSTITUTION = "institution"
    COURSE = "course"
    ACCOMMODATION = "accommodation"
    APPLICATION = "application"
    CAREER = "career"
    PRICING = "pricing"
    LOCATION = "location"
    HELP = "help"
    FALLBACK = "fallback"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """A single chat bubble. Never mutated after creation."""
    id: int
    text: str
    is_from_user: bool
    created_at: datetime
    suggests_handoff: bool = False  # Assistant replies only: show the "Contact Support" affordance


@dataclass
class ConversationState:
    """
    Everything one browsing session knows about its conversation.

    - messages: ordered chat log (user and assistant)
    - history: raw user utterances, one per user message, used for repeat detection
    - known_name: first name the user introduced themselves with (sticky)
    """
    messages: List[Message] = field(default_factory=list)
    history: List[str] = field(default_factory=list)
    known_name: Optional[str] = None

    @classmethod
    def fresh(cls, now: Optional[datetime] = None) -> "ConversationState":
        """New conversation seeded with the welcome message"""
        welcome = Message(
            id=1,
            text=WELCOME_TEXT,
            is_from_user=False,
            created_at=now or utcnow(),
        )
        return cls(messages=[welcome])

    @property
    def next_message_id(self) -> int:
        if not self.messages:
            return 1
        return self.messages[-1].id + 1

    def append_message(self, text: str, is_from_user: bool, suggests_handoff: bool = False) -> Message:
        message = Message(
            id=self.next_message_id,
            text=text,
            is_from_user=is_from_user,
            created_at=utcnow(),
            suggests_handoff=suggests_handoff and not is_from_user,
        )
        self.messages.append(message)
        if is_from_user:
            self.history.append(text)
        return message

    def remember_name(self, name: Optional[str]) -> bool:
        """Commit an extracted name unless one is already known. Returns True if committed."""
        if not name or self.known_name:
            return False
        self.known_name = name
        return True

    def find_message(self, message_id: int) -> Optional[Message]:
        for message in self.messages:
            if message.id == message_id:
                return message
        return None
