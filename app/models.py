from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from app.database import Base

# One keyed record per browsing session holding the serialized message log
class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(Integer, primary_key=True, index=True)
    chat_session_id = Column(String, nullable=False, unique=True, index=True)
    payload = Column(Text, nullable=False)  # JSON list of messages, ISO-8601 timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
