"""
Database initialization script
Run this to create the chat_sessions table
"""
from app.database import engine, Base
from app.models import ChatSession  # noqa: F401

def init_database():
    """Initialize database tables"""
    Base.metadata.create_all(bind=engine)
    print("Database initialized successfully!")

if __name__ == "__main__":
    init_database()
