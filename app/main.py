from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from app.database import engine, Base
from app.routers import chat
from app.config import settings
from app import models  # noqa: F401  (register tables on Base.metadata)
import logging

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create database tables
    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Chat still works in memory; saves will be logged as failures
        logger.error(f"Error creating database tables: {e}")
    yield
    # Shutdown: cleanup if needed
    logger.info("Shutting down...")

app = FastAPI(
    title="Graduin AI Assistant",
    description="Rule-based chat assistant for university applications, courses and accommodation",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
# Parse ALLOWED_ORIGINS from comma-separated string, strip whitespace
allowed_origins = [origin.strip() for origin in settings.ALLOWED_ORIGINS.split(",") if origin.strip()]

logger.info(f"CORS allowed origins: {allowed_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if allowed_origins else ["*"],  # Fallback to allow all if empty
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, prefix="/api/chat", tags=["chat"])

@app.get("/")
async def root():
    return {"message": "Graduin AI Assistant API", "status": "running"}

@app.get("/health")
async def health():
    return {"status": "healthy"}
