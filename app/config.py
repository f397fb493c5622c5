from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./graduin.db"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Delay before the assistant reply is appended (models "typing")
    PRESENTATION_DELAY_SECONDS: float = 1.0
    # Page the host navigates to when the user asks for a human
    HANDOFF_PAGE: str = "contact-us"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env

settings = Settings()
