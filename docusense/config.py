import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str):
    value = os.environ.get(name, default).strip()
    if value == "*":
        return value
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """Application configuration loaded from environment variables."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    PORT = int(os.environ.get("PORT", 5000))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Database defaults to SQLite, overridable via DATABASE_URL for PostgreSQL
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "sqlite:///docusense.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # PostgreSQL connection pooling (ignored by SQLite)
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }

    # Bearer tokens
    TOKEN_EXPIRES = timedelta(days=int(os.environ.get("TOKEN_EXPIRES_DAYS", 7)))

    # File uploads
    UPLOAD_FOLDER = os.environ.get(
        "UPLOAD_FOLDER",
        os.path.join(os.path.dirname(os.path.abspath(__file__)), "uploads"),
    )
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10 MB
    ALLOWED_MIME_TYPES = {"application/pdf", "text/plain"}
    UPLOAD_RETENTION = timedelta(
        hours=int(os.environ.get("UPLOAD_RETENTION_HOURS", 24))
    )

    # Rate limiting is a pass-through unless explicitly switched on
    RATELIMIT_ENABLED = _env_flag("RATELIMIT_ENABLED", default=False)
    AI_RATE_LIMIT = os.environ.get("AI_RATE_LIMIT", "20 per minute")

    # Browser frontends calling /api/*
    CORS_ORIGINS = _env_list("CORS_ORIGINS", "*")

    # Hosted language model
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
    OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL") or None
    LLM_MODEL = os.environ.get("LLM_MODEL", "gpt-4o-mini")
    LLM_TEMPERATURE = 0.3
    LLM_TIMEOUT = None
    LLM_MAX_RETRIES = 0

    # Summaries and Q&A
    SUMMARY_CHUNK_WORDS = 1000
    SUMMARY_INPUT_CHARS = 8000
    SUMMARY_MAX_TOKENS = 300
    QA_CONTEXT_CHARS = 12000
    QA_MAX_TOKENS = 500


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RATELIMIT_ENABLED = False
    OPENAI_API_KEY = ""
