from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Homestead Property API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # Frontend (sign-in redirects + CORS)
    # -------------------------------------------------
    APP_URL: str = Field("http://localhost:5173", env="APP_URL")

    FRONTEND_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Relational store
    # -------------------------------------------------
    DATABASE_URL: str = Field("sqlite:///./local.db", env="DATABASE_URL")
    DB_AUTO_CREATE: bool = Field(True, env="DB_AUTO_CREATE")

    # -------------------------------------------------
    # Supabase (Auth / identity provider)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # -------------------------------------------------
    # Join request workflow
    # -------------------------------------------------
    # Bytes of entropy for the one-time bootstrap password
    TEMP_PASSWORD_BYTES: int = Field(12, env="TEMP_PASSWORD_BYTES")

    # Public submission throttle (per client IP)
    JOIN_REQUEST_RATE_LIMIT: int = Field(5, env="JOIN_REQUEST_RATE_LIMIT")
    JOIN_REQUEST_RATE_WINDOW_SECONDS: int = Field(3600, env="JOIN_REQUEST_RATE_WINDOW_SECONDS")

    # -------------------------------------------------
    # Listing endpoints
    # -------------------------------------------------
    DEFAULT_PAGE_LIMIT: int = 50
    MAX_PAGE_LIMIT: int = 200

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# Render/Neon often provide 'postgres://'. SQLAlchemy prefers 'postgresql+psycopg2://'
if settings.DATABASE_URL.startswith("postgres://"):
    settings.DATABASE_URL = settings.DATABASE_URL.replace(
        "postgres://", "postgresql+psycopg2://", 1
    )

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = [settings.APP_URL.rstrip("/")]
cors_origins.extend([o.rstrip("/") for o in settings.FRONTEND_ORIGINS])

settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
