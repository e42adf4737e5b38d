from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "contesthub-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "ContestHub")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/contesthub_dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Stripe configuration
    stripe_secret_key: str = os.getenv("STRIPE_SECRET_KEY", "")
    stripe_webhook_secret: str = os.getenv("STRIPE_WEBHOOK_SECRET", "")
    checkout_currency: str = os.getenv("CHECKOUT_CURRENCY", "usd")
    site_domain: str = os.getenv("SITE_DOMAIN", "http://localhost:5173")

    # Identity: "firebase" (Google-signed ID tokens) or "jwt" (local HS256, dev/test)
    identity_provider: str = os.getenv("IDENTITY_PROVIDER", "firebase")
    firebase_project_id: str = os.getenv("FIREBASE_PROJECT_ID", "")
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")

    # Dedup payment records and install the transaction_id unique index on boot
    run_startup_repair: bool = os.getenv("RUN_STARTUP_REPAIR", "1") == "1"

    popular_limit: int = int(os.getenv("POPULAR_LIMIT", "6"))
    leaderboard_limit: int = int(os.getenv("LEADERBOARD_LIMIT", "10"))

settings = Settings()
