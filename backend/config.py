"""Centralized configuration — all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # Remote time-off API
        self.api_base_url: str | None = os.getenv("TIMEOFF_API_BASE_URL")
        self.api_token: str | None = os.getenv("TIMEOFF_API_TOKEN")
        self.api_timeout: float = float(os.getenv("TIMEOFF_API_TIMEOUT", "10"))

        # Request cache and local persistence
        self.cache_ttl_seconds: float = float(os.getenv("CACHE_TTL_SECONDS", "30"))
        self.storage_dir: str | None = os.getenv("STORAGE_DIR")
        self.storage_key: str = os.getenv("STORAGE_KEY", "timeoff.requests")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of missing required env vars for the remote API."""
        required = ["TIMEOFF_API_BASE_URL"]
        return [var for var in required if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "TIMEOFF_API_BASE_URL": "api_base_url",
    }
    return mapping.get(env_var, env_var.lower())
