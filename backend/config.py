"""Centralized configuration — all env vars in one place."""

import os
from pathlib import Path

DEFAULT_BASE_URL = "https://api.data.gov.in/resource/ee03643a-ee4c-48c2-ac30-9f2ff26ab722"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.port: int = int(os.getenv("PORT", "4000"))
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # data.gov.in upstream
        self.data_gov_base_url: str = os.getenv("DATA_GOV_BASE_URL", DEFAULT_BASE_URL)
        self.data_gov_api_key: str | None = os.getenv("DATA_GOV_API_KEY")
        self.data_gov_limit: int = int(os.getenv("DATA_GOV_LIMIT", "5000"))
        self.upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "30"))

        # On-disk cache
        self.cache_dir: Path = Path(os.getenv("CACHE_DIR", "./cache")).resolve()
        self.cache_file: str = os.getenv("CACHE_FILE", "mgnrega_data.json")
        self.cache_ttl_seconds: int = int(os.getenv("CACHE_TTL_SECONDS", str(60 * 60 * 24)))

        # Daily refresh, local wall-clock HH:MM
        self.refresh_at: str = os.getenv("REFRESH_AT", "04:00")

        # Per-client ceiling on /api/ routes
        self.rate_limit_max: int = int(os.getenv("RATE_LIMIT_MAX", "60"))
        self.rate_limit_window_seconds: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cache_path(self) -> Path:
        return self.cache_dir / self.cache_file

    def validate(self) -> list[str]:
        """Return list of missing required env vars for upstream fetches."""
        required = ["DATA_GOV_API_KEY"]
        return [var for var in required if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "DATA_GOV_API_KEY": "data_gov_api_key",
    }
    return mapping.get(env_var, env_var.lower())
