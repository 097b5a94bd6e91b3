from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the diet tracker backend and client."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        data_root_default = base_dir.parent / "data"

        self.data_root: Path = Path(
            os.environ.get("DIET_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("DIET_DB_PATH") or (self.data_root / "diettracker.db")
        ).expanduser()
        # In production you MUST set DIET_JWT_SECRET; the fallback only exists for local demos.
        self.jwt_secret: str = os.environ.get("DIET_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("DIET_TOKEN_TTL_DAYS") or "7")

        # ---- LLM provider (OpenAI-compatible completions API) ----
        self.groq_api_key: str | None = os.environ.get("GROQ_API_KEY") or None
        self.groq_base_url: str = os.environ.get(
            "GROQ_BASE_URL", "https://api.groq.com/openai/v1"
        )
        self.groq_model: str = os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile")
        self.groq_timeout: float = float(os.environ.get("GROQ_TIMEOUT", "30"))
        self.food_search_temperature: float = float(
            os.environ.get("DIET_FOOD_SEARCH_TEMPERATURE", "0.3")
        )
        self.food_search_max_tokens: int = int(
            os.environ.get("DIET_FOOD_SEARCH_MAX_TOKENS", "2000")
        )

        # ---- Rate limiting ----
        self.rate_limit_backend: str = (
            os.environ.get("DIET_RATE_LIMIT_BACKEND") or "sqlite"
        ).strip().lower()
        self.rate_limit_window_sec: float = float(
            os.environ.get("DIET_RATE_LIMIT_WINDOW_SEC", "60")
        )
        self.chat_rate_limit: int = int(os.environ.get("DIET_CHAT_RATE_LIMIT", "100"))
        self.food_search_rate_limit: int = int(
            os.environ.get("DIET_FOOD_SEARCH_RATE_LIMIT", "100")
        )

        self.log_level: str = os.environ.get("DIET_LOG_LEVEL", "INFO")

        # ---- Client (CLI) ----
        self.api_base_url: str = os.environ.get("DIET_API_BASE_URL", "http://127.0.0.1:8000")
        self.api_token: str | None = os.environ.get("DIET_API_TOKEN") or None

        cors = os.environ.get("DIET_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
