"""
PictoCat Configuration

Application settings loaded from environment variables.
"""

import base64
import json
import os
from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # MongoDB Configuration
    # ==========================================================================
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "pictocat"

    # ==========================================================================
    # Firebase Configuration
    # ==========================================================================
    firebase_project_id: str = ""
    firebase_service_account_json: Optional[str] = None
    firebase_service_account_path: Optional[str] = None

    # Email that always resolves to the admin role
    admin_email: str = ""

    # ==========================================================================
    # Gemini Configuration
    # ==========================================================================
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    suggestion_timeout_seconds: float = 8.0

    # ==========================================================================
    # Game Result Limits
    # ==========================================================================
    max_game_coins: int = 1000
    max_game_xp: int = 1000

    # ==========================================================================
    # Sync Client
    # ==========================================================================
    sync_poll_interval_seconds: float = 30.0

    # ==========================================================================
    # Server
    # ==========================================================================
    cors_origins: str = "http://localhost:5173,http://localhost:3000"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def firebase_credentials(self) -> Optional[dict]:
        """
        Service account as a dict, from FIREBASE_SERVICE_ACCOUNT_PATH or
        FIREBASE_SERVICE_ACCOUNT_JSON (raw or base64 encoded).
        """
        if self.firebase_service_account_path and os.path.exists(self.firebase_service_account_path):
            with open(self.firebase_service_account_path, "r") as f:
                return json.load(f)

        if self.firebase_service_account_json:
            content = self.firebase_service_account_json.strip()
            if not content.startswith("{"):
                try:
                    content = base64.b64decode(content).decode("utf-8")
                except (ValueError, UnicodeDecodeError):
                    return None
            try:
                return json.loads(content)
            except json.JSONDecodeError:
                return None

        return None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
