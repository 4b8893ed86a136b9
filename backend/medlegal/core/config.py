# medlegal/core/config.py
"""
Application configuration using Pydantic Settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import json
import re
from pydantic import field_validator


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    # Application
    APP_NAME: str = "MedLegal Report Builder"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str
    AUTO_CREATE_TABLES: bool = True

    # JWT Authentication
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # Cases
    CASE_NUMBER_PREFIX: str = "MED"

    @field_validator("CASE_NUMBER_PREFIX", mode="before")
    @classmethod
    def normalize_case_prefix(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip().upper()
            # Case numbers are split on "-" and matched with LIKE
            if not re.fullmatch(r"[A-Z]+", v):
                raise ValueError("CASE_NUMBER_PREFIX must contain letters only, e.g. MED")
        return v

    # Report rendering
    REPORT_AGENCY_NAME: str = "Direct Medical Expert"
    DEFAULT_EXPERT_NAME: str = ""

    # CORS
    CORS_ORIGINS: str = '["http://localhost:5000"]'
    CORS_ORIGIN_REGEX: Optional[str] = None

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from string to list"""
        try:
            if isinstance(self.CORS_ORIGINS, str):
                return json.loads(self.CORS_ORIGINS)
            return self.CORS_ORIGINS
        except json.JSONDecodeError:
            return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


# Create settings instance
settings = Settings()
