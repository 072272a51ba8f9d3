from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_name: str = "Zeus Academia Authorization"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = ""  # Loaded from environment, validated in model_validator
    database_echo: bool = False

    # Security
    secret_key: str = ""  # Loaded from environment, validated in model_validator
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 8 hours

    # CORS - comma-separated list of allowed origins
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Timeouts
    request_timeout_seconds: float = 30.0
    authz_query_timeout_seconds: float = 5.0  # Authority checks fail closed past this

    @model_validator(mode="after")
    def validate_required_config(self) -> "Settings":
        """Validate required configuration"""
        if not self.database_url:
            raise ValueError("DATABASE_URL is required. Set in environment or .env file.")
        if not self.secret_key:
            raise ValueError("SECRET_KEY is required. Generate with: openssl rand -hex 32")
        if self.authz_query_timeout_seconds <= 0:
            raise ValueError("authz_query_timeout_seconds must be positive")
        return self

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="allow", case_sensitive=False
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
