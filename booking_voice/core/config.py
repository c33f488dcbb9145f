"""
Configuration management for the voice integration service
Uses Pydantic Settings for environment variable management
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Bolna Voice Agent Configuration
    bolna_api_base_url: str = Field(default="https://api.bolna.dev")
    bolna_http_timeout: float = Field(default=30.0)
    bolna_validation_timeout: float = Field(default=5.0)
    bolna_validation_endpoints: List[str] = Field(
        default=["/agent", "/agents", "/v1/agent", "/v1/agents"]
    )
    bolna_min_api_key_length: int = Field(default=10)
    bolna_webhook_url: Optional[str] = Field(default=None)
    bolna_from_phone_number: Optional[str] = Field(default=None)

    # Credential encryption (falls back to a development key when unset)
    bolna_encryption_key: Optional[str] = Field(default=None)

    # Database Configuration
    database_type: str = Field(default="sqlite")
    sqlite_path: str = Field(default="booking_voice.db")
    postgres_url: Optional[str] = Field(default=None)

    # Background refresh of non-terminal calls
    redis_url: str = Field(default="redis://localhost:6379/0")
    call_refresh_interval_seconds: int = Field(default=60)
    call_refresh_batch_size: int = Field(default=100)

    # Application Settings
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    environment: str = Field(default="development")

    # Server Configuration
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=8000)
    api_base_url: str = Field(default="http://localhost:8000")

    # CORS Settings
    allowed_origins: str = Field(default="http://localhost:3000,http://localhost:8000")

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
