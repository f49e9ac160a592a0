"""
Panelcraft Configuration

Pydantic settings for the API server, the external gateways and the
generation defaults.
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # CORS
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # Supabase (persistence, storage and auth)
    supabase_url: str = Field(default="")
    supabase_anon_key: str = Field(default="")
    supabase_service_key: str = Field(default="")
    storage_bucket: str = Field(default="comic-pages")

    # Together AI (image and text generation)
    together_api_key: str = Field(default="")
    together_base_url: str = Field(default="https://api.together.xyz/v1")
    text_model: str = Field(default="meta-llama/Llama-3.3-70B-Instruct-Turbo")
    image_temperature: float = Field(default=0.1)

    # Google Cloud Vision (OCR)
    google_vision_api_key: str = Field(default="")

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True)
    free_tier_limit: str = Field(default="1 per 7 days")
    own_key_limit: str = Field(default="30/minute")

    # Stories
    slug_max_attempts: int = Field(default=10)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
