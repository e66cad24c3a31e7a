"""
Configuration settings for the Homey API
"""
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Homey API"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = True

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Google Gemini (not validated here - the first request fails without it)
    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")
    text_model: str = "gemini-2.5-flash"
    image_model: str = "gemini-2.5-flash-image"

    # Rate limit backoff
    retry_max_retries: int = 3
    retry_base_delay: float = 2.0  # seconds, doubled after every retry
    step_image_max_retries: int = 1
    step_image_base_delay: float = 3.0

    # Pause between sequential image requests
    inspiration_image_delay: float = 2.0
    surprise_image_delay: float = 3.0

    # Temperatures
    plan_temperature: float = 0.4
    style_analysis_temperature: float = 0.4
    surprise_temperature: float = 0.7
    chat_temperature: float = 0.5

    inspiration_reference_count: int = 3

    # Uploaded images
    max_image_dimension: int = 1024
    max_image_bytes: int = 10 * 1024 * 1024  # 10MB

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


# Global settings instance
settings = Settings()
