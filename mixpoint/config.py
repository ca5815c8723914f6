"""
Configuration management for mixpoint
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # Analysis
    energy_window_seconds: float = 0.5
    min_bpm: float = 80.0
    max_bpm: float = 180.0

    # Decoding
    target_peak: float = 0.99
    target_sample_rate: Optional[int] = None

    class Config:
        env_prefix = "MIXPOINT_"
        env_file = ".env"
        extra = "ignore"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
