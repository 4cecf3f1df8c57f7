"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # Fund backend
    fund_api_base_url: str = "http://localhost:3002/api"
    fund_api_health_url: str = "http://localhost:3002/health"
    
    # Pagination
    default_page_size: int = 500
    max_page_size: int = 15000
    
    # Request policy
    request_timeout_seconds: float = 60.0
    retry_attempts: int = 3
    retry_delay_seconds: float = 1.0
    
    # Aggregation circuit breaker (100 pages x 15000 = 1.5M funds)
    max_aggregation_pages: int = 100
    
    # API Settings
    log_level: str = "INFO"
    cors_origins: list[str] = [
        "http://localhost:3000",  # Next.js dev server
        "http://127.0.0.1:3000",
    ]
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
