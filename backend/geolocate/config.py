"""
Configuration settings for the Geolocate API
"""

import os
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    app_name: str = "Geolocate API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4
    reload: bool = False

    # CORS
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:5173",
            "http://localhost:3000",
        ]
    )

    # AI provider
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    analysis_model: str = "gpt-4o"
    analysis_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    provider_max_retries: int = Field(default=2, ge=0)

    # Object storage
    storage_bucket: str = "image-uploads"
    google_cloud_project: Optional[str] = None

    # Database
    database_url: str = "sqlite+aiosqlite:///./geolocate.db"
    database_echo: bool = False
    database_auto_create: bool = True

    # Image upload
    max_image_size_mb: int = Field(default=50, gt=0)

    # History
    history_default_limit: int = Field(default=50, ge=1)
    history_max_limit: int = Field(default=200, ge=1)

    # Logging
    log_level: str = "info"
    log_format: str = "json"
    log_file: Optional[str] = None

    # Monitoring
    enable_monitoring: bool = True

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @property
    def max_image_size_bytes(self) -> int:
        """Convert max image size from MiB to bytes"""
        return self.max_image_size_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from string if needed"""
        if isinstance(self.cors_origins, str):
            return [origin.strip() for origin in self.cors_origins.split(",")]
        return self.cors_origins


# Environment-specific configurations
class DevelopmentConfig(Settings):
    """Development environment configuration"""
    debug: bool = True
    log_level: str = "debug"
    log_format: str = "text"
    reload: bool = True


class ProductionConfig(Settings):
    """Production environment configuration"""
    debug: bool = False
    log_level: str = "info"
    reload: bool = False
    workers: int = 8


class TestingConfig(Settings):
    """Testing environment configuration"""
    debug: bool = True
    log_level: str = "debug"
    log_format: str = "text"
    enable_monitoring: bool = False
    database_url: str = "sqlite+aiosqlite:///./geolocate-test.db"


def get_config_by_environment(env: str) -> Settings:
    """Get configuration based on environment"""
    configs = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig,
    }

    config_class = configs.get(env.lower(), Settings)
    return config_class()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance for the current ENVIRONMENT"""
    return get_config_by_environment(os.getenv("ENVIRONMENT", "development"))


# Global settings instance
settings = get_settings()
