"""
Application configuration using Pydantic Settings.
"""

from functools import lru_cache
from pydantic import Field, field_validator, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """Redis configuration."""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    url: RedisDsn = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    max_connections: int = Field(default=10, ge=1)
    decode_responses: bool = Field(default=True)


class FeatureSettings(BaseSettings):
    """Feature store configuration."""

    model_config = SettingsConfigDict(env_prefix="FEATURE_")

    backend: str = Field(
        default="redis",
        description="Feature adapter: redis, memory",
    )
    registry_key: str = Field(
        default="flipper_features",
        min_length=1,
        description="Redis set holding all registered feature keys",
    )

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        allowed = {"redis", "memory"}
        if v not in allowed:
            raise ValueError(f"backend must be one of {allowed}")
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Feature Store API")
    app_version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    reload: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")

    # Nested settings
    redis: RedisSettings = Field(default_factory=RedisSettings)
    features: FeatureSettings = Field(default_factory=FeatureSettings)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "testing"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Shorthand
settings = get_settings()
