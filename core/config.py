"""
Configuration management using Pydantic Settings
Handles environment variables and validation
"""
import json
import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Environment
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Application
    app_name: str = "redis-scripts"
    app_version: str = "0.1.0"

    # Redis
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_decode_responses: bool = Field(default=True)
    redis_socket_timeout: Optional[float] = Field(default=None, description="Socket timeout in seconds")

    # Script discovery: JSON list or os.pathsep separated directories
    script_path: str = Field(default="")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("redis_socket_timeout")
    @classmethod
    def validate_socket_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Socket timeout must be positive")
        return v

    @field_validator("script_path", mode="before")
    @classmethod
    def join_script_path(cls, v):
        if isinstance(v, (list, tuple)):
            return json.dumps([os.fspath(part) for part in v])
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def search_path(self) -> List[str]:
        """Script search roots, in precedence order"""
        value = self.script_path.strip()
        if value.startswith("["):
            try:
                paths = json.loads(value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid SCRIPT_PATH: {e}", setting="script_path")
            return [str(path) for path in paths]
        return [part for part in value.split(os.pathsep) if part]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
