"""Application configuration management using Pydantic Settings."""

from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application Environment
    app_env: str = Field(default="development", alias="APP_ENV")

    # Flask Configuration
    secret_key: str = Field(..., alias="SECRET_KEY")

    # Logging Configuration
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Projection Defaults
    default_horizon_age: float = Field(default=100.0, alias="DEFAULT_HORIZON_AGE")
    monte_carlo_default_paths: int = Field(
        default=500, alias="MONTE_CARLO_DEFAULT_PATHS"
    )
    monte_carlo_max_paths: int = Field(default=5000, alias="MONTE_CARLO_MAX_PATHS")

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v):
        """Ensure SECRET_KEY is provided and not a placeholder."""
        if not v or v == "your-secret-key-here-change-in-production":
            raise ValueError("SECRET_KEY must be set to a secure value")
        return v

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v):
        """Validate application environment."""
        allowed_envs = {"development", "testing", "production"}
        if v not in allowed_envs:
            raise ValueError(f"APP_ENV must be one of {allowed_envs}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator("default_horizon_age")
    @classmethod
    def validate_horizon_age(cls, v):
        """Validate the default horizon age."""
        if not 0 < v <= 120:
            raise ValueError("DEFAULT_HORIZON_AGE must be between 0 and 120")
        return v

    @field_validator("monte_carlo_default_paths", "monte_carlo_max_paths")
    @classmethod
    def validate_path_count(cls, v):
        """Path counts must be positive."""
        if v <= 0:
            raise ValueError("Monte Carlo path counts must be positive")
        return v

    @model_validator(mode="after")
    def validate_path_bounds(self) -> "Settings":
        if self.monte_carlo_default_paths > self.monte_carlo_max_paths:
            raise ValueError(
                "MONTE_CARLO_DEFAULT_PATHS cannot exceed MONTE_CARLO_MAX_PATHS"
            )
        return self


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Get application settings instance."""
    if env_file is not None:
        return Settings(_env_file=env_file)
    return Settings()


_settings: Optional[Settings] = None


def get_global_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings


def reset_global_settings() -> None:
    """Reset global settings instance (useful for testing)."""
    global _settings
    _settings = None
