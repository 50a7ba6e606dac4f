"""Application settings using Pydantic for environment variable validation."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Engine settings with Pydantic validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env
    )

    # Environment
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    testing: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    # Redis (durable cache tier). Empty string disables the tier.
    redis_cache_url: str = Field(default="redis://localhost:6379/1")

    # Google Gemini API Configuration
    gemini_api_keys: str = Field(default="")  # Comma-separated
    gemini_api_key: str = Field(default="")
    google_api_key: str = Field(default="")
    gemini_model: str = Field(default="gemini-2.5-flash")
    ai_temperature: float = Field(default=0.2, ge=0, le=2)
    ai_max_output_tokens: int = Field(default=4000, gt=0)

    # AI request policy
    ai_request_timeout: float = Field(default=45.0, gt=0)
    ai_max_attempts: int = Field(default=3, ge=1)
    ai_retry_base_delay: float = Field(default=1.0, ge=0)
    ai_retry_max_delay: float = Field(default=10.0, ge=0)
    request_log_size: int = Field(default=1000, gt=0)

    # Circuit breaker around the AI request cycle
    circuit_fail_max: int = Field(default=10, ge=1)
    circuit_reset_timeout: int = Field(default=180, ge=1)  # 3 minutes

    # Result cache
    cache_memory_ttl: int = Field(default=300, gt=0)  # 5 minutes
    cache_redis_ttl: int = Field(default=3600, gt=0)  # 1 hour
    cache_max_entries: int = Field(default=1000, gt=0)
    cache_refresh_threshold: float = Field(default=0.8, gt=0, le=1)

    @property
    def api_key_list(self) -> List[str]:
        """Get Gemini API keys as list, in rotation order."""
        raw = self.gemini_api_keys or self.gemini_api_key or self.google_api_key
        return [key.strip() for key in raw.split(",") if key.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing."""
        return self.testing or self.environment.lower() == "testing"

    @field_validator("environment")
    @classmethod
    def environment_must_be_valid(cls, v):
        """Validate environment value."""
        valid_envs = ["development", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_valid(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def log_format_must_be_valid(cls, v):
        """Validate log format."""
        valid_formats = ["json", "text"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}")
        return v.lower()

    def display_config(self) -> None:
        """Display effective settings in a formatted table."""

        def mask_sensitive(key: str, value: str) -> str:
            """Mask sensitive values like API keys."""
            sensitive_keywords = ['password', 'secret', 'key', 'token', 'credentials']
            if any(kw in key.lower() for kw in sensitive_keywords):
                if value and len(value) > 8:
                    return f"{value[:4]}{'*' * (len(value) - 8)}{value[-4:]}"
                elif value:
                    return '*' * len(value)
            return value

        categories = {
            "Core": ["environment", "debug", "testing"],
            "Logging": ["log_level", "log_format"],
            "Redis": ["redis_cache_url"],
            "AI": [
                "gemini_api_keys", "gemini_model", "ai_temperature", "ai_max_output_tokens",
                "ai_request_timeout", "ai_max_attempts", "ai_retry_base_delay", "ai_retry_max_delay",
            ],
            "Circuit Breaker": ["circuit_fail_max", "circuit_reset_timeout"],
            "Cache": ["cache_memory_ttl", "cache_redis_ttl", "cache_max_entries", "cache_refresh_threshold"],
        }

        print("\n" + "=" * 80)
        print("RESUME ATS ENGINE CONFIGURATION")
        print("=" * 80)

        for category, keys in categories.items():
            print(f"\n{category}")
            print("-" * 40)
            for key in keys:
                if hasattr(self, key):
                    value = str(getattr(self, key))
                    masked_value = mask_sensitive(key, value)
                    # Truncate long values
                    if len(masked_value) > 50:
                        masked_value = masked_value[:47] + "..."
                    print(f"  {key:30} = {masked_value}")

        print(f"\n  {'configured api keys':30} = {len(self.api_key_list)}")
        print("\n" + "=" * 80 + "\n")


# Create global settings instance
settings = Settings()
