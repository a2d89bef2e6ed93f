"""Pydantic configuration models for the tarot oracle."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_LLM_PROVIDERS = {"auto", "claude", "openai", "gemini"}


def _oracle_home() -> Path:
    return Path(os.environ.get("ORACLE_HOME", Path.home() / "oracle"))


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = "auto"
    model: Optional[str] = None  # None = provider's cheap-tier default
    api_key: Optional[str] = None
    max_tokens: int = 2000
    classifier_max_tokens: int = 300
    title_max_tokens: int = 20

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v not in VALID_LLM_PROVIDERS:
            raise ValueError(f"Invalid LLM provider: {v}. Must be one of {VALID_LLM_PROVIDERS}")
        return v


class PathsConfig(BaseModel):
    """File paths configuration."""

    db_path: Path = Field(default_factory=lambda: _oracle_home() / "oracle.db")
    log_file: Path = Field(default_factory=lambda: _oracle_home() / "oracle.log")

    @model_validator(mode="after")
    def expand_paths(self):
        """Expand ~ in all paths."""
        self.db_path = self.db_path.expanduser()
        self.log_file = self.log_file.expanduser()
        return self


class CacheConfig(BaseModel):
    """Anonymous session cache."""

    ttl_minutes: float = 30.0

    @field_validator("ttl_minutes")
    @classmethod
    def validate_ttl(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"ttl_minutes must be positive, got {v}")
        return v


class StreamingConfig(BaseModel):
    """Phase-2 event stream presentation."""

    section_delay_ms: int = 800
    title_wait_seconds: float = 5.0
    server_side_draw: bool = True
    cards_per_reading: int = 3


class PaywallConfig(BaseModel):
    """Call-to-action copy shown when the future is hidden."""

    anonymous_cta: str = "Para revelar tu futuro, reclama tu identidad espiritual"
    premium_cta: str = "Desbloquea tu futuro completo con un plan premium"


class RateLimitConfig(BaseModel):
    """Per-client sliding window for chat endpoints."""

    enabled: bool = True
    max_requests: int = 30
    window_seconds: int = 15 * 60


class RetryConfig(BaseModel):
    """Retry/backoff configuration for rate-limited LLM calls."""

    max_attempts: int = 3
    min_wait: float = 2.0
    llm_max_wait: float = 30.0


class LimitsConfig(BaseModel):
    """Resource limits configuration."""

    max_question_chars: int = 2000
    history_max_chars: int = 24_000
    memory_reply_chars: int = 500
    title_fallback_chars: int = 40


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class OracleConfig(BaseModel):
    """Main configuration model."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    streaming: StreamingConfig = Field(default_factory=StreamingConfig)
    paywall: PaywallConfig = Field(default_factory=PaywallConfig)
    rate_limits: RateLimitConfig = Field(default_factory=RateLimitConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def expand_env_vars(self):
        """Expand ${VAR} patterns in API keys."""
        if self.llm.api_key:
            key = self.llm.api_key
            if key.startswith("${") and key.endswith("}"):
                env_var = key[2:-1]
                self.llm.api_key = os.getenv(env_var, "")
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "OracleConfig":
        """Create config from dict, coercing string paths."""
        if "paths" in data:
            for key in ["db_path", "log_file"]:
                if key in data["paths"] and isinstance(data["paths"][key], str):
                    data["paths"][key] = Path(data["paths"][key])

        return cls.model_validate(data)
