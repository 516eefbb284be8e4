"""Configuration management for MedSim Guard
- Handles environment variables and application settings.
"""

from typing import Literal

from pydantic import ConfigDict, model_validator
from pydantic_settings import BaseSettings

LogFormat = Literal["text", "json"]

DEFAULT_DISCLAIMER = (
    "This information is for medical simulation training only. "
    "Always consult a physician for real medical advice."
)


class Settings(BaseSettings):
    """Application settings with env variable support"""

    # Application Config
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Rate Limit Config
    RATE_LIMIT_CAPACITY: int = 20  # burst size
    RATE_LIMIT_RPM: int = 10  # sustained requests per minute

    # Retry Config
    DEFAULT_MAX_RETRIES: int = 3
    RETRY_BASE_DELAY_MS: int = 1000
    RETRY_MAX_DELAY_MS: int = 60000
    RETRY_BACKOFF_FACTOR: float = 2
    # total budget for one retry sequence, unbounded when unset
    RETRY_DEADLINE_SECONDS: float | None = None

    # LLM Config
    LLM_DEFAULT_MODEL: str = "llama3.1"
    LLM_DEFAULT_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 2000
    LLM_TIMEOUT: int = 30

    # Ollama
    OLLAMA_BASE_URL: str = "http://localhost:11434"

    # Medical Config
    MEDICAL_DISCLAIMER: str = DEFAULT_DISCLAIMER

    # Development Config
    LOG_LEVEL: str = "debug"
    LOG_FORMAT: LogFormat = "text"

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    @model_validator(mode="after")
    def validate_model(self):
        """Reject limiter and retry values that would disable the guard"""
        positive = {
            "RATE_LIMIT_CAPACITY": self.RATE_LIMIT_CAPACITY,
            "RATE_LIMIT_RPM": self.RATE_LIMIT_RPM,
            "DEFAULT_MAX_RETRIES": self.DEFAULT_MAX_RETRIES,
            "RETRY_BASE_DELAY_MS": self.RETRY_BASE_DELAY_MS,
            "RETRY_MAX_DELAY_MS": self.RETRY_MAX_DELAY_MS,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"{name} must be > 0")
        if self.RETRY_BACKOFF_FACTOR < 1:
            raise ValueError("RETRY_BACKOFF_FACTOR must be >= 1")
        if self.RETRY_DEADLINE_SECONDS is not None and self.RETRY_DEADLINE_SECONDS <= 0:
            raise ValueError("RETRY_DEADLINE_SECONDS must be > 0 when set")
        return self

    @property
    def refill_rate(self) -> float:
        """Token refill rate per second derived from RATE_LIMIT_RPM"""
        return self.RATE_LIMIT_RPM / 60


# Global settings instance
settings = Settings()
