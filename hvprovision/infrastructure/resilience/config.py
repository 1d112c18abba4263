"""Retry configuration."""
from pydantic import BaseModel, Field, model_validator


class RetryConfig(BaseModel):
    """Exponential backoff settings for transient remote failures."""

    max_attempts: int = Field(3, ge=1, le=10, description="Attempts including the first call")
    base_delay: float = Field(1.0, ge=0, description="Delay before the first retry in seconds")
    max_delay: float = Field(30.0, ge=0, description="Upper bound for a single delay")
    backoff_multiplier: float = Field(2.0, ge=1.0, description="Growth factor between delays")

    @model_validator(mode="after")
    def validate_delays(self) -> "RetryConfig":
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must not be smaller than base_delay")
        return self
