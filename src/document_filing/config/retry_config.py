# ============================================================================
# src/document_filing/config/retry_config.py
# ============================================================================
"""
Retry Policy Settings for external completion calls
"""

from pydantic import Field
from pydantic_settings import BaseSettings

class RetrySettings(BaseSettings):
    MAX_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        description="Total attempts per completion call, including the first"
    )
    INITIAL_DELAY_SECONDS: float = Field(
        default=1.0,
        ge=0.0,
        description="Delay before the first retry"
    )
    MAX_DELAY_SECONDS: float = Field(
        default=10.0,
        ge=0.0,
        description="Upper bound for any single backoff delay"
    )
    BACKOFF_MULTIPLIER: float = Field(
        default=2.0,
        ge=1.0,
        description="Multiplier applied to the delay after each failed attempt"
    )

retry_settings = RetrySettings()
