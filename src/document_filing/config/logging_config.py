# ============================================================================
# src/document_filing/config/logging_config.py
# ============================================================================
"""
Log Output & Event Metrics
- LOG_LEVEL / LOG_JSON: defaults for configure_logging()
- ENABLE_METRICS: whether the default event emitter also feeds the
  process-wide metrics collector
"""

from pydantic import Field
from pydantic_settings import BaseSettings

class LoggingSettings(BaseSettings):
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level installed by configure_logging()"
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Write records as JSON lines (pipeline events keep their fields)"
    )
    ENABLE_METRICS: bool = Field(
        default=True,
        description="Count stage outcomes, confidence bands and cache hits from pipeline events"
    )

logging_settings = LoggingSettings()
