# ============================================================================
# src/document_filing/config/models_config.py
# ============================================================================
"""
Text-Completion Service Settings
- Analysis service (summary, classification, checklist)
- Critic service (final arbitration)
"""

from pydantic import Field
from pydantic_settings import BaseSettings

class ModelSettings(BaseSettings):
    ANALYSIS_API_URL: str = Field(
        default="https://api.together.xyz/v1/chat/completions",
        description="Chat-completions endpoint for the analysis stages"
    )
    ANALYSIS_MODEL: str = Field(
        default="meta-llama/Llama-3.3-70B-Instruct-Turbo",
        description="Model used for summary, classification and checklist matching"
    )
    ANALYSIS_TEMPERATURE: float = Field(
        default=0.2,
        ge=0.0, le=2.0,
        description="Sampling temperature for the analysis stages"
    )
    ANALYSIS_MAX_TOKENS: int = Field(
        default=2000,
        ge=1,
        description="Max tokens for the summary stage"
    )
    CLASSIFICATION_MAX_TOKENS: int = Field(
        default=800,
        ge=1,
        description="Max tokens for the classification and checklist stages"
    )
    CRITIC_API_URL: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="Chat-completions endpoint for the critic stage"
    )
    CRITIC_MODEL: str = Field(
        default="gpt-4o",
        description="Model used for final arbitration"
    )
    CRITIC_TEMPERATURE: float = Field(
        default=0.1,
        ge=0.0, le=2.0,
        description="Sampling temperature for the critic"
    )
    CRITIC_MAX_TOKENS: int = Field(
        default=800,
        ge=1,
        description="Max tokens for the critic"
    )
    REQUEST_TIMEOUT_SECONDS: float = Field(
        default=120.0,
        gt=0.0,
        description="Per-request timeout for a single completion call"
    )

model_settings = ModelSettings()
