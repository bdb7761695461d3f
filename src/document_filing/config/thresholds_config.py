# ============================================================================
# src/document_filing/config/thresholds_config.py
# ============================================================================
"""
Confidence Thresholds
- Confidence bands (high / medium / low)
- Critic gate and cache eligibility
- Deterministic verifier override rules
- Checklist match floors
- Correction tier boundaries
"""

from pydantic import Field
from pydantic_settings import BaseSettings

class ThresholdSettings(BaseSettings):
    HIGH_CONFIDENCE: float = Field(
        default=0.85,
        ge=0.0, le=1.0,
        description="At or above this confidence no review is required and verification is skipped"
    )
    MEDIUM_CONFIDENCE: float = Field(
        default=0.65,
        ge=0.0, le=1.0,
        description="At or above this confidence review is recommended; below it review is required"
    )
    CRITIC_TRIGGER: float = Field(
        default=0.80,
        ge=0.0, le=1.0,
        description="Below this confidence the critic stage is run"
    )
    CACHE_SAVE: float = Field(
        default=0.70,
        ge=0.0, le=1.0,
        description="Minimum final confidence for a classification to be cached"
    )
    CACHED_REVIEW_THRESHOLD: float = Field(
        default=0.90,
        ge=0.0, le=1.0,
        description="Cached results below this confidence are still flagged for review"
    )
    VERIFIER_SIGNIFICANCE_FLOOR: float = Field(
        default=0.40,
        ge=0.0, le=1.0,
        description="Top keyword score below this is treated as no signal and the upstream decision is accepted"
    )
    VERIFIER_OVERRIDE_MARGIN: float = Field(
        default=0.25,
        ge=0.0, le=1.0,
        description="Score lead the top keyword match needs over the upstream type before it overrides"
    )
    VERIFIER_CRITIC_MARGIN: float = Field(
        default=0.15,
        ge=0.0, le=1.0,
        description="Top two keyword scores closer than this mark the document as ambiguous"
    )
    CHECKLIST_MIN_CONFIDENCE: float = Field(
        default=0.50,
        ge=0.0, le=1.0,
        description="Checklist matches below this confidence are dropped"
    )
    FILENAME_FALLBACK_MIN_SCORE: float = Field(
        default=0.60,
        ge=0.0, le=1.0,
        description="Filename match score needed to use a filename match as a checklist suggestion"
    )
    FALLBACK_CONFIDENCE: float = Field(
        default=0.40,
        ge=0.0, le=1.0,
        description="Confidence assigned to the flag-based fallback classification"
    )
    TIER_NONE: float = Field(
        default=0.85,
        ge=0.0, le=1.0,
        description="Above this confidence (with no alternatives) no correction context is retrieved"
    )
    TIER_CONSOLIDATED: float = Field(
        default=0.65,
        ge=0.0, le=1.0,
        description="At or above this confidence only consolidated correction rules are retrieved"
    )
    TIER_TARGETED: float = Field(
        default=0.50,
        ge=0.0, le=1.0,
        description="At or above this confidence corrections targeted at the confusion pairs are retrieved"
    )

threshold_settings = ThresholdSettings()
