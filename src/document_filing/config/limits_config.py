# ============================================================================
# src/document_filing/config/limits_config.py
# ============================================================================
"""
Text Processing Limits
- Prompt content truncation per stage
- Minimal-text (likely scanned) detection
- Cache hash prefix
"""

from pydantic import Field
from pydantic_settings import BaseSettings

class TextLimitSettings(BaseSettings):
    MAX_TEXT_LENGTH: int = Field(
        default=32000,
        ge=1,
        description="Hard cap on extracted text handed to the pipeline"
    )
    MINIMAL_TEXT_THRESHOLD: int = Field(
        default=200,
        ge=0,
        description="Below this many characters the document is treated as scanned/image-based"
    )
    SUMMARY_CONTENT_LENGTH: int = Field(
        default=40000,
        ge=1,
        description="Max content characters sent to the summary stage"
    )
    CLASSIFICATION_CONTENT_LENGTH: int = Field(
        default=8000,
        ge=1,
        description="Max content characters sent to the classification stage"
    )
    CHECKLIST_CONTENT_LENGTH: int = Field(
        default=8000,
        ge=1,
        description="Max content characters sent to the checklist stage"
    )
    CACHE_HASH_PREFIX: int = Field(
        default=10000,
        ge=1,
        description="Number of leading characters included in the content hash"
    )
    BATCH_TEXT_SAMPLE: int = Field(
        default=500,
        ge=1,
        description="Characters per document contributed to a batch reference resolution"
    )

text_limit_settings = TextLimitSettings()
