# ============================================================================
# src/document_filing/agents/guidance.py
# ============================================================================
"""Reference-library guidance shared by the model-backed stages."""

from typing import Optional, Sequence

from ..core.context.enums import AIContext
from ..core.context.summary import DocumentSummary
from ..references.formatter import format_for_prompt
from ..references.resolver import ReferenceResolver

MAX_PROMPT_REFERENCES = 5


def summary_signals(summary: Optional[DocumentSummary]) -> list:
    """Resolver signals derived from the summary's characteristic flags."""
    if summary is None:
        return []
    return summary.characteristics.active_flags()


def reference_guidance(
    resolver: Optional[ReferenceResolver],
    ai_context: AIContext,
    signals: Sequence[str] = (),
    document_type: Optional[str] = None,
    category: Optional[str] = None,
    text_sample: Optional[str] = None,
    file_name: Optional[str] = None,
    max_results: int = MAX_PROMPT_REFERENCES
) -> str:
    """Formatted reference section for a prompt, "" without a resolver."""
    if resolver is None:
        return ""
    result = resolver.resolve(
        ai_context,
        signals=signals,
        document_type=document_type,
        category=category,
        text_sample=text_sample,
        file_name=file_name,
        max_results=max_results,
    )
    return format_for_prompt(result.references, ai_context)
