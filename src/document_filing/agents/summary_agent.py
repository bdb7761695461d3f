# ============================================================================
# src/document_filing/agents/summary_agent.py
# ============================================================================
"""
Summary Stage

Describes the document (entities, key terms, dates, amounts, characteristic
flags) without classifying it. Documents with almost no extractable text
are summarised from the filename alone, without a model call.
"""

from typing import Dict, Any, Optional

from ...utils.exceptions import ConfigurationGap, DocumentFilingError, MalformedResponseError
from ..config.limits_config import text_limit_settings
from ..config.models_config import model_settings
from ..core.agent_base import Agent
from ..core.context.enums import AIContext
from ..core.context.processing_context import FilingContext
from ..core.context.summary import DocumentSummary
from ..core.events import EventEmitter
from ..llm.base import BaseCompletionClient, extract_json
from ..llm.prompts import create_summary_prompt
from ..references.resolver import ReferenceResolver
from .guidance import reference_guidance


def is_minimal_text(text: str) -> bool:
    """Too little text to analyse, typically a scanned document."""
    return len((text or "").strip()) < text_limit_settings.MINIMAL_TEXT_THRESHOLD


class SummaryAgent(Agent):
    """Produces the DocumentSummary every later stage reads."""

    def __init__(
        self,
        client: Optional[BaseCompletionClient],
        config: Optional[Dict[str, Any]] = None,
        emitter: Optional[EventEmitter] = None,
        resolver: Optional[ReferenceResolver] = None
    ):
        super().__init__(config, emitter)
        self.client = client
        self.resolver = resolver

    def get_name(self) -> str:
        return "summary"

    async def execute(self, context: FilingContext) -> DocumentSummary:
        if is_minimal_text(context.text):
            self.logger.info("Minimal text detected - using filename-based summary")
            return DocumentSummary.minimal_text(context.file_name, context.text)

        if self.client is None:
            raise ConfigurationGap("No analysis service configured")

        guidance = reference_guidance(
            self.resolver,
            AIContext.SUMMARIZATION,
            text_sample=context.text[:text_limit_settings.BATCH_TEXT_SAMPLE],
            file_name=context.file_name,
        )
        prompt = create_summary_prompt(context.file_name, context.text, reference_guidance=guidance)

        response = await self.client.generate(
            prompt,
            max_tokens=self.config.get('analysis_max_tokens', model_settings.ANALYSIS_MAX_TOKENS),
            temperature=self.config.get('analysis_temperature', model_settings.ANALYSIS_TEMPERATURE),
        )

        parsed = extract_json(response.get('text', ''))
        if parsed is None:
            raise MalformedResponseError("Summary response did not contain a JSON object")

        return DocumentSummary.from_response(parsed)

    def fallback(self, context: FilingContext, error: Exception) -> DocumentSummary:
        if isinstance(error, DocumentFilingError):
            return DocumentSummary.fallback(context.file_name)
        return DocumentSummary.minimal_text(context.file_name, context.text)

    def describe(self, result: DocumentSummary) -> Dict[str, Any]:
        if result is None:
            return {}
        return {
            "confidence": result.confidence_in_analysis,
            "flags": result.characteristics.active_flags(),
            "key_terms": len(result.key_terms),
        }
