# ============================================================================
# src/document_filing/agents/classification_agent.py
# ============================================================================
"""
Classification Stage

Maps the document summary onto the caller's taxonomy: file type, category
and folder, with a confidence and alternative types. Model output is run
through the canonical matching cascade so every value is a member of the
caller's enumerations.

When the service fails, the summary's characteristic flags pick a coarse
classification at a fixed low confidence.
"""

from typing import Dict, Any, List, Optional, Tuple

from ...utils.exceptions import ConfigurationGap, DocumentFilingError, MalformedResponseError
from ..classifiers.canonical_matching import (
    find_best_category_match,
    find_best_type_match,
    validate_folder,
)
from ..config.models_config import model_settings
from ..config.thresholds_config import threshold_settings
from ..constants.taxonomy import MISCELLANEOUS_FOLDER, OTHER
from ..core.agent_base import Agent
from ..core.context.classification import AlternativeType, ClassificationDecision, FolderInfo
from ..core.context.enums import AIContext
from ..core.context.processing_context import FilingContext
from ..core.context.summary import DocumentSummary, DocumentCharacteristics
from ..core.events import EventEmitter
from ..llm.base import BaseCompletionClient, extract_json
from ..llm.prompts import create_classification_prompt
from ..references.resolver import ReferenceResolver
from .guidance import reference_guidance, summary_signals

DEFAULT_CONFIDENCE = 0.7
DEFAULT_REASONING = "Classification based on document analysis"
FALLBACK_REASONING = "Fallback classification based on document characteristics"
FAILED_REASONING = "Classification failed - using fallback"
FAILED_CONFIDENCE = 0.3

# Checked in order; the first set flag wins
FLAG_FALLBACKS: List[Tuple[str, str, str, str]] = [
    ("is_identity", "ID Document", "KYC", "kyc"),
    ("is_financial", "Financial Document", "Financial Documents", "operational_model"),
    ("is_legal", "Legal Document", "Legal Documents", "background"),
    ("has_multiple_projects", "Track Record", "KYC", "kyc"),
    ("is_design", "Design Document", "Plans", "background"),
    ("is_report", "Report", "Professional Reports", "credit_submission"),
]


def _confidence(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return max(0.0, min(1.0, float(value)))


def fallback_classification(
    characteristics: DocumentCharacteristics,
    folders: List[FolderInfo]
) -> ClassificationDecision:
    """Coarse classification from the summary's characteristic flags alone."""
    file_type, category, folder = OTHER, OTHER, MISCELLANEOUS_FOLDER
    for flag, flag_type, flag_category, flag_folder in FLAG_FALLBACKS:
        if getattr(characteristics, flag):
            file_type, category, folder = flag_type, flag_category, flag_folder
            break

    if folders and not any(f.folder_key == folder for f in folders):
        misc = next((f for f in folders if f.folder_key == MISCELLANEOUS_FOLDER), folders[0])
        folder = misc.folder_key

    return ClassificationDecision(
        file_type=file_type,
        category=category,
        suggested_folder=folder,
        confidence=threshold_settings.FALLBACK_CONFIDENCE,
        reasoning=FALLBACK_REASONING,
    )


def parse_alternatives(value: Any) -> List[AlternativeType]:
    if not isinstance(value, list):
        return []
    alternatives = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        alt_type = entry.get("type")
        if not isinstance(alt_type, str) or not alt_type.strip():
            continue
        alternatives.append(AlternativeType(
            type=alt_type.strip(),
            confidence=_confidence(entry.get("confidence"), 0.0),
            reason=str(entry.get("reason") or ""),
        ))
    return alternatives


class ClassificationAgent(Agent):
    """Turns a DocumentSummary into a ClassificationDecision."""

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
        return "classification"

    async def execute(self, context: FilingContext) -> ClassificationDecision:
        if self.client is None:
            raise ConfigurationGap("No analysis service configured")

        summary = context.summary or DocumentSummary.fallback(context.file_name)
        taxonomy = context.taxonomy
        hint = context.filename_hint

        guidance = reference_guidance(
            self.resolver,
            AIContext.CLASSIFICATION,
            signals=summary_signals(summary),
            document_type=hint.file_type if hint else None,
            category=hint.category if hint else None,
            text_sample=summary.detailed_summary,
            file_name=context.file_name,
        )
        prompt = create_classification_prompt(
            summary,
            context.file_name,
            taxonomy.file_types,
            taxonomy.categories,
            taxonomy.folders,
            definitions=taxonomy.active_definitions,
            filename_hint=hint,
            reference_guidance=guidance,
        )

        response = await self.client.generate(
            prompt,
            max_tokens=model_settings.CLASSIFICATION_MAX_TOKENS,
            temperature=self.config.get('analysis_temperature', model_settings.ANALYSIS_TEMPERATURE),
        )

        parsed = extract_json(response.get('text', ''))
        if parsed is None:
            raise MalformedResponseError("Classification response did not contain a JSON object")

        return self.normalize(parsed, summary, context)

    def normalize(
        self,
        parsed: Dict[str, Any],
        summary: DocumentSummary,
        context: FilingContext
    ) -> ClassificationDecision:
        """Default missing fields and resolve every label into the taxonomy."""
        taxonomy = context.taxonomy
        search_text = summary.detailed_summary

        file_type, _ = find_best_type_match(
            str(parsed.get("fileType") or OTHER),
            search_text,
            taxonomy.file_types,
            taxonomy.active_definitions,
        )
        category = find_best_category_match(
            str(parsed.get("category") or OTHER),
            search_text,
            taxonomy.categories,
        )
        folder, _ = validate_folder(str(parsed.get("suggestedFolder") or ""), category, taxonomy.folders)

        return ClassificationDecision(
            file_type=file_type,
            category=category,
            suggested_folder=folder,
            confidence=_confidence(parsed.get("confidence"), DEFAULT_CONFIDENCE),
            reasoning=str(parsed.get("reasoning") or DEFAULT_REASONING),
            alternative_types=parse_alternatives(parsed.get("alternativeTypes")),
        )

    def fallback(self, context: FilingContext, error: Exception) -> ClassificationDecision:
        if not isinstance(error, DocumentFilingError):
            return ClassificationDecision(
                file_type=OTHER,
                category=OTHER,
                suggested_folder=MISCELLANEOUS_FOLDER,
                confidence=FAILED_CONFIDENCE,
                reasoning=FAILED_REASONING,
            )
        summary = context.summary or DocumentSummary.fallback(context.file_name)
        return fallback_classification(summary.characteristics, context.taxonomy.folders)

    def describe(self, result: ClassificationDecision) -> Dict[str, Any]:
        if result is None:
            return {}
        return {
            "file_type": result.file_type,
            "confidence": result.confidence,
            "alternatives": len(result.alternative_types),
        }
