# ============================================================================
# src/document_filing/agents/critic_agent.py
# ============================================================================
"""
Critic Stage

A second, stronger model reviews every signal gathered so far (summary,
initial decision with alternatives, filename hint, checklist suggestions,
learned corrections) and makes the final call.

The critic only runs for uncertain decisions and only when its credential
is configured. Any failure leaves the earlier decision in place.
"""

from typing import Dict, Any, List, Optional, Sequence

from ...utils.exceptions import ConfigurationGap, MalformedResponseError
from ..classifiers.canonical_matching import find_best_category_match, find_best_type_match
from ..classifiers.correction_tiers import build_smart_corrections_context
from ..config.models_config import model_settings
from ..config.thresholds_config import threshold_settings
from ..constants.taxonomy import MISCELLANEOUS_FOLDER, OTHER
from ..core.agent_base import Agent
from ..core.context.checklist import ChecklistMatch
from ..core.context.classification import (
    ClassificationDecision,
    CorrectionInfluence,
    CriticDecision,
    FilenameTypeHint,
    FolderInfo,
)
from ..core.context.processing_context import FilingContext
from ..core.context.summary import DocumentSummary
from ..core.events import EventEmitter
from ..llm.base import BaseCompletionClient, extract_json
from ..llm.prompts import create_critic_prompt
from .checklist_agent import parse_item_matches

DEFAULT_CONFIDENCE = 0.85
DEFAULT_REASONING = "Critic agent review"
DEFAULT_MATCH_REASONING = "Matched by critic agent"

UNCONFIRMED_DISCOUNT = 0.8
UNCONFIRMED_CAP = 0.6
UNCONFIRMED_SUFFIX = " (not confirmed by critic)"

REQUIRED_FIELDS = ("fileType", "category", "suggestedFolder")


def should_run_critic(
    decision: ClassificationDecision,
    filename_hint: Optional[FilenameTypeHint] = None
) -> bool:
    """Uncertain decisions: "Other", low confidence, or at odds with the filename."""
    return (
        decision.file_type == OTHER
        or decision.category == OTHER
        or decision.confidence < threshold_settings.CRITIC_TRIGGER
        or (filename_hint is not None and decision.file_type != filename_hint.file_type)
    )


def resolve_critic_folder(suggested: str, folders: Sequence[FolderInfo]) -> str:
    """Exact folder key, then partial key match, else "miscellaneous"."""
    if any(f.folder_key == suggested for f in folders):
        return suggested
    suggested_lower = suggested.lower()
    for folder in folders:
        key = folder.folder_key.lower()
        if key in suggested_lower or suggested_lower in key:
            return folder.folder_key
    return MISCELLANEOUS_FOLDER


def parse_correction_influence(value: Any) -> Optional[CorrectionInfluence]:
    if not isinstance(value, dict):
        return None
    applied = value.get("appliedCorrections")
    return CorrectionInfluence(
        applied_corrections=[str(a) for a in applied] if isinstance(applied, list) else [],
        reasoning=str(value.get("reasoning") or "No correction influence data"),
    )


def merge_critic_matches(
    critic_matches: Sequence[ChecklistMatch],
    existing: Sequence[ChecklistMatch]
) -> List[ChecklistMatch]:
    """
    Critic matches replace earlier matches for the same item. Earlier
    matches the critic did not confirm are kept at a discount.
    """
    merged = list(critic_matches)
    confirmed = {m.item_id for m in critic_matches}
    for match in existing:
        if match.item_id in confirmed:
            continue
        merged.append(ChecklistMatch(
            item_id=match.item_id,
            confidence=min(match.confidence * UNCONFIRMED_DISCOUNT, UNCONFIRMED_CAP),
            reasoning=(match.reasoning or "") + UNCONFIRMED_SUFFIX,
            item_name=match.item_name,
            category=match.category,
        ))

    merged = [m for m in merged if m.confidence >= threshold_settings.CHECKLIST_MIN_CONFIDENCE]
    merged.sort(key=lambda m: m.confidence, reverse=True)
    return merged


class CriticAgent(Agent):
    """Final arbitration over the classification decision."""

    def __init__(
        self,
        client: Optional[BaseCompletionClient],
        config: Optional[Dict[str, Any]] = None,
        emitter: Optional[EventEmitter] = None
    ):
        super().__init__(config, emitter)
        self.client = client

    def get_name(self) -> str:
        return "critic"

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def corrections_context(self, context: FilingContext) -> str:
        retrieved = context.correction_context
        if retrieved is None:
            return ""
        return build_smart_corrections_context(
            retrieved.tier,
            past_corrections=retrieved.past_corrections,
            consolidated_rules=retrieved.consolidated_rules,
            confusion_pairs=retrieved.confusion_pairs,
        )

    async def execute(self, context: FilingContext) -> CriticDecision:
        if self.client is None:
            raise ConfigurationGap("No critic service configured")
        if context.decision is None:
            raise MalformedResponseError("No classification decision to review")

        summary = context.summary or DocumentSummary.fallback(context.file_name)
        taxonomy = context.taxonomy

        prompt = create_critic_prompt(
            context.file_name,
            summary,
            context.decision,
            taxonomy.file_types,
            taxonomy.folders,
            context.checklist_items,
            checklist_matches=context.checklist_matches,
            filename_hint=context.filename_hint,
            corrections_context=self.corrections_context(context),
            classification_reasoning=context.decision.reasoning or None,
        )

        response = await self.client.generate(
            prompt,
            max_tokens=self.config.get('critic_max_tokens', model_settings.CRITIC_MAX_TOKENS),
            temperature=self.config.get('critic_temperature', model_settings.CRITIC_TEMPERATURE),
        )

        parsed = extract_json(response.get('text', ''))
        if parsed is None:
            raise MalformedResponseError("Critic response did not contain a JSON object")

        return self.normalize(parsed, summary, context)

    def normalize(
        self,
        parsed: Dict[str, Any],
        summary: DocumentSummary,
        context: FilingContext
    ) -> CriticDecision:
        missing = [name for name in REQUIRED_FIELDS if not parsed.get(name)]
        if missing:
            raise MalformedResponseError(f"Critic response missing {', '.join(missing)}")

        taxonomy = context.taxonomy
        file_type, _ = find_best_type_match(
            str(parsed["fileType"]),
            summary.detailed_summary,
            taxonomy.file_types,
            taxonomy.active_definitions,
        )
        category = find_best_category_match(
            str(parsed["category"]),
            summary.detailed_summary,
            taxonomy.categories,
        )

        confidence = parsed.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            confidence = DEFAULT_CONFIDENCE

        return CriticDecision(
            file_type=file_type,
            category=category,
            suggested_folder=resolve_critic_folder(str(parsed["suggestedFolder"]), taxonomy.folders),
            confidence=max(0.0, min(1.0, float(confidence))),
            reasoning=str(parsed.get("reasoning") or DEFAULT_REASONING),
            checklist_matches=parse_item_matches(
                parsed.get("checklistMatches"),
                context.checklist_items,
                DEFAULT_MATCH_REASONING,
            ),
            correction_influence=parse_correction_influence(parsed.get("correctionInfluence")),
        )

    def describe(self, result: Optional[CriticDecision]) -> Dict[str, Any]:
        if result is None:
            return {}
        return {
            "file_type": result.file_type,
            "confidence": result.confidence,
            "checklist_matches": len(result.checklist_matches),
        }
