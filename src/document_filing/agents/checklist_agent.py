# ============================================================================
# src/document_filing/agents/checklist_agent.py
# ============================================================================
"""
Checklist Stage

Suggests which open checklist requirements the document fulfils. Filename
matches are passed to the model as hints, and become the suggestions
themselves when the model is unavailable.
"""

from typing import Dict, Any, List, Optional, Sequence

from ...utils.exceptions import ConfigurationGap, MalformedResponseError
from ..config.models_config import model_settings
from ..config.thresholds_config import threshold_settings
from ..core.agent_base import Agent
from ..core.context.checklist import ChecklistItem, ChecklistMatch, FilenameMatchResult
from ..core.context.enums import AIContext
from ..core.context.processing_context import FilingContext
from ..core.events import EventEmitter
from ..llm.base import BaseCompletionClient, extract_json_array
from ..llm.prompts import create_checklist_prompt
from ..references.resolver import ReferenceResolver
from .guidance import reference_guidance, summary_signals

DEFAULT_REASONING = "Matched by checklist agent"


def build_match(
    item_id: str,
    confidence: float,
    reasoning: str,
    items: Sequence[ChecklistItem]
) -> ChecklistMatch:
    """ChecklistMatch with the item's name and category filled in from items."""
    item = next((i for i in items if i.id == item_id), None)
    return ChecklistMatch(
        item_id=item_id,
        confidence=confidence,
        reasoning=reasoning,
        item_name=item.name if item else "Unknown",
        category=item.category if item else "Unknown",
    )


def parse_item_matches(
    entries: Any,
    items: Sequence[ChecklistItem],
    default_reasoning: str
) -> List[ChecklistMatch]:
    """
    Keep entries naming one of items with a numeric confidence.

    Confidences are clamped to [0, 1]. Used for both the checklist and the
    critic responses.
    """
    if not isinstance(entries, list):
        return []

    known_ids = {item.id for item in items}
    matches = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        item_id = entry.get("itemId")
        confidence = entry.get("confidence")
        if not item_id or item_id not in known_ids:
            continue
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            continue
        matches.append(build_match(
            item_id,
            max(0.0, min(1.0, float(confidence))),
            str(entry.get("reasoning") or default_reasoning),
            items,
        ))
    return matches


def matches_from_filename(
    filename_matches: Sequence[FilenameMatchResult],
    items: Sequence[ChecklistItem]
) -> List[ChecklistMatch]:
    """Filename matches strong enough to stand in for the model's suggestions."""
    return [
        build_match(m.item_id, m.score, m.reason, items)
        for m in filename_matches
        if m.score >= threshold_settings.FILENAME_FALLBACK_MIN_SCORE
    ]


def merge_checklist_matches(
    existing: Sequence[ChecklistMatch],
    new: Sequence[ChecklistMatch],
    min_confidence: Optional[float] = None
) -> List[ChecklistMatch]:
    """
    Merge two suggestion lists.

    Per item id the higher confidence wins (ties keep the existing match),
    matches below min_confidence are dropped and the result is sorted by
    confidence, highest first.
    """
    floor = threshold_settings.CHECKLIST_MIN_CONFIDENCE if min_confidence is None else min_confidence

    merged: Dict[str, ChecklistMatch] = {m.item_id: m for m in existing}
    for match in new:
        current = merged.get(match.item_id)
        if current is None or match.confidence > current.confidence:
            merged[match.item_id] = match

    result = [m for m in merged.values() if m.confidence >= floor]
    result.sort(key=lambda m: m.confidence, reverse=True)
    return result


class ChecklistAgent(Agent):

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
        return "checklist"

    @staticmethod
    def eligible_items(context: FilingContext) -> List[ChecklistItem]:
        return [item for item in context.checklist_items if item.is_open]

    async def execute(self, context: FilingContext) -> List[ChecklistMatch]:
        eligible = self.eligible_items(context)
        if not eligible:
            return []

        if self.client is None:
            raise ConfigurationGap("No analysis service configured")

        decision = context.decision
        file_type = decision.file_type if decision else "Unknown"
        category = decision.category if decision else "Unknown"

        guidance = reference_guidance(
            self.resolver,
            AIContext.CHECKLIST,
            signals=summary_signals(context.summary),
            document_type=file_type,
            category=category,
            file_name=context.file_name,
        )
        prompt = create_checklist_prompt(
            context.text,
            context.file_name,
            file_type,
            category,
            eligible,
            filename_matches=context.filename_matches,
            reference_guidance=guidance,
        )

        response = await self.client.generate(
            prompt,
            max_tokens=model_settings.CLASSIFICATION_MAX_TOKENS,
            temperature=self.config.get('analysis_temperature', model_settings.ANALYSIS_TEMPERATURE),
        )

        parsed = extract_json_array(response.get('text', ''))
        if parsed is None:
            raise MalformedResponseError("Checklist response did not contain a JSON array")

        return parse_item_matches(parsed, eligible, DEFAULT_REASONING)

    def fallback(self, context: FilingContext, error: Exception) -> List[ChecklistMatch]:
        return matches_from_filename(context.filename_matches, context.checklist_items)

    def describe(self, result: List[ChecklistMatch]) -> Dict[str, Any]:
        return {"matches": len(result or [])}
