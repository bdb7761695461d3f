# ============================================================================
# src/document_filing/core/correction_context.py
# ============================================================================
"""
Correction Retrieval

Fetches the learned-correction data the critic needs for the selected tier:
- none: nothing
- consolidated: top aggregated rules for the current type/category
- targeted: corrections for the current confusion pairs, plus a few
  consolidated rules as backup
- full: the most relevant full correction records
"""

from typing import Any, Callable, Optional

from ..classifiers.correction_tiers import extract_confusion_pairs
from .collaborators import invoke_collaborator
from .context.classification import ClassificationDecision
from .context.corrections import CorrectionContext
from .context.enums import CorrectionTier

CONSOLIDATED_LIMIT = 5
TARGETED_LIMIT = 3
TARGETED_RULES_LIMIT = 3
FULL_LIMIT = 5


async def retrieve_correction_context(
    tier: CorrectionTier,
    decision: ClassificationDecision,
    file_name: str,
    fetch_corrections: Optional[Callable[..., Any]] = None,
    fetch_consolidated_rules: Optional[Callable[..., Any]] = None,
    fetch_targeted_corrections: Optional[Callable[..., Any]] = None
) -> CorrectionContext:
    """Collect correction data for tier. Missing or failing callbacks yield empty lists."""
    context = CorrectionContext(tier=tier)

    if tier == CorrectionTier.NONE:
        return context

    if tier == CorrectionTier.CONSOLIDATED:
        context.consolidated_rules = list(await invoke_collaborator(
            fetch_consolidated_rules,
            "Consolidated rules fetch",
            default=[],
            file_type=decision.file_type,
            category=decision.category,
            limit=CONSOLIDATED_LIMIT,
        ))
        return context

    if tier == CorrectionTier.TARGETED:
        context.confusion_pairs = extract_confusion_pairs(decision)
        if context.confusion_pairs:
            context.past_corrections = list(await invoke_collaborator(
                fetch_targeted_corrections,
                "Targeted corrections fetch",
                default=[],
                confusion_pairs=context.confusion_pairs,
                file_name=file_name,
                limit=TARGETED_LIMIT,
            ))
        context.consolidated_rules = list(await invoke_collaborator(
            fetch_consolidated_rules,
            "Consolidated rules fetch",
            default=[],
            file_type=decision.file_type,
            category=None,
            limit=TARGETED_RULES_LIMIT,
        ))
        return context

    context.past_corrections = list(await invoke_collaborator(
        fetch_corrections,
        "Corrections fetch",
        default=[],
        file_type=decision.file_type,
        category=decision.category,
        file_name=file_name,
        limit=FULL_LIMIT,
    ))
    return context
