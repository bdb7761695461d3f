# ============================================================================
# src/document_filing/classifiers/correction_tiers.py
# ============================================================================
"""
Correction Tier Selection

How much past-correction history the critic sees depends on how unsure the
pipeline is:
- none          confidence > 0.85 and no alternatives
- consolidated  confidence >= 0.65, aggregated "from → to" rules only
- targeted      confidence >= 0.5, corrections for the current confusion pairs
- full          below that, full correction records

Selection and prompt rendering here are pure. Fetching lives in
core/correction_context.py.
"""

from typing import List, Optional, Sequence

from ..config.thresholds_config import threshold_settings
from ..constants.taxonomy import COMMON_CONFUSIONS
from ..core.context.classification import ClassificationDecision
from ..core.context.corrections import ConfusionPair, ConsolidatedRule, PastCorrection
from ..core.context.enums import CorrectionField, CorrectionTier

MAX_ALTERNATIVE_OPTIONS = 3
MAX_CONFUSION_OPTIONS = 4
MAX_CONSOLIDATED_RULES = 5
MAX_TARGETED_CORRECTIONS = 3


def determine_correction_tier(confidence: float, has_alternatives: bool = False) -> CorrectionTier:
    if confidence > threshold_settings.TIER_NONE and not has_alternatives:
        return CorrectionTier.NONE
    if confidence >= threshold_settings.TIER_CONSOLIDATED:
        return CorrectionTier.CONSOLIDATED
    if confidence >= threshold_settings.TIER_TARGETED:
        return CorrectionTier.TARGETED
    return CorrectionTier.FULL


def extract_confusion_pairs(decision: ClassificationDecision) -> List[ConfusionPair]:
    """
    Labels the decision is torn between.

    The decision's own alternatives come first. The static confusion table
    is only consulted when the alternatives produced no file-type pair.
    """
    pairs: List[ConfusionPair] = []

    if decision.alternative_types:
        options: List[str] = []
        for value in [decision.file_type] + [a.type for a in decision.alternative_types]:
            if value not in options:
                options.append(value)
        if len(options) > 1:
            pairs.append(ConfusionPair(
                field=CorrectionField.FILE_TYPE,
                options=options[:MAX_ALTERNATIVE_OPTIONS],
            ))

    partners = COMMON_CONFUSIONS.get(decision.file_type)
    if partners and not any(p.field == CorrectionField.FILE_TYPE for p in pairs):
        pairs.append(ConfusionPair(
            field=CorrectionField.FILE_TYPE,
            options=([decision.file_type] + list(partners))[:MAX_CONFUSION_OPTIONS],
        ))

    return pairs


def _correction_relates_to_pair(correction: PastCorrection, pair: ConfusionPair) -> bool:
    if pair.field == CorrectionField.FILE_TYPE:
        return (
            correction.ai_prediction.file_type in pair.options
            or (correction.user_correction.file_type or None) in pair.options
        )
    if pair.field == CorrectionField.CATEGORY:
        return (
            correction.ai_prediction.category in pair.options
            or (correction.user_correction.category or None) in pair.options
        )
    return False


def _type_and_category_changes(correction: PastCorrection) -> List[str]:
    changes = []
    if correction.user_correction.file_type:
        changes.append(
            f'fileType: "{correction.ai_prediction.file_type}" → "{correction.user_correction.file_type}"'
        )
    if correction.user_correction.category:
        changes.append(
            f'category: "{correction.ai_prediction.category}" → "{correction.user_correction.category}"'
        )
    return changes


def build_consolidated_rules_context(rules: Sequence[ConsolidatedRule]) -> str:
    """Top five aggregated correction rules, most frequent first."""
    if not rules:
        return ""

    top_rules = sorted(rules, key=lambda r: r.correction_count, reverse=True)[:MAX_CONSOLIDATED_RULES]
    lines = '\n'.join(
        f"• {r.from_value} → {r.to_value} ({r.correction_count}x, ~{round(r.average_confidence * 100)}% conf)"
        for r in top_rules
    )
    total = sum(r.correction_count for r in rules)

    return (
        f"\n## LEARNED PATTERNS (from {total} past corrections)\n"
        f"{lines}\n\n"
        f'⚠️ If your classification matches a "from" value above, consider the learned "to" value.\n'
    )


def build_targeted_corrections_context(
    corrections: Sequence[PastCorrection],
    pairs: Sequence[ConfusionPair]
) -> str:
    """Up to three corrections touching the labels currently in doubt."""
    if not corrections or not pairs:
        return ""

    relevant = [c for c in corrections if any(_correction_relates_to_pair(c, p) for p in pairs)]
    if not relevant:
        return ""

    top = sorted(relevant, key=lambda c: c.relevance_score, reverse=True)[:MAX_TARGETED_CORRECTIONS]
    pairs_text = ', '.join(f"{p.field.value}: {' vs '.join(p.options)}" for p in pairs)
    lines = '\n'.join(
        f"{i}. **{c.file_name}**: {', '.join(_type_and_category_changes(c))}"
        for i, c in enumerate(top, 1)
    )

    return (
        f"\n## TARGETED CORRECTIONS (for your uncertainty: {pairs_text})\n"
        "These past corrections are specifically relevant to what you're uncertain about:\n\n"
        f"{lines}\n\n"
        "⚠️ Apply these learned corrections if the current document is similar.\n"
    )


def build_full_corrections_context(corrections: Sequence[PastCorrection]) -> str:
    if not corrections:
        return ""

    blocks = []
    for i, c in enumerate(corrections, 1):
        changes = _type_and_category_changes(c)
        if c.user_correction.target_folder:
            changes.append(
                f'folder: "{c.ai_prediction.target_folder}" → "{c.user_correction.target_folder}"'
            )
        if c.user_correction.checklist_items:
            suggested = ', '.join(s.item_name for s in c.ai_prediction.suggested_checklist_items) or 'none'
            selected = ', '.join(s.item_name for s in c.user_correction.checklist_items)
            changes.append(f"checklist: [{suggested}] → [{selected}]")

        blocks.append(
            f"### Correction {i} (Relevance: {c.relevance_score * 100:.0f}%)\n"
            f"- **Why relevant:** {c.match_reason}\n"
            f"- **Similar filename:** {c.file_name}\n"
            f"- **Corrections:** {', '.join(changes)}"
        )

    return (
        "\n## LEARNING FROM PAST MISTAKES\n"
        "I have made classification errors in the past for similar documents. "
        "Here are relevant corrections I should consider:\n\n"
        + '\n\n'.join(blocks)
        + "\n\n⚠️ INSTRUCTION: If the current document is similar to any of these past mistakes, "
        "I MUST apply the learned correction. I should explicitly state in my reasoning "
        "if I am applying a learned correction.\n"
    )


def build_smart_corrections_context(
    tier: CorrectionTier,
    past_corrections: Sequence[PastCorrection] = (),
    consolidated_rules: Sequence[ConsolidatedRule] = (),
    confusion_pairs: Optional[Sequence[ConfusionPair]] = None
) -> str:
    """Correction prompt section for the selected tier."""
    if tier == CorrectionTier.NONE:
        return ""

    if tier == CorrectionTier.CONSOLIDATED:
        return build_consolidated_rules_context(consolidated_rules)

    if tier == CorrectionTier.TARGETED:
        if confusion_pairs and past_corrections:
            targeted = build_targeted_corrections_context(past_corrections, confusion_pairs)
            if targeted:
                return targeted
        return build_consolidated_rules_context(consolidated_rules)

    return build_full_corrections_context(past_corrections)
