# ============================================================================
# src/document_filing/references/resolver.py
# ============================================================================
"""
Reference Resolver

Ranks registry entries for one document (or a batch) by additive evidence:

    +20        document type equals the reference's file type
    +15 / -15  first matching filename pattern / exclude pattern
    +8         category match
    +5 x w     context tag equal to the requested context
    +4 x w     signal tag present in signals
    +3 x w     domain tag present in signals
    +20 x w    type tag equal to the slugged document type
    +8 x w     trigger tag whose '+'-joined parts are all in signals
    +1         per keyword found in the text sample
    +3 x p     per decision rule sharing a signal (x2 for "require")

Entries below max(8, 30% of the top score) are dropped. When nothing
scores above zero, one entry per category is returned instead.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging
import math
import re

from ..config.limits_config import text_limit_settings
from ..core.context.enums import AIContext, RuleAction, TagNamespace
from .models import DocumentReference
from .registry import ReferenceRegistry, get_registry

logger = logging.getLogger(__name__)

SCORE_DIRECT_TYPE_MATCH = 20
SCORE_FILENAME_PATTERN = 15
SCORE_CATEGORY_MATCH = 8
SCORE_CONTEXT_TAG = 5
SCORE_SIGNAL_TAG = 4
SCORE_DOMAIN_TAG = 3
SCORE_TRIGGER_TAG = SCORE_SIGNAL_TAG * 2
SCORE_KEYWORD = 1
SCORE_DECISION_RULE_BASE = 3

MIN_RELEVANCE_SCORE = 8
RELEVANCE_RATIO = 0.3
DEFAULT_MAX_RESULTS = 12


@dataclass
class ResolvedReference:
    reference: DocumentReference
    score: float
    match_reasons: List[str] = field(default_factory=list)


@dataclass
class ResolvedResult:
    references: List[DocumentReference]
    scores: List[ResolvedReference]


@dataclass(frozen=True)
class BatchDocument:
    file_name: str
    text_sample: Optional[str] = None
    signals: Sequence[str] = ()


def _first_matching_pattern(patterns: Sequence[str], file_name: str) -> Optional[str]:
    for pattern in patterns:
        try:
            if re.search(pattern, file_name, re.IGNORECASE):
                return pattern
        except re.error:
            logger.debug(f"Skipping invalid filename pattern: {pattern!r}")
    return None


class ReferenceResolver:
    """
    Scores a registry against document evidence.

    Args:
        registry: Registry to resolve against (process-wide registry by default)
    """

    def __init__(self, registry: Optional[ReferenceRegistry] = None):
        self._registry = registry

    @property
    def registry(self) -> ReferenceRegistry:
        return self._registry if self._registry is not None else get_registry()

    def score_reference(
        self,
        reference: DocumentReference,
        context: AIContext,
        signals: Sequence[str] = (),
        document_type: Optional[str] = None,
        category: Optional[str] = None,
        text_sample: Optional[str] = None,
        file_name: Optional[str] = None
    ) -> ResolvedReference:
        reasons: List[str] = []
        score = 0.0

        if document_type and reference.file_type.lower() == document_type.lower():
            score += SCORE_DIRECT_TYPE_MATCH
            reasons.append(f"type-match:{document_type}")

        if file_name:
            file_name_lower = file_name.lower()
            pattern = _first_matching_pattern(reference.filename_patterns, file_name_lower)
            if pattern is not None:
                score += SCORE_FILENAME_PATTERN
                reasons.append(f"filename-pattern:{pattern}")
            excluded = _first_matching_pattern(reference.exclude_patterns, file_name_lower)
            if excluded is not None:
                score -= SCORE_FILENAME_PATTERN
                reasons.append(f"excluded:{excluded}")

        if category and reference.category.lower() == category.lower():
            score += SCORE_CATEGORY_MATCH
            reasons.append(f"category:{category}")

        signal_set = {s.lower() for s in signals}
        type_slug = re.sub(r'\s+', '-', document_type.lower()) if document_type else None

        for tag in reference.tags:
            value = tag.value.lower()
            if tag.namespace == TagNamespace.CONTEXT:
                if value == context.value:
                    score += SCORE_CONTEXT_TAG * tag.weight
                    reasons.append(f"context-tag:{value}")
            elif tag.namespace == TagNamespace.SIGNAL:
                if value in signal_set:
                    score += SCORE_SIGNAL_TAG * tag.weight
                    reasons.append(f"signal-tag:{value}")
            elif tag.namespace == TagNamespace.DOMAIN:
                if value in signal_set:
                    score += SCORE_DOMAIN_TAG * tag.weight
                    reasons.append(f"domain-tag:{value}")
            elif tag.namespace == TagNamespace.TYPE:
                if type_slug and value == type_slug:
                    score += SCORE_DIRECT_TYPE_MATCH * tag.weight
                    reasons.append(f"type-tag:{value}")
            elif tag.namespace == TagNamespace.TRIGGER:
                if all(part in signal_set for part in value.split('+')):
                    score += SCORE_TRIGGER_TAG * tag.weight
                    reasons.append(f"trigger:{value}")

        if text_sample:
            text_lower = text_sample.lower()
            hits = sum(1 for kw in reference.keywords if kw.lower() in text_lower)
            if hits:
                score += hits * SCORE_KEYWORD
                reasons.append(f"keywords:{hits}")

        for rule in reference.decision_rules:
            if any(s.lower() in signal_set for s in rule.signals):
                rule_score = SCORE_DECISION_RULE_BASE * rule.priority
                if rule.action == RuleAction.REQUIRE:
                    rule_score *= 2
                score += rule_score
                reasons.append(f"decision-{rule.action.value}:{rule.condition[:50]}")

        return ResolvedReference(reference=reference, score=score, match_reasons=reasons)

    def resolve(
        self,
        context: AIContext,
        signals: Sequence[str] = (),
        document_type: Optional[str] = None,
        category: Optional[str] = None,
        text_sample: Optional[str] = None,
        file_name: Optional[str] = None,
        max_results: int = DEFAULT_MAX_RESULTS
    ) -> ResolvedResult:
        """References for one document, best first."""
        applicable = self.registry.for_context(context)

        scored = [
            self.score_reference(ref, context, signals, document_type, category, text_sample, file_name)
            for ref in applicable
        ]
        # Stable sort keeps registry order among ties
        scored.sort(key=lambda s: s.score, reverse=True)

        top_score = scored[0].score if scored else 0.0
        if top_score > 0:
            threshold = max(MIN_RELEVANCE_SCORE, math.floor(top_score * RELEVANCE_RATIO))
            relevant = [s for s in scored if s.score >= threshold]
        else:
            relevant = scored
        selected = relevant[:max_results]

        # Nothing cleared the floor, or nothing scored at all
        if not selected or selected[0].score == 0:
            selected = self._diversity_fallback(applicable, max_results)

        logger.debug(
            f"Resolved {len(selected)} references for {context.value} "
            f"(top score {top_score:.1f}, {len(applicable)} candidates)"
        )
        return ResolvedResult(references=[s.reference for s in selected], scores=selected)

    @staticmethod
    def _diversity_fallback(applicable: Sequence[DocumentReference], max_results: int) -> List[ResolvedReference]:
        seen = set()
        fallback = []
        for reference in applicable:
            if len(fallback) >= max_results:
                break
            if reference.category in seen:
                continue
            seen.add(reference.category)
            fallback.append(ResolvedReference(reference=reference, score=0.0, match_reasons=["fallback"]))
        return fallback

    def resolve_batch(
        self,
        documents: Sequence[BatchDocument],
        context: AIContext,
        max_results: int = DEFAULT_MAX_RESULTS
    ) -> ResolvedResult:
        """
        Resolve each document separately (with extra headroom) and merge:
        highest score per reference id, union of match reasons.
        """
        merged: Dict[str, ResolvedReference] = {}
        sample_length = text_limit_settings.BATCH_TEXT_SAMPLE

        for document in documents:
            result = self.resolve(
                context,
                signals=document.signals,
                file_name=document.file_name,
                text_sample=document.text_sample[:sample_length] if document.text_sample else None,
                max_results=max_results * 2,
            )
            for scored in result.scores:
                existing = merged.get(scored.reference.id)
                if existing is None:
                    merged[scored.reference.id] = ResolvedReference(
                        reference=scored.reference,
                        score=scored.score,
                        match_reasons=list(scored.match_reasons),
                    )
                    continue
                existing.score = max(existing.score, scored.score)
                for reason in scored.match_reasons:
                    if reason not in existing.match_reasons:
                        existing.match_reasons.append(reason)

        selected = sorted(merged.values(), key=lambda s: s.score, reverse=True)[:max_results]
        return ResolvedResult(references=[s.reference for s in selected], scores=selected)


def resolve_references(context: AIContext, **kwargs) -> ResolvedResult:
    """Resolve against the process-wide registry."""
    return ReferenceResolver().resolve(context, **kwargs)
