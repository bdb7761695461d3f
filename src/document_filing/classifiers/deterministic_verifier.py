# ============================================================================
# src/document_filing/classifiers/deterministic_verifier.py
# ============================================================================
"""
Deterministic Verifier

Scores the document against every active file-type definition using only
keyword evidence (no model call), then confirms, annotates or overrides the
upstream classification.

Score per definition:
    0.4 * key-term hits / keywords
  + 0.3 * summary hits / keywords
  + 0.3 * filename hits / keywords
  + 0.3 if any filename pattern matches
  + 0.15 * min(learned keyword hits, 3)
  (capped at 1.0)
  * 0.5 if any exclude pattern matches the filename
  + 0.2 if a consolidated correction rule (>= 2 occurrences) points to the type
  (capped at 1.0)
"""

from typing import List, Optional, Sequence
import logging
import re

from ..config.thresholds_config import threshold_settings
from ..core.context.classification import (
    ClassificationDecision,
    FileTypeDefinition,
    FolderInfo,
    KeywordScore,
    VerificationAdjustment,
    VerificationResult,
)
from ..core.context.corrections import ConsolidatedRule
from ..core.context.enums import CorrectionField
from ..core.context.summary import DocumentSummary

logger = logging.getLogger(__name__)

KEY_TERMS_WEIGHT = 0.4
SUMMARY_WEIGHT = 0.3
FILENAME_WEIGHT = 0.3
FILENAME_PATTERN_BONUS = 0.3
LEARNED_KEYWORD_BONUS = 0.15
LEARNED_KEYWORD_CAP = 3
EXCLUSION_PENALTY = 0.5
CORRECTION_BOOST = 0.2
CORRECTION_BOOST_MIN_COUNT = 2
OVERRIDE_CONFIDENCE_BONUS = 0.1
OVERRIDE_CONFIDENCE_CAP = 0.95


def normalize_text(text: str) -> str:
    text = re.sub(r'[_\-.]', ' ', (text or "").lower())
    text = re.sub(r'[^a-z0-9\s]', '', text)
    return re.sub(r'\s+', ' ', text).strip()


def contains_keyword(normalized_text: str, keyword: str) -> bool:
    """Whole-word (or whole-phrase) match of keyword inside already normalized text."""
    normalized_keyword = normalize_text(keyword)
    if not normalized_keyword or not normalized_text:
        return False
    pattern = r'\b' + r'\s+'.join(re.escape(w) for w in normalized_keyword.split(' ')) + r'\b'
    return re.search(pattern, normalized_text) is not None


def filename_pattern_matches(pattern: str, file_name: str) -> bool:
    """
    Regex search on the lowercased filename, or a whole-word match on the
    normalized filename. Invalid regexes only get the word match.
    """
    word_match = contains_keyword(normalize_text(file_name), pattern)
    try:
        compiled = re.compile(pattern, re.IGNORECASE)
    except re.error:
        return word_match
    return word_match or compiled.search((file_name or "").lower()) is not None


class DeterministicVerifier:
    """
    Keyword-scoring check on an upstream classification.

    Args:
        significance_floor: Top score below which upstream is accepted untouched
        override_margin: Lead over the upstream type's score needed to override
        critic_margin: Top-two gap below which the scores are called ambiguous
    """

    def __init__(
        self,
        significance_floor: Optional[float] = None,
        override_margin: Optional[float] = None,
        critic_margin: Optional[float] = None
    ):
        self.significance_floor = (
            significance_floor if significance_floor is not None
            else threshold_settings.VERIFIER_SIGNIFICANCE_FLOOR
        )
        self.override_margin = (
            override_margin if override_margin is not None
            else threshold_settings.VERIFIER_OVERRIDE_MARGIN
        )
        self.critic_margin = (
            critic_margin if critic_margin is not None
            else threshold_settings.VERIFIER_CRITIC_MARGIN
        )

    def score(
        self,
        summary: DocumentSummary,
        file_name: str,
        definition: FileTypeDefinition,
        rules: Sequence[ConsolidatedRule] = ()
    ) -> KeywordScore:
        """Score a single definition. Always in [0, 1]."""
        key_terms_text = normalize_text(' '.join(summary.key_terms))
        summary_text = normalize_text(' '.join([
            summary.executive_summary,
            summary.detailed_summary,
            summary.raw_content_type,
        ]))
        filename_text = normalize_text(file_name)

        matched_keywords = []
        key_term_hits = summary_hits = filename_hits = 0
        for keyword in definition.keywords:
            in_key_terms = contains_keyword(key_terms_text, keyword)
            in_summary = contains_keyword(summary_text, keyword)
            in_filename = contains_keyword(filename_text, keyword)
            key_term_hits += in_key_terms
            summary_hits += in_summary
            filename_hits += in_filename
            if in_key_terms or in_summary or in_filename:
                matched_keywords.append(keyword)

        matched_learned = [
            lk.keyword for lk in definition.learned_keywords
            if any(contains_keyword(text, lk.keyword) for text in (key_terms_text, summary_text, filename_text))
        ]
        matched_patterns = [p for p in definition.filename_patterns if filename_pattern_matches(p, file_name)]

        total = len(definition.keywords) or 1
        value = (
            (key_term_hits / total) * KEY_TERMS_WEIGHT
            + (summary_hits / total) * SUMMARY_WEIGHT
            + (filename_hits / total) * FILENAME_WEIGHT
        )
        if matched_patterns:
            value += FILENAME_PATTERN_BONUS
        value += LEARNED_KEYWORD_BONUS * min(len(matched_learned), LEARNED_KEYWORD_CAP)
        value = min(value, 1.0)

        penalized = any(filename_pattern_matches(p, file_name) for p in definition.exclude_patterns)
        if penalized:
            value *= EXCLUSION_PENALTY

        boosted = False
        for rule in rules:
            if (
                rule.field == CorrectionField.FILE_TYPE
                and rule.to_value == definition.file_type
                and rule.correction_count >= CORRECTION_BOOST_MIN_COUNT
            ):
                value += CORRECTION_BOOST
                boosted = True
                break

        return KeywordScore(
            file_type=definition.file_type,
            category=definition.category,
            score=min(value, 1.0),
            target_folder=definition.target_folder_key,
            matched_keywords=matched_keywords,
            matched_filename_patterns=matched_patterns,
            matched_learned_keywords=matched_learned,
            penalized_by_exclusions=penalized,
            correction_boost=boosted,
        )

    def score_all(
        self,
        summary: DocumentSummary,
        file_name: str,
        definitions: Sequence[FileTypeDefinition],
        rules: Sequence[ConsolidatedRule] = ()
    ) -> List[KeywordScore]:
        """Scores above zero for all active definitions, highest first."""
        scores = [
            self.score(summary, file_name, d, rules)
            for d in definitions if d.is_active
        ]
        scores = [s for s in scores if s.score > 0]
        scores.sort(key=lambda s: s.score, reverse=True)
        return scores

    def verify(
        self,
        summary: DocumentSummary,
        file_name: str,
        decision: ClassificationDecision,
        definitions: Sequence[FileTypeDefinition],
        rules: Sequence[ConsolidatedRule] = (),
        folders: Sequence[FolderInfo] = ()
    ) -> VerificationResult:
        """
        Compare keyword evidence with the upstream decision.

        - no scores or top below the floor: accept upstream
        - top type equals upstream type: confirm
        - top leads upstream's own score by more than the margin: override
        - otherwise: accept, noting the alternative
        """
        scores = self.score_all(summary, file_name, definitions, rules)

        if not scores or scores[0].score < self.significance_floor:
            return VerificationResult(
                verified=True,
                notes="Deterministic verification: No strong keyword matches found. LLM classification accepted.",
                scores=scores,
            )

        top = scores[0]
        if top.file_type == decision.file_type:
            return VerificationResult(
                verified=True,
                notes=(
                    f'Deterministic verification: Confirmed "{top.file_type}" '
                    f'(score: {top.score:.2f}, keywords: {", ".join(top.matched_keywords[:3])})'
                ),
                scores=scores,
            )

        upstream_score = next((s.score for s in scores if s.file_type == decision.file_type), 0.0)
        difference = top.score - upstream_score

        if difference > self.override_margin and top.score >= self.significance_floor:
            folder = None
            if top.target_folder and any(f.folder_key == top.target_folder for f in folders):
                folder = top.target_folder

            notes = (
                f'Deterministic verification: Suggesting "{top.file_type}" instead of "{decision.file_type}" '
                f'(deterministic score: {top.score:.2f} vs {upstream_score:.2f}, '
                f'keywords: {", ".join(top.matched_keywords[:3])}'
            )
            if top.matched_learned_keywords:
                notes += f', learned: {", ".join(top.matched_learned_keywords)}'
            notes += ')'

            logger.info(f"Verifier override: {decision.file_type} -> {top.file_type} ({top.score:.2f})")
            return VerificationResult(
                verified=False,
                notes=notes,
                adjustment=VerificationAdjustment(
                    file_type=top.file_type,
                    category=top.category,
                    confidence=min(top.score + OVERRIDE_CONFIDENCE_BONUS, OVERRIDE_CONFIDENCE_CAP),
                    suggested_folder=folder,
                ),
                scores=scores,
            )

        return VerificationResult(
            verified=True,
            notes=(
                f'Deterministic verification: Accepted "{decision.file_type}" (score: {upstream_score:.2f}). '
                f'Alternative: "{top.file_type}" (score: {top.score:.2f})'
            ),
            scores=scores,
        )

    def should_run_critic(self, scores: Sequence[KeywordScore]) -> bool:
        """True when the two best scores are significant and too close to call."""
        if len(scores) < 2:
            return False
        return (
            scores[0].score - scores[1].score < self.critic_margin
            and scores[0].score >= self.significance_floor
        )


def apply_verification_adjustments(
    decision: ClassificationDecision,
    result: VerificationResult
) -> ClassificationDecision:
    """Copy of decision with the verifier's override applied (unchanged when there is none)."""
    if result.adjustment is None:
        return decision
    adjustment = result.adjustment
    return ClassificationDecision(
        file_type=adjustment.file_type,
        category=adjustment.category,
        suggested_folder=adjustment.suggested_folder or decision.suggested_folder,
        confidence=adjustment.confidence,
        reasoning=decision.reasoning,
        alternative_types=list(decision.alternative_types),
    )
