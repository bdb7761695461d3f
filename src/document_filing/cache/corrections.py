# ============================================================================
# src/document_filing/cache/corrections.py
# ============================================================================
"""
In-Memory Correction Store

Records human overrides of AI classifications and serves them back to the
critic in the three shapes the correction tiers need:
- relevant corrections (full tier): same predicted type, same predicted
  category, then similar filename
- targeted corrections: corrections that resolved a specific confusion pair
- consolidated rules: aggregated "from → to" patterns seen at least twice

Recording a correction invalidates any cache entry for the same content.
"""

import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional, Sequence

from ...utils.logging import get_logger
from ..core.context.corrections import (
    AIPrediction,
    ConfusionPair,
    ConsolidatedRule,
    PastCorrection,
    UserCorrection,
)
from ..core.context.enums import CorrectionField
from .hashing import generate_content_hash, normalize_filename
from .store import ClassificationCacheStore

RELEVANCE_SAME_TYPE = 1.0
RELEVANCE_SAME_CATEGORY = 0.8
RELEVANCE_SIMILAR_NAME = 0.7
RELEVANCE_TARGETED_TYPE = 1.0
RELEVANCE_TARGETED_CATEGORY = 0.9

PER_STRATEGY = 2
MIN_RULE_COUNT = 2
MAX_RULE_EXAMPLES = 3
CONTENT_SUMMARY_LENGTH = 500


@dataclass
class CorrectionRecord:
    id: str
    file_name: str
    file_name_normalized: str
    content_hash: str
    content_summary: str
    ai_prediction: AIPrediction
    user_correction: UserCorrection
    corrected_fields: List[str]
    created_at: datetime
    client_type: Optional[str] = None
    correction_weight: float = 1.0

    def to_past_correction(self, match_reason: str, relevance_score: float) -> PastCorrection:
        return PastCorrection(
            ai_prediction=self.ai_prediction,
            user_correction=self.user_correction,
            file_name=self.file_name,
            match_reason=match_reason,
            relevance_score=relevance_score,
        )


@dataclass
class _RuleAccumulator:
    field: CorrectionField
    from_value: str
    to_value: str
    count: int = 0
    average_confidence: float = 0.0
    examples: List[str] = field(default_factory=list)

    def add(self, file_name: str, confidence: float) -> None:
        self.count += 1
        if len(self.examples) < MAX_RULE_EXAMPLES:
            self.examples.append(file_name)
        self.average_confidence = (
            self.average_confidence * (self.count - 1) + confidence
        ) / self.count

    def to_rule(self) -> ConsolidatedRule:
        return ConsolidatedRule(
            field=self.field,
            from_value=self.from_value,
            to_value=self.to_value,
            correction_count=self.count,
            average_confidence=self.average_confidence,
            example_file_name=self.examples[0] if self.examples else None,
        )


def _changed_fields(prediction: AIPrediction, correction: UserCorrection) -> List[str]:
    changed = []
    if correction.file_type and correction.file_type != prediction.file_type:
        changed.append(CorrectionField.FILE_TYPE.value)
    if correction.category and correction.category != prediction.category:
        changed.append(CorrectionField.CATEGORY.value)
    if correction.target_folder and correction.target_folder != prediction.target_folder:
        changed.append(CorrectionField.FOLDER.value)
    if correction.checklist_items:
        changed.append("checklistItems")
    return changed


def _name_words(normalized: str) -> set:
    return {w for w in normalized.split() if w != "#" and len(w) > 2}


class CorrectionStore:
    """
    Thread-safe in-memory correction history.

    Args:
        cache: Classification cache invalidated when a correction is recorded
    """

    def __init__(self, cache: Optional[ClassificationCacheStore] = None):
        self.cache = cache
        self._records: List[CorrectionRecord] = []
        self._ids = itertools.count(1)
        self._lock = threading.RLock()
        self.logger = get_logger(__name__)

    def record_correction(
        self,
        file_name: str,
        ai_prediction: AIPrediction,
        user_correction: UserCorrection,
        content_summary: str = "",
        corrected_fields: Optional[Sequence[str]] = None,
        client_type: Optional[str] = None,
        content_hash: Optional[str] = None
    ) -> CorrectionRecord:
        """
        Store one correction and invalidate the cached classification for
        the same content. content_hash defaults to the hash of the summary
        (or the filename when there is no summary).
        """
        content_hash = content_hash or generate_content_hash(content_summary or file_name)
        fields = list(corrected_fields) if corrected_fields is not None else _changed_fields(
            ai_prediction, user_correction
        )

        with self._lock:
            record = CorrectionRecord(
                id=f"correction-{next(self._ids)}",
                file_name=file_name,
                file_name_normalized=normalize_filename(file_name),
                content_hash=content_hash,
                content_summary=(content_summary or "")[:CONTENT_SUMMARY_LENGTH],
                ai_prediction=ai_prediction,
                user_correction=user_correction,
                corrected_fields=fields,
                created_at=datetime.now(),
                client_type=client_type,
            )
            self._records.append(record)

        if self.cache is not None:
            invalidated = self.cache.invalidate_by_hash(content_hash)
            if invalidated:
                self.logger.info(f"Correction for {file_name} invalidated {invalidated} cache entry")

        self.logger.info(
            f"Recorded correction for {file_name}: {', '.join(fields) or 'no field changes'}"
        )
        return record

    def _newest_first(self) -> List[CorrectionRecord]:
        with self._lock:
            return list(reversed(self._records))

    def get_relevant_corrections(
        self,
        file_type: str,
        category: str,
        file_name: str,
        limit: int = 5
    ) -> List[PastCorrection]:
        """Same predicted type (1.0), same category (0.8), similar filename (0.7)."""
        records = self._newest_first()
        picked: Dict[str, PastCorrection] = {}

        for record in [r for r in records if r.ai_prediction.file_type == file_type][:PER_STRATEGY]:
            picked[record.id] = record.to_past_correction(
                f'Same AI-predicted file type "{file_type}" was corrected before',
                RELEVANCE_SAME_TYPE,
            )

        if len(picked) < limit:
            same_category = [
                r for r in records
                if r.ai_prediction.category == category and r.id not in picked
            ]
            for record in same_category[:PER_STRATEGY]:
                picked[record.id] = record.to_past_correction(
                    f'Same AI-predicted category "{category}" was corrected before',
                    RELEVANCE_SAME_CATEGORY,
                )

        if len(picked) < limit:
            words = _name_words(normalize_filename(file_name))
            similar = [
                r for r in records
                if r.id not in picked and words & _name_words(r.file_name_normalized)
            ]
            for record in similar[:PER_STRATEGY]:
                picked[record.id] = record.to_past_correction(
                    "Similar filename pattern was corrected before",
                    RELEVANCE_SIMILAR_NAME,
                )

        result = sorted(picked.values(), key=lambda c: c.relevance_score, reverse=True)
        return result[:limit]

    def get_targeted_corrections(
        self,
        confusion_pairs: Sequence[ConfusionPair],
        file_name: Optional[str] = None,
        limit: int = 3
    ) -> List[PastCorrection]:
        """
        Corrections that settled one of the confusion pairs, in either
        direction, using the first two options of each pair.
        """
        records = self._newest_first()
        results: List[PastCorrection] = []

        def already_listed(record: CorrectionRecord) -> bool:
            return any(r.file_name == record.file_name for r in results)

        for pair in confusion_pairs:
            if len(pair.options) < 2:
                continue
            option_a, option_b = pair.options[0], pair.options[1]

            if pair.field == CorrectionField.FILE_TYPE:
                a_to_b = [
                    r for r in records
                    if r.ai_prediction.file_type == option_a and r.user_correction.file_type == option_b
                ]
                for record in a_to_b[:PER_STRATEGY]:
                    results.append(record.to_past_correction(
                        f'AI thought "{option_a}" but correct answer was "{option_b}"',
                        RELEVANCE_TARGETED_TYPE,
                    ))
                b_to_a = [
                    r for r in records
                    if r.ai_prediction.file_type == option_b and r.user_correction.file_type == option_a
                ]
                for record in b_to_a[:PER_STRATEGY]:
                    if already_listed(record):
                        continue
                    results.append(record.to_past_correction(
                        f'AI thought "{option_b}" but correct answer was "{option_a}"',
                        RELEVANCE_TARGETED_TYPE,
                    ))

            elif pair.field == CorrectionField.CATEGORY:
                a_to_b = [
                    r for r in records
                    if r.ai_prediction.category == option_a and r.user_correction.category == option_b
                ]
                for record in a_to_b[:PER_STRATEGY]:
                    if already_listed(record):
                        continue
                    results.append(record.to_past_correction(
                        f'AI thought category "{option_a}" but correct was "{option_b}"',
                        RELEVANCE_TARGETED_CATEGORY,
                    ))

        results.sort(key=lambda c: c.relevance_score, reverse=True)
        return results[:limit]

    def get_consolidated_rules(
        self,
        file_type: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 5
    ) -> List[ConsolidatedRule]:
        """
        Aggregated from → to rules seen at least twice, most frequent first.

        File-type rules come first (up to limit), then category rules (up to
        limit). Passing file_type or category keeps only rules involving it.
        """
        type_rules: Dict[tuple, _RuleAccumulator] = {}
        category_rules: Dict[tuple, _RuleAccumulator] = {}

        with self._lock:
            records = list(self._records)

        for record in records:
            predicted, corrected = record.ai_prediction, record.user_correction
            if corrected.file_type and corrected.file_type != predicted.file_type:
                key = (predicted.file_type, corrected.file_type)
                accumulator = type_rules.setdefault(
                    key, _RuleAccumulator(CorrectionField.FILE_TYPE, *key)
                )
                accumulator.add(record.file_name, predicted.confidence)
            if corrected.category and corrected.category != predicted.category:
                key = (predicted.category, corrected.category)
                accumulator = category_rules.setdefault(
                    key, _RuleAccumulator(CorrectionField.CATEGORY, *key)
                )
                accumulator.add(record.file_name, predicted.confidence)

        def relevant(rules: Dict[tuple, _RuleAccumulator], value: Optional[str]) -> List[ConsolidatedRule]:
            selected = [r for r in rules.values() if r.count >= MIN_RULE_COUNT]
            if value:
                selected = [r for r in selected if value in (r.from_value, r.to_value)]
            selected.sort(key=lambda r: r.count, reverse=True)
            return [r.to_rule() for r in selected[:limit]]

        return relevant(type_rules, file_type) + relevant(category_rules, category)

    def get_stats(self, since: Optional[datetime] = None) -> Dict[str, Any]:
        with self._lock:
            records = [r for r in self._records if since is None or r.created_at >= since]

        stats: Dict[str, Any] = {
            "total_corrections": len(records),
            "by_field": {},
            "by_file_type": {},
            "by_category": {},
        }
        for record in records:
            for name in record.corrected_fields:
                stats["by_field"][name] = stats["by_field"].get(name, 0) + 1
            file_type = record.ai_prediction.file_type
            stats["by_file_type"][file_type] = stats["by_file_type"].get(file_type, 0) + 1
            category = record.ai_prediction.category
            stats["by_category"][category] = stats["by_category"].get(category, 0) + 1
        return stats

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
