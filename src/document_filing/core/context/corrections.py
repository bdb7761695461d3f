# ============================================================================
# src/document_filing/core/context/corrections.py
# ============================================================================
"""
Correction Types
- PastCorrection: one human override of an earlier AI classification
- ConsolidatedRule: aggregated "from → to" correction pattern
- ConfusionPair: labels the pipeline is currently uncertain between
- CorrectionContext: what was retrieved for the critic, per tier
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .enums import CorrectionField, CorrectionTier


@dataclass(frozen=True)
class PredictedChecklistItem:
    item_id: str
    item_name: str
    category: str = ""
    confidence: float = 0.0


@dataclass(frozen=True)
class AIPrediction:
    file_type: str
    category: str
    target_folder: str
    confidence: float = 0.0
    suggested_checklist_items: List[PredictedChecklistItem] = field(default_factory=list)


@dataclass(frozen=True)
class UserCorrection:
    file_type: Optional[str] = None
    category: Optional[str] = None
    target_folder: Optional[str] = None
    checklist_items: List[PredictedChecklistItem] = field(default_factory=list)


@dataclass(frozen=True)
class PastCorrection:
    ai_prediction: AIPrediction
    user_correction: UserCorrection
    file_name: str
    match_reason: str = ""
    relevance_score: float = 0.0


@dataclass(frozen=True)
class ConsolidatedRule:
    field: CorrectionField
    from_value: str
    to_value: str
    correction_count: int
    average_confidence: float = 0.7
    example_file_name: Optional[str] = None


@dataclass(frozen=True)
class ConfusionPair:
    field: CorrectionField
    options: List[str]


@dataclass
class CorrectionContext:
    tier: CorrectionTier
    past_corrections: List[PastCorrection] = field(default_factory=list)
    consolidated_rules: List[ConsolidatedRule] = field(default_factory=list)
    confusion_pairs: List[ConfusionPair] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.past_corrections or self.consolidated_rules)
