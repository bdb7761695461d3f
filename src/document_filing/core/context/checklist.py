# ============================================================================
# src/document_filing/core/context/checklist.py
# ============================================================================
"""
Checklist Types
- ChecklistItem: an outstanding (or fulfilled) document requirement
- FilenameMatchResult: filename-only evidence for one item
- ChecklistMatch: a suggested fulfilment of an item by the current document
"""

from dataclasses import dataclass, field, replace, asdict
from typing import Dict, Any, List, Optional

from .enums import ChecklistStatus


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    name: str
    category: str
    status: ChecklistStatus = ChecklistStatus.MISSING
    linked_document_count: int = 0
    description: Optional[str] = None
    matching_document_types: List[str] = field(default_factory=list)
    # Set by filename enrichment
    filename_match_score: Optional[float] = None
    filename_match_reason: Optional[str] = None

    @property
    def is_open(self) -> bool:
        """Missing or awaiting review, so still eligible for matching."""
        return self.status in (ChecklistStatus.MISSING, ChecklistStatus.PENDING_REVIEW)

    def with_filename_match(self, score: float, reason: str) -> "ChecklistItem":
        return replace(self, filename_match_score=score, filename_match_reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class FilenameMatchResult:
    item_id: str
    score: float
    reason: str


@dataclass
class ChecklistMatch:
    item_id: str
    confidence: float
    reasoning: str = ""
    item_name: str = "Unknown"
    category: str = "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
