# ============================================================================
# src/document_filing/core/context/pipeline_io.py
# ============================================================================
"""
Pipeline Boundary Types
- PipelineInput: one uploaded document to classify
- CachedClassification / CacheLookup: cache collaborator payloads
- FilingResult / PipelineOutput: what the orchestrator returns
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional

from .enums import ConfidenceFlag, FolderLevel
from .summary import DocumentSummary
from .checklist import ChecklistItem, ChecklistMatch
from .classification import FolderInfo
from .corrections import PredictedChecklistItem


@dataclass(frozen=True)
class PipelineInput:
    extracted_text: str
    file_name: str
    file_size: int = 0
    mime_type: str = ""
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    client_type: Optional[str] = None
    bypass_cache: bool = False


@dataclass(frozen=True)
class CachedClassification:
    file_type: str
    category: str
    target_folder: str
    confidence: float
    suggested_checklist_items: List[PredictedChecklistItem] = field(default_factory=list)


@dataclass(frozen=True)
class CacheLookup:
    hit: bool
    classification: Optional[CachedClassification] = None
    hit_count: int = 0
    cache_id: Optional[str] = None


@dataclass
class FilingResult:
    """Final (or in-progress) classification for one document."""
    file_type: str
    category: str
    suggested_folder: str
    target_level: FolderLevel
    confidence: float
    summary: str = ""
    confidence_flag: ConfidenceFlag = ConfidenceFlag.LOW
    requires_review: bool = True
    suggested_checklist_items: List[ChecklistMatch] = field(default_factory=list)
    verification_passed: Optional[bool] = None
    verification_notes: Optional[str] = None
    type_abbreviation: str = "DOC"
    original_file_name: str = ""
    file_size: int = 0
    mime_type: str = ""
    from_cache: bool = False
    cache_hit_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["target_level"] = self.target_level.value
        data["confidence_flag"] = self.confidence_flag.value
        return data


@dataclass
class PipelineOutput:
    success: bool
    result: FilingResult
    available_folders: List[FolderInfo]
    available_checklist_items: List[ChecklistItem] = field(default_factory=list)
    document_summary: Optional[DocumentSummary] = None
    classification_reasoning: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "result": self.result.to_dict(),
            "document_summary": self.document_summary.to_dict() if self.document_summary else None,
            "classification_reasoning": self.classification_reasoning,
            "available_checklist_items": [item.to_dict() for item in self.available_checklist_items],
            "available_folders": [folder.to_dict() for folder in self.available_folders],
        }
