# ============================================================================
# src/document_filing/core/context/processing_context.py
# ============================================================================
"""
FilingContext
- Run state shared by the stages of one pipeline invocation
- Tracks filename evidence, summary, decision, warnings and stage log
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from .pipeline_io import PipelineInput, FilingResult
from .summary import DocumentSummary
from .classification import ClassificationDecision, FilenameTypeHint, VerificationResult
from .checklist import ChecklistItem, ChecklistMatch, FilenameMatchResult
from .corrections import CorrectionContext
from .taxonomy import FilingTaxonomy


@dataclass
class FilingContext:
    input: PipelineInput
    taxonomy: FilingTaxonomy = field(default_factory=FilingTaxonomy)
    content_hash: str = ""

    # Filename analysis
    filename_hint: Optional[FilenameTypeHint] = None
    filename_matches: List[FilenameMatchResult] = field(default_factory=list)
    checklist_items: List[ChecklistItem] = field(default_factory=list)
    checklist_matches: List[ChecklistMatch] = field(default_factory=list)

    # Stage outputs
    summary: Optional[DocumentSummary] = None
    decision: Optional[ClassificationDecision] = None
    verification: Optional[VerificationResult] = None
    correction_context: Optional[CorrectionContext] = None
    result: Optional[FilingResult] = None

    warnings: List[str] = field(default_factory=list)
    stage_log: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def file_name(self) -> str:
        return self.input.file_name

    @property
    def text(self) -> str:
        return self.input.extracted_text

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def log_stage_execution(self, stage: str, outcome: Dict[str, Any]) -> None:
        self.stage_log.append({"stage": stage, **outcome})

    def item_by_id(self, item_id: str) -> Optional[ChecklistItem]:
        for item in self.checklist_items:
            if item.id == item_id:
                return item
        return None
