# ============================================================================
# src/document_filing/core/context/summary.py
# ============================================================================
"""
DocumentSummary
- Structured description of one document produced by the summary stage
- `from_response` normalizes a loosely-typed model payload into a fully
  populated summary
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional


def _str_list(value: Any) -> List[str]:
    """Coerce a payload value into a list of strings."""
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None and str(v).strip()]


def _clamp(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return max(0.0, min(1.0, number))


@dataclass(frozen=True)
class DocumentEntities:
    people: List[str] = field(default_factory=list)
    companies: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    projects: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "DocumentEntities":
        data = data if isinstance(data, dict) else {}
        return cls(
            people=_str_list(data.get("people")),
            companies=_str_list(data.get("companies")),
            locations=_str_list(data.get("locations")),
            projects=_str_list(data.get("projects")),
        )


@dataclass(frozen=True)
class DocumentCharacteristics:
    is_financial: bool = False
    is_legal: bool = False
    is_identity: bool = False
    is_report: bool = False
    is_design: bool = False
    is_correspondence: bool = False
    has_multiple_projects: bool = False
    is_internal: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "DocumentCharacteristics":
        data = data if isinstance(data, dict) else {}
        return cls(
            is_financial=bool(data.get("isFinancial")),
            is_legal=bool(data.get("isLegal")),
            is_identity=bool(data.get("isIdentity")),
            is_report=bool(data.get("isReport")),
            is_design=bool(data.get("isDesign")),
            is_correspondence=bool(data.get("isCorrespondence")),
            has_multiple_projects=bool(data.get("hasMultipleProjects")),
            is_internal=bool(data.get("isInternal")),
        )

    def active_flags(self) -> List[str]:
        """Names of the flags that are set, e.g. ['financial', 'legal']."""
        names = {
            "is_financial": "financial",
            "is_legal": "legal",
            "is_identity": "identity",
            "is_report": "report",
            "is_design": "design",
            "is_correspondence": "correspondence",
            "has_multiple_projects": "multi-project",
            "is_internal": "internal",
        }
        return [label for attr, label in names.items() if getattr(self, attr)]


@dataclass(frozen=True)
class DocumentSummary:
    """
    Output of the summary stage. Immutable once built.
    """
    document_description: str
    document_purpose: str
    entities: DocumentEntities
    key_terms: List[str]
    key_dates: List[str]
    key_amounts: List[str]
    executive_summary: str
    detailed_summary: str
    characteristics: DocumentCharacteristics
    raw_content_type: str
    confidence_in_analysis: float
    section_breakdown: Optional[List[str]] = None

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "DocumentSummary":
        """Build a summary from a parsed model response, defaulting every missing field."""
        section_breakdown = data.get("sectionBreakdown")
        return cls(
            document_description=str(data.get("documentDescription") or "Unable to determine"),
            document_purpose=str(data.get("documentPurpose") or "Unable to determine"),
            entities=DocumentEntities.from_dict(data.get("entities")),
            key_terms=_str_list(data.get("keyTerms")),
            key_dates=_str_list(data.get("keyDates")),
            key_amounts=_str_list(data.get("keyAmounts")),
            executive_summary=str(data.get("executiveSummary") or "No summary available"),
            detailed_summary=str(data.get("detailedSummary") or "No detailed summary available"),
            characteristics=DocumentCharacteristics.from_dict(data.get("documentCharacteristics")),
            raw_content_type=str(data.get("rawContentType") or "Unknown document"),
            confidence_in_analysis=_clamp(data.get("confidenceInAnalysis"), 0.5),
            section_breakdown=_str_list(section_breakdown) if isinstance(section_breakdown, list) else None,
        )

    @classmethod
    def fallback(cls, file_name: str) -> "DocumentSummary":
        """Shell used when the summary service fails."""
        return cls(
            document_description="Unable to analyze document",
            document_purpose="Unknown",
            entities=DocumentEntities(),
            key_terms=[],
            key_dates=[],
            key_amounts=[],
            executive_summary=f"Document: {file_name}",
            detailed_summary="Analysis failed - using fallback",
            characteristics=DocumentCharacteristics(),
            raw_content_type="Unknown",
            confidence_in_analysis=0.1,
        )

    @classmethod
    def minimal_text(cls, file_name: str, text: str) -> "DocumentSummary":
        """Summary for documents with too little extractable text (likely scanned)."""
        return cls(
            document_description="Document with limited extractable text (possibly scanned/image-based)",
            document_purpose="Unknown - insufficient text for analysis",
            entities=DocumentEntities(),
            key_terms=[],
            key_dates=[],
            key_amounts=[],
            executive_summary=f"Document: {file_name} - Limited text extracted",
            detailed_summary=text[:500],
            characteristics=DocumentCharacteristics(),
            raw_content_type="Unknown (limited text)",
            confidence_in_analysis=0.2,
        )

    def searchable_text(self) -> str:
        """Summary text used for keyword scoring."""
        return " ".join([self.executive_summary, self.detailed_summary, self.raw_content_type])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
