# ============================================================================
# src/document_filing/core/context/classification.py
# ============================================================================
"""
Classification Types
- FolderInfo: one entry of the caller's folder taxonomy
- FilenameTypeHint: type/category/folder guessed from the filename alone
- ClassificationDecision: the mutable decision carried through the stages
- FileTypeDefinition: keyword data used by the deterministic verifier
- KeywordScore / VerificationResult: verifier output
- CriticDecision: final arbitration by the critic
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional

from .checklist import ChecklistMatch
from .enums import FolderLevel


@dataclass(frozen=True)
class FolderInfo:
    folder_key: str
    name: str
    level: FolderLevel = FolderLevel.PROJECT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FolderInfo":
        return cls(
            folder_key=data["folder_key"],
            name=data.get("name", data["folder_key"]),
            level=FolderLevel(data.get("level", FolderLevel.PROJECT.value)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"folder_key": self.folder_key, "name": self.name, "level": self.level.value}


@dataclass(frozen=True)
class FilenameTypeHint:
    file_type: str
    category: str
    folder: str
    confidence: float
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AlternativeType:
    type: str
    confidence: float
    reason: str = ""


@dataclass
class ClassificationDecision:
    """
    Current classification. Produced by the classification stage, possibly
    adjusted by the verifier and finally superseded by the critic.
    """
    file_type: str
    category: str
    suggested_folder: str
    confidence: float
    reasoning: str = ""
    alternative_types: List[AlternativeType] = field(default_factory=list)

    @property
    def has_alternatives(self) -> bool:
        return len(self.alternative_types) > 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LearnedKeyword:
    keyword: str
    source: str = "correction"  # correction | manual
    added_at: Optional[str] = None
    correction_count: int = 0


@dataclass
class FileTypeDefinition:
    """Keyword and pattern data describing one canonical file type."""
    file_type: str
    category: str
    keywords: List[str] = field(default_factory=list)
    description: str = ""
    identification_rules: List[str] = field(default_factory=list)
    category_rules: Optional[str] = None
    target_folder_key: Optional[str] = None
    target_level: Optional[FolderLevel] = None
    filename_patterns: List[str] = field(default_factory=list)
    exclude_patterns: List[str] = field(default_factory=list)
    learned_keywords: List[LearnedKeyword] = field(default_factory=list)
    is_active: bool = True


@dataclass
class KeywordScore:
    file_type: str
    category: str
    score: float
    target_folder: Optional[str] = None
    matched_keywords: List[str] = field(default_factory=list)
    matched_filename_patterns: List[str] = field(default_factory=list)
    matched_learned_keywords: List[str] = field(default_factory=list)
    penalized_by_exclusions: bool = False
    correction_boost: bool = False


@dataclass(frozen=True)
class VerificationAdjustment:
    file_type: str
    category: str
    confidence: float
    suggested_folder: Optional[str] = None


@dataclass
class VerificationResult:
    verified: bool
    notes: str
    adjustment: Optional[VerificationAdjustment] = None
    scores: List[KeywordScore] = field(default_factory=list)


@dataclass(frozen=True)
class CorrectionInfluence:
    applied_corrections: List[str] = field(default_factory=list)
    reasoning: str = "No correction influence data"


@dataclass
class CriticDecision:
    """Final arbitration returned by the critic. Authoritative when present."""
    file_type: str
    category: str
    suggested_folder: str
    confidence: float
    reasoning: str = ""
    checklist_matches: List[ChecklistMatch] = field(default_factory=list)
    correction_influence: Optional[CorrectionInfluence] = None
