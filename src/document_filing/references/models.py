# ============================================================================
# src/document_filing/references/models.py
# ============================================================================
"""
Reference Library Models

A DocumentReference describes one canonical file type: description,
identification rules, namespaced tags, keywords, filename/exclude regexes
and decision rules. Entries are validated with pydantic on load and are
immutable afterwards.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.context.classification import FileTypeDefinition
from ..core.context.enums import AIContext, FolderLevel, RuleAction, TagNamespace


class ReferenceTag(BaseModel):
    model_config = ConfigDict(frozen=True)

    namespace: TagNamespace
    value: str
    weight: float = 1.0


class DecisionRule(BaseModel):
    """IF any of `signals` THEN `action`, scaled by `priority` (1-10)."""
    model_config = ConfigDict(frozen=True)

    condition: str
    signals: List[str] = Field(default_factory=list)
    priority: int = Field(default=1, ge=1, le=10)
    action: RuleAction = RuleAction.INCLUDE


class FilingTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_folder: str
    target_level: FolderLevel = FolderLevel.PROJECT


class DocumentReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    file_type: str
    category: str
    filing: FilingTarget

    description: str = ""
    identification_rules: List[str] = Field(default_factory=list)
    disambiguation: List[str] = Field(default_factory=list)
    terminology: Dict[str, str] = Field(default_factory=dict)

    tags: List[ReferenceTag] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    filename_patterns: List[str] = Field(default_factory=list)
    exclude_patterns: List[str] = Field(default_factory=list)

    decision_rules: List[DecisionRule] = Field(default_factory=list)
    applicable_contexts: List[AIContext] = Field(default_factory=list)
    expected_fields: List[str] = Field(default_factory=list)

    source: str = "system"
    is_active: bool = True
    version: int = 1
    updated_at: Optional[str] = None

    def applies_to(self, context: AIContext) -> bool:
        return self.is_active and context in self.applicable_contexts

    def to_file_type_definition(self) -> FileTypeDefinition:
        """Keyword view of this reference for the deterministic verifier."""
        return FileTypeDefinition(
            file_type=self.file_type,
            category=self.category,
            keywords=list(self.keywords),
            description=self.description,
            identification_rules=list(self.identification_rules),
            target_folder_key=self.filing.target_folder,
            target_level=self.filing.target_level,
            filename_patterns=list(self.filename_patterns),
            exclude_patterns=list(self.exclude_patterns),
            is_active=self.is_active,
        )
