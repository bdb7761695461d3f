# src/document_filing/core/context/__init__.py

from .enums import (
    ConfidenceFlag,
    CorrectionTier,
    FolderLevel,
    ChecklistStatus,
    CorrectionField,
    AIContext,
    TagNamespace,
    RuleAction,
)
from .summary import DocumentSummary, DocumentEntities, DocumentCharacteristics
from .classification import (
    FolderInfo,
    FilenameTypeHint,
    AlternativeType,
    ClassificationDecision,
    LearnedKeyword,
    FileTypeDefinition,
    KeywordScore,
    VerificationAdjustment,
    VerificationResult,
    CorrectionInfluence,
    CriticDecision,
)
from .checklist import ChecklistItem, ChecklistMatch, FilenameMatchResult
from .corrections import (
    PredictedChecklistItem,
    AIPrediction,
    UserCorrection,
    PastCorrection,
    ConsolidatedRule,
    ConfusionPair,
    CorrectionContext,
)
from .pipeline_io import (
    PipelineInput,
    CachedClassification,
    CacheLookup,
    FilingResult,
    PipelineOutput,
)
from .taxonomy import FilingTaxonomy
from .processing_context import FilingContext

__all__ = [
    "ConfidenceFlag",
    "CorrectionTier",
    "FolderLevel",
    "ChecklistStatus",
    "CorrectionField",
    "AIContext",
    "TagNamespace",
    "RuleAction",
    "DocumentSummary",
    "DocumentEntities",
    "DocumentCharacteristics",
    "FolderInfo",
    "FilenameTypeHint",
    "AlternativeType",
    "ClassificationDecision",
    "LearnedKeyword",
    "FileTypeDefinition",
    "KeywordScore",
    "VerificationAdjustment",
    "VerificationResult",
    "CorrectionInfluence",
    "CriticDecision",
    "ChecklistItem",
    "ChecklistMatch",
    "FilenameMatchResult",
    "PredictedChecklistItem",
    "AIPrediction",
    "UserCorrection",
    "PastCorrection",
    "ConsolidatedRule",
    "ConfusionPair",
    "CorrectionContext",
    "PipelineInput",
    "CachedClassification",
    "CacheLookup",
    "FilingResult",
    "PipelineOutput",
    "FilingTaxonomy",
    "FilingContext",
]
