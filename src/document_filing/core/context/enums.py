# ============================================================================
# src/document_filing/core/context/enums.py
# ============================================================================
"""
Pipeline Enums
- Confidence bands
- Correction retrieval tiers
- Folder levels and checklist statuses
- Reference registry vocabularies
"""

from enum import Enum

class ConfidenceFlag(str, Enum):
    HIGH = "high"       # >= 0.85, no review
    MEDIUM = "medium"   # 0.65 - 0.85, review recommended
    LOW = "low"         # < 0.65, review required

class CorrectionTier(str, Enum):
    NONE = "none"
    CONSOLIDATED = "consolidated"
    TARGETED = "targeted"
    FULL = "full"

class FolderLevel(str, Enum):
    CLIENT = "client"
    PROJECT = "project"

class ChecklistStatus(str, Enum):
    MISSING = "missing"
    PENDING_REVIEW = "pending_review"
    FULFILLED = "fulfilled"

class CorrectionField(str, Enum):
    FILE_TYPE = "fileType"
    CATEGORY = "category"
    FOLDER = "folder"

class AIContext(str, Enum):
    CLASSIFICATION = "classification"
    SUMMARIZATION = "summarization"
    FILING = "filing"
    EXTRACTION = "extraction"
    CHAT = "chat"
    CHECKLIST = "checklist"
    MEETING = "meeting"

class TagNamespace(str, Enum):
    CONTEXT = "context"
    SIGNAL = "signal"
    DOMAIN = "domain"
    TYPE = "type"
    TRIGGER = "trigger"

class RuleAction(str, Enum):
    INCLUDE = "include"
    BOOST = "boost"
    REQUIRE = "require"
