# ============================================================================
# src/document_filing/constants/__init__.py
# ============================================================================
"""
Convenient imports for all constants
"""

from .taxonomy import (
    OTHER,
    MISCELLANEOUS_FOLDER,
    DEFAULT_FILE_TYPES,
    DEFAULT_CATEGORIES,
    DEFAULT_FOLDERS,
    CATEGORY_FOLDER_MAP,
    CATEGORY_KEYWORDS,
    COMMON_CONFUSIONS,
    TYPE_ABBREVIATIONS,
    get_type_abbreviation,
)
from .filename_patterns import FILENAME_PATTERNS, CHECKLIST_PATTERN_ALIASES
