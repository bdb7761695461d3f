# ============================================================================
# src/document_filing/classifiers/canonical_matching.py
# ============================================================================
"""
Canonical Matching Cascade

Resolves a free-text label (usually a model answer) to the nearest member
of a caller-supplied enumeration. Deterministic and side-effect free.

Cascade:
1. Exact, case-insensitive          -> 1.0
2. Substring, either direction      -> 0.9
3. Keyword found in candidate/context -> 0.8
4. Token overlap ratio >= 0.3       -> ratio
5. "Other"                          -> 0.3

Folders resolve separately: category -> folder map, then substring, then
"miscellaneous", then the first folder.
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple
import re

from ..constants.taxonomy import (
    CATEGORY_FOLDER_MAP,
    CATEGORY_KEYWORDS,
    MISCELLANEOUS_FOLDER,
    OTHER,
)
from ..core.context.classification import FileTypeDefinition, FolderInfo
from ..core.context.enums import FolderLevel

EXACT_CONFIDENCE = 1.0
SUBSTRING_CONFIDENCE = 0.9
KEYWORD_CONFIDENCE = 0.8
OTHER_CONFIDENCE = 0.3
MIN_OVERLAP_RATIO = 0.3

_TOKEN_SPLIT = re.compile(r'[\s_\-]+')


def _tokens(text: str) -> List[str]:
    return [w for w in _TOKEN_SPLIT.split(text.lower()) if len(w) > 2]


def token_overlap_ratio(candidate: str, member: str) -> float:
    """
    Share of words the two labels have in common.

    A candidate word counts when it contains, or is contained in, any member
    word. Normalized by the longer of the two word lists.
    """
    candidate_words = _tokens(candidate)
    member_words = _tokens(member)
    if not candidate_words or not member_words:
        return 0.0

    overlap = [
        w for w in candidate_words
        if any(mw in w or w in mw for mw in member_words)
    ]
    return len(overlap) / max(len(candidate_words), len(member_words))


def resolve(
    candidate: str,
    context: str,
    enumeration: Sequence[str],
    keywords: Optional[Mapping[str, Sequence[str]]] = None,
    use_token_overlap: bool = True
) -> Tuple[str, float]:
    """
    Resolve candidate to a member of enumeration.

    Args:
        candidate: Label to resolve
        context: Free text searched for keywords (e.g. the detailed summary)
        enumeration: Valid values
        keywords: Value -> keywords, walked in order; values missing from
            enumeration are ignored
        use_token_overlap: Run the word-overlap tier

    Returns:
        (value, confidence); value is in enumeration or is "Other"
    """
    candidate_lower = (candidate or "").strip().lower()
    context_lower = (context or "").lower()

    if candidate_lower:
        for member in enumeration:
            if member.lower() == candidate_lower:
                return member, EXACT_CONFIDENCE

        for member in enumeration:
            member_lower = member.lower()
            if member_lower in candidate_lower or candidate_lower in member_lower:
                return member, SUBSTRING_CONFIDENCE

    for value, value_keywords in (keywords or {}).items():
        if value not in enumeration:
            continue
        for keyword in value_keywords:
            keyword_lower = keyword.lower()
            if not keyword_lower:
                continue
            if keyword_lower in context_lower or keyword_lower in candidate_lower:
                return value, KEYWORD_CONFIDENCE

    if use_token_overlap and candidate_lower:
        best_value, best_ratio = None, 0.0
        for member in enumeration:
            ratio = token_overlap_ratio(candidate_lower, member)
            if ratio > best_ratio and ratio >= MIN_OVERLAP_RATIO:
                best_value, best_ratio = member, ratio
        if best_value is not None:
            return best_value, best_ratio

    return OTHER, OTHER_CONFIDENCE


def definition_keywords(definitions: Sequence[FileTypeDefinition]) -> Dict[str, List[str]]:
    """File type -> keywords, preserving definition order (first definition per type wins)."""
    keywords: Dict[str, List[str]] = {}
    for definition in definitions:
        keywords.setdefault(definition.file_type, list(definition.keywords))
    return keywords


def find_best_type_match(
    candidate: str,
    context: str,
    file_types: Sequence[str],
    definitions: Sequence[FileTypeDefinition] = ()
) -> Tuple[str, float]:
    return resolve(candidate, context, file_types, definition_keywords(definitions))


def find_best_category_match(
    candidate: str,
    context: str,
    categories: Sequence[str],
    keywords: Optional[Mapping[str, Sequence[str]]] = None
) -> str:
    """Category resolution: exact, substring, category keywords in context, else "Other"."""
    value, _ = resolve(
        candidate,
        context,
        categories,
        keywords if keywords is not None else CATEGORY_KEYWORDS,
        use_token_overlap=False,
    )
    return value


def validate_file_type(file_type: str, file_types: Sequence[str]) -> str:
    """Exact or case-insensitive membership, else "Other"."""
    if file_type in file_types:
        return file_type
    for member in file_types:
        if member.lower() == (file_type or "").lower():
            return member
    return OTHER


def validate_category(category: str, categories: Sequence[str]) -> str:
    return validate_file_type(category, categories)


def match_category_to_folder(category: str, folders: Sequence[FolderInfo]) -> Tuple[str, FolderLevel]:
    """
    Folder for a category: static map (if that folder exists), then a folder
    key containing (or contained in) the category, then "miscellaneous",
    then the first available folder.
    """
    mapping = CATEGORY_FOLDER_MAP.get(category)
    if mapping and any(f.folder_key == mapping["folder"] for f in folders):
        return mapping["folder"], FolderLevel(mapping["level"])

    category_key = re.sub(r'\s+', '_', (category or "").lower())
    if category_key:
        for folder in folders:
            key = folder.folder_key.lower()
            if category_key in key or key in category_key:
                return folder.folder_key, folder.level

    if any(f.folder_key == MISCELLANEOUS_FOLDER for f in folders):
        return MISCELLANEOUS_FOLDER, FolderLevel.CLIENT

    if folders:
        return folders[0].folder_key, folders[0].level

    return MISCELLANEOUS_FOLDER, FolderLevel.CLIENT


def validate_folder(suggested_folder: str, category: str, folders: Sequence[FolderInfo]) -> Tuple[str, FolderLevel]:
    """Exact, case-insensitive, substring, then category-based folder."""
    suggested = suggested_folder or ""
    for folder in folders:
        if folder.folder_key == suggested:
            return folder.folder_key, folder.level

    suggested_lower = suggested.lower()
    for folder in folders:
        if folder.folder_key.lower() == suggested_lower:
            return folder.folder_key, folder.level

    if suggested_lower:
        for folder in folders:
            key = folder.folder_key.lower()
            if key in suggested_lower or suggested_lower in key:
                return folder.folder_key, folder.level

    return match_category_to_folder(category, folders)


def folder_level(folder_key: str, folders: Sequence[FolderInfo]) -> Optional[FolderLevel]:
    """Level of a folder in the taxonomy, None when the key is unknown."""
    for folder in folders:
        if folder.folder_key == folder_key:
            return folder.level
    return None
