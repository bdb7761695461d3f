# ============================================================================
# src/document_filing/classifiers/filename_matcher.py
# ============================================================================
"""
Filename Pattern Matcher

Two cheap, model-free signals taken from the filename alone:
- type hint: first entry of an ordered keyword table whose keyword appears
  in the normalized filename and none of whose exclusions do
- checklist matches: per checklist item, the best of four tiers
  (item name 0.9, acceptable document type 0.85, curated alias 0.8,
  shared meaningful words 0.6)
"""

from typing import Dict, Any, List, Optional, Sequence
import logging
import re

from ..constants.filename_patterns import FILENAME_PATTERNS, CHECKLIST_PATTERN_ALIASES
from ..constants.taxonomy import CATEGORY_FOLDER_MAP, MISCELLANEOUS_FOLDER
from ..core.context.classification import FilenameTypeHint, FileTypeDefinition
from ..core.context.checklist import ChecklistItem, FilenameMatchResult

HINT_CONFIDENCE = 0.85

SCORE_ITEM_NAME = 0.9
SCORE_DOCUMENT_TYPE = 0.85
SCORE_ALIAS = 0.8
SCORE_KEYWORDS = 0.6

_SEPARATORS = re.compile(r'[_\-.]')
_WHITESPACE = re.compile(r'\s+')


def normalize_filename(file_name: str) -> str:
    """Lowercase, separators to spaces, whitespace collapsed."""
    return _WHITESPACE.sub(' ', _SEPARATORS.sub(' ', file_name.lower())).strip()


def generate_patterns_from_definitions(definitions: Sequence[FileTypeDefinition]) -> List[Dict[str, Any]]:
    """
    Build filename patterns from file-type definitions.

    Keywords are the union of base keywords, filename patterns and learned
    keywords. Inactive definitions and definitions without keywords are skipped.
    """
    patterns = []
    for definition in definitions:
        if not definition.is_active:
            continue

        keywords: List[str] = []
        candidates = (
            list(definition.keywords)
            + list(definition.filename_patterns)
            + [lk.keyword for lk in definition.learned_keywords]
        )
        for keyword in candidates:
            keyword = keyword.lower().strip()
            if keyword and keyword not in keywords:
                keywords.append(keyword)

        if not keywords:
            continue

        folder = definition.target_folder_key or CATEGORY_FOLDER_MAP.get(
            definition.category, {}
        ).get("folder", MISCELLANEOUS_FOLDER)

        patterns.append({
            "keywords": keywords,
            "file_type": definition.file_type,
            "category": definition.category,
            "folder": folder,
            "exclude_if": [p.lower() for p in definition.exclude_patterns],
        })
    return patterns


def merge_patterns(primary: List[Dict[str, Any]], fallback: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Primary patterns first, then fallback patterns for file types primary does not cover."""
    covered = {p["file_type"].lower() for p in primary}
    return primary + [p for p in fallback if p["file_type"].lower() not in covered]


class FilenameMatcher:
    """
    Filename-based type hints and checklist matching.

    Args:
        patterns: Ordered pattern table (defaults to FILENAME_PATTERNS)
        aliases: Checklist alias table (defaults to CHECKLIST_PATTERN_ALIASES)
    """

    def __init__(
        self,
        patterns: Optional[List[Dict[str, Any]]] = None,
        aliases: Optional[Dict[str, List[str]]] = None
    ):
        self.patterns = patterns if patterns is not None else FILENAME_PATTERNS
        self.aliases = aliases if aliases is not None else CHECKLIST_PATTERN_ALIASES
        self.logger = logging.getLogger(__name__)

    def get_type_hint(self, file_name: str) -> Optional[FilenameTypeHint]:
        """
        Return a type/category/folder hint for the filename, or None.

        Walks the pattern table in order. A keyword hit on a pattern whose
        exclusions are also present moves on to the next keyword/pattern.
        """
        name = normalize_filename(file_name)

        for pattern in self.patterns:
            for keyword in pattern["keywords"]:
                if keyword not in name:
                    continue
                if any(exclude in name for exclude in pattern.get("exclude_if", [])):
                    continue

                return FilenameTypeHint(
                    file_type=pattern["file_type"],
                    category=pattern["category"],
                    folder=pattern["folder"],
                    confidence=HINT_CONFIDENCE,
                    reason=f'Filename contains "{keyword}"',
                )

        return None

    def match_checklist_items(
        self,
        file_name: str,
        items: Sequence[ChecklistItem]
    ) -> List[FilenameMatchResult]:
        """Score every checklist item against the filename. Sorted by score, highest first."""
        name = normalize_filename(file_name)
        parts = name.split(' ') if name else []

        matches = []
        for item in items:
            score, reason = self._score_item(name, parts, item)
            if score > 0:
                matches.append(FilenameMatchResult(item_id=item.id, score=score, reason=reason))

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches

    def _score_item(self, name: str, parts: List[str], item: ChecklistItem):
        item_name = item.name.lower()
        best_score = 0.0
        best_reason = ""

        # Tier 1: requirement name
        compact_name = _WHITESPACE.sub(' ', item_name).replace('(', '').replace(')', '')
        if compact_name and compact_name in name:
            best_score = SCORE_ITEM_NAME
            best_reason = "Filename contains requirement name"

        # Tier 2: acceptable document types
        if best_score < SCORE_ITEM_NAME:
            for doc_type in item.matching_document_types:
                doc_type_lower = _WHITESPACE.sub(' ', doc_type.lower())
                if doc_type_lower and doc_type_lower in name and best_score < SCORE_DOCUMENT_TYPE:
                    best_score = SCORE_DOCUMENT_TYPE
                    best_reason = f"Filename matches document type: {doc_type}"

        # Tier 3: curated aliases for patterns related to this item
        for pattern_key, aliases in self.aliases.items():
            if not self._alias_relates_to_item(pattern_key, item, item_name):
                continue
            for alias in aliases:
                if (alias in name or alias in parts) and best_score < SCORE_ALIAS:
                    best_score = SCORE_ALIAS
                    best_reason = f'Filename pattern "{alias}" matches requirement'

        # Tier 4: shared meaningful words
        if best_score < SCORE_KEYWORDS:
            item_words = [w for w in item_name.split() if len(w) > 3]
            meaningful_parts = [p for p in parts if len(p) >= 4]
            matching_words = [
                word for word in item_words
                if any(self._words_overlap(word, part) for part in meaningful_parts)
            ]
            if len(matching_words) >= 2 or (matching_words and len(item_words) <= 2):
                best_score = SCORE_KEYWORDS
                best_reason = f"Filename contains keywords: {', '.join(matching_words)}"

        return best_score, best_reason

    @staticmethod
    def _alias_relates_to_item(pattern_key: str, item: ChecklistItem, item_name: str) -> bool:
        key_head = pattern_key.split(' ')[0]
        for doc_type in item.matching_document_types:
            doc_type_lower = doc_type.lower()
            if key_head in doc_type_lower or doc_type_lower.split(' ')[0] in pattern_key:
                return True
        return key_head in item_name

    @staticmethod
    def _words_overlap(word: str, part: str) -> bool:
        if part == word:
            return True
        if word in part and len(word) >= 4:
            return True
        return part in word and len(part) >= max(4, len(word) * 0.6)

    def enrich_checklist_items(self, items: Sequence[ChecklistItem], file_name: str) -> List[ChecklistItem]:
        """Copies of the items carrying their filename match score and reason (None when unmatched)."""
        by_id = {m.item_id: m for m in self.match_checklist_items(file_name, items)}
        enriched = []
        for item in items:
            match = by_id.get(item.id)
            if match:
                enriched.append(item.with_filename_match(match.score, match.reason))
            else:
                enriched.append(item.with_filename_match(None, None))
        return enriched


_default_matcher = FilenameMatcher()


def get_filename_type_hint(file_name: str) -> Optional[FilenameTypeHint]:
    return _default_matcher.get_type_hint(file_name)


def check_filename_patterns(file_name: str, items: Sequence[ChecklistItem]) -> List[FilenameMatchResult]:
    return _default_matcher.match_checklist_items(file_name, items)


def enrich_checklist_items(items: Sequence[ChecklistItem], file_name: str) -> List[ChecklistItem]:
    return _default_matcher.enrich_checklist_items(items, file_name)
