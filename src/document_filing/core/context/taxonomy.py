# ============================================================================
# src/document_filing/core/context/taxonomy.py
# ============================================================================
"""
FilingTaxonomy
- The caller's enumerations: file types, categories, folders
- File-type definitions used for keyword scoring and prompt guidance
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ...constants.taxonomy import DEFAULT_CATEGORIES, DEFAULT_FILE_TYPES, DEFAULT_FOLDERS
from .classification import FileTypeDefinition, FolderInfo
from .enums import FolderLevel


@dataclass(frozen=True)
class FilingTaxonomy:
    file_types: List[str] = field(default_factory=lambda: list(DEFAULT_FILE_TYPES))
    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    folders: List[FolderInfo] = field(
        default_factory=lambda: [FolderInfo.from_dict(f) for f in DEFAULT_FOLDERS]
    )
    definitions: List[FileTypeDefinition] = field(default_factory=list)

    @property
    def folder_keys(self) -> List[str]:
        return [f.folder_key for f in self.folders]

    def has_folder(self, folder_key: Optional[str]) -> bool:
        return any(f.folder_key == folder_key for f in self.folders)

    def folder_level(self, folder_key: str) -> Optional[FolderLevel]:
        for folder in self.folders:
            if folder.folder_key == folder_key:
                return folder.level
        return None

    @property
    def active_definitions(self) -> List[FileTypeDefinition]:
        return [d for d in self.definitions if d.is_active]
