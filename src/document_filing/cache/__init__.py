# src/document_filing/cache/__init__.py

from .hashing import generate_content_hash, normalize_filename, normalize_filename_for_cache
from .store import ClassificationCacheStore, CacheEntry
from .corrections import CorrectionStore, CorrectionRecord

__all__ = [
    "generate_content_hash",
    "normalize_filename",
    "normalize_filename_for_cache",
    "ClassificationCacheStore",
    "CacheEntry",
    "CorrectionStore",
    "CorrectionRecord",
]
