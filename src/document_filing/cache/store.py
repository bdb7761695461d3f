# ============================================================================
# src/document_filing/cache/store.py
# ============================================================================
"""
In-Memory Classification Cache

Stores final classifications keyed by content hash so identical documents
skip the model stages on re-upload.

Features:
- Lookups by content hash, valid entries only
- Upsert on save (re-validates an invalidated entry)
- Invalidation by hash (after a correction) or by filename pattern / age
- LRU eviction when max_size is reached
- Thread-safe operations
- Statistics

Example:
    store = ClassificationCacheStore(max_size=5000)
    store.save(content_hash, "smith passport #", classification)

    lookup = store.check(content_hash)
    if lookup.hit:
        store.record_hit(lookup.cache_id)
"""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, Optional

from ...utils.exceptions import CacheError
from ...utils.logging import get_logger
from ..core.context.pipeline_io import CachedClassification, CacheLookup


@dataclass
class CacheEntry:
    """
    One cached classification.

    Attributes:
        content_hash: Key
        file_name_pattern: Normalized filename, metadata for bulk invalidation
        classification: Cached result
        hit_count: Times the entry was served
        correction_count: Times a correction invalidated the entry
        is_valid: False once invalidated; invalid entries are never served
    """
    content_hash: str
    file_name_pattern: str
    classification: CachedClassification
    created_at: datetime
    last_hit_at: datetime
    hit_count: int = 0
    correction_count: int = 0
    is_valid: bool = True
    invalidated_at: Optional[datetime] = None
    client_type: Optional[str] = None

    def invalidate(self, now: datetime) -> None:
        self.is_valid = False
        self.invalidated_at = now


class CacheStatistics:
    """Track cache performance metrics"""

    def __init__(self):
        self.hits = 0
        self.misses = 0
        self.writes = 0
        self.evictions = 0
        self.invalidations = 0

    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "writes": self.writes,
            "evictions": self.evictions,
            "invalidations": self.invalidations,
            "hit_rate": self.hit_rate(),
        }


class ClassificationCacheStore:
    """
    Content-hash cache for final classifications.

    Concurrent identical uploads may both miss and both save; the second
    save simply overwrites the first with an equivalent classification.
    """

    def __init__(self, max_size: int = 10000):
        """
        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
        """
        if max_size < 1:
            raise CacheError(f"Cache max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStatistics()
        self.logger = get_logger(__name__)

    def check(self, content_hash: str, client_type: Optional[str] = None) -> CacheLookup:
        """
        Look up a valid entry for content_hash.

        Returns the hit count as stored; call record_hit() once the cached
        classification is actually used.
        """
        with self._lock:
            entry = self._entries.get(content_hash)
            if entry is None or not entry.is_valid:
                self._stats.misses += 1
                return CacheLookup(hit=False)

            self._entries.move_to_end(content_hash)
            self._stats.hits += 1
            return CacheLookup(
                hit=True,
                classification=entry.classification,
                hit_count=entry.hit_count,
                cache_id=entry.content_hash,
            )

    def record_hit(self, cache_id: str) -> None:
        with self._lock:
            entry = self._entries.get(cache_id)
            if entry is not None:
                entry.hit_count += 1
                entry.last_hit_at = datetime.now()

    def save(
        self,
        content_hash: str,
        file_name_pattern: str,
        classification: CachedClassification,
        client_type: Optional[str] = None
    ) -> str:
        """Insert or replace the entry for content_hash. Returns the cache id."""
        if not content_hash:
            raise CacheError("Cannot cache a classification without a content hash")
        now = datetime.now()
        with self._lock:
            existing = self._entries.get(content_hash)
            if existing is not None:
                existing.classification = classification
                existing.is_valid = True
                existing.invalidated_at = None
                existing.last_hit_at = now
                self._entries.move_to_end(content_hash)
            else:
                self._ensure_space()
                self._entries[content_hash] = CacheEntry(
                    content_hash=content_hash,
                    file_name_pattern=file_name_pattern,
                    classification=classification,
                    created_at=now,
                    last_hit_at=now,
                    client_type=client_type,
                )
            self._stats.writes += 1

        self.logger.debug(f"Cached classification {classification.file_type} for {content_hash}")
        return content_hash

    def invalidate_by_hash(self, content_hash: str) -> int:
        """Mark the entry for content_hash invalid after a correction."""
        now = datetime.now()
        with self._lock:
            entry = self._entries.get(content_hash)
            if entry is None:
                return 0
            entry.invalidate(now)
            entry.correction_count += 1
            self._stats.invalidations += 1
            return 1

    def invalidate_by_pattern(
        self,
        pattern: Optional[str] = None,
        older_than: Optional[datetime] = None,
        client_type: Optional[str] = None
    ) -> int:
        """
        Bulk invalidation.

        An entry is invalidated when its filename pattern contains pattern,
        or when it was last used before older_than. client_type narrows the
        candidates.

        Returns:
            Number of entries invalidated
        """
        now = datetime.now()
        count = 0
        with self._lock:
            for entry in self._entries.values():
                if client_type and entry.client_type != client_type:
                    continue
                matches_pattern = bool(pattern) and pattern in entry.file_name_pattern
                is_stale = older_than is not None and entry.last_hit_at < older_than
                if matches_pattern or is_stale:
                    entry.invalidate(now)
                    count += 1
            self._stats.invalidations += count

        if count:
            self.logger.info(f"Invalidated {count} cache entries")
        return count

    def get(self, content_hash: str) -> Optional[CacheEntry]:
        """Raw entry, valid or not."""
        with self._lock:
            return self._entries.get(content_hash)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.logger.info("Cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _ensure_space(self) -> None:
        while len(self._entries) >= self.max_size:
            evicted, _ = self._entries.popitem(last=False)
            self._stats.evictions += 1
            self.logger.debug(f"Evicted cache entry: {evicted}")

    def get_statistics(self) -> Dict[str, Any]:
        with self._lock:
            stats = self._stats.to_dict()
            stats["entry_count"] = len(self._entries)
            stats["valid_entries"] = sum(1 for e in self._entries.values() if e.is_valid)
            stats["max_size"] = self.max_size
            return stats
