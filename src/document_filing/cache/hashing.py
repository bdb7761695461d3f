# ============================================================================
# src/document_filing/cache/hashing.py
# ============================================================================
"""
Content hashing and filename normalization for the classification cache
and the correction store.

The hash is djb2 over UTF-16 code units of the lowercased, stripped text
prefix, reduced to a signed 32-bit integer and rendered as at least eight
hex digits. Hashes are stable across processes and hosts.
"""

import re
from typing import Optional

from ..config.limits_config import text_limit_settings

_EXTENSION = re.compile(r'\.[^.]+$')
_UUID = re.compile(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}')
# Hex runs of 8+ containing a digit
_HEX_RUN = re.compile(r'(?<![0-9a-z])(?=[a-f]*\d)[0-9a-f]{8,}(?![0-9a-z])')
_SEPARATORS = re.compile(r'[_\-.]')
_DIGITS = re.compile(r'\d+')
_WHITESPACE = re.compile(r'\s+')


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def generate_content_hash(content: str, prefix_length: Optional[int] = None) -> str:
    """djb2 hash of the first prefix_length characters of content."""
    limit = text_limit_settings.CACHE_HASH_PREFIX if prefix_length is None else prefix_length
    normalized = (content or "")[:limit].lower().strip()

    encoded = normalized.encode('utf-16-le')
    code_units = (
        int.from_bytes(encoded[i:i + 2], 'little')
        for i in range(0, len(encoded), 2)
    )

    value = 5381
    for unit in code_units:
        value = _to_int32((value << 5) + value + unit)

    return format(abs(value), 'x').zfill(8)


def normalize_filename(file_name: str) -> str:
    """
    Filename reduced to its pattern: lowercase, no extension, separators
    as spaces, UUIDs, long hex runs and digit runs as '#'.

        "Smith_Passport_2024.pdf" -> "smith passport #"
        "invoice_3f2a9c1e7b.pdf"  -> "invoice #"
    """
    name = (file_name or "").lower()
    name = _EXTENSION.sub("", name)
    name = _UUID.sub("#", name)
    name = _SEPARATORS.sub(" ", name)
    name = _HEX_RUN.sub("#", name)
    name = _DIGITS.sub("#", name)
    return _WHITESPACE.sub(" ", name).strip()


def normalize_filename_for_cache(file_name: str) -> str:
    """Pattern stored next to a cache entry; used for bulk invalidation only."""
    return normalize_filename(file_name)
