# src/document_filing/references/__init__.py

"""Reference library: models, immutable registry, resolver and prompt formatter."""

from .models import DocumentReference, ReferenceTag, DecisionRule, FilingTarget
from .registry import (
    ReferenceRegistry,
    init_registry,
    get_registry,
    reload_registry,
    clear_registry,
)
from .resolver import (
    ReferenceResolver,
    ResolvedReference,
    ResolvedResult,
    BatchDocument,
    resolve_references,
)
from .formatter import format_for_prompt

__all__ = [
    'DocumentReference',
    'ReferenceTag',
    'DecisionRule',
    'FilingTarget',
    'ReferenceRegistry',
    'init_registry',
    'get_registry',
    'reload_registry',
    'clear_registry',
    'ReferenceResolver',
    'ResolvedReference',
    'ResolvedResult',
    'BatchDocument',
    'resolve_references',
    'format_for_prompt',
]
