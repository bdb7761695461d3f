# ============================================================================
# src/document_filing/references/registry.py
# ============================================================================
"""
Reference Registry

Immutable, process-wide collection of DocumentReference entries.

    registry = ReferenceRegistry.build(entries)   # explicit construction
    init_registry(entries)                        # install as the process default
    get_registry()                                # read
    reload_registry(loader)                       # replace after a change
    clear_registry()                              # back to the built-in catalogue
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union
import threading

from pydantic import ValidationError

from ...utils.exceptions import ReferenceRegistryError
from ...utils.logging import get_logger, log_performance
from ..core.context.classification import FileTypeDefinition
from ..core.context.enums import AIContext
from .models import DocumentReference

logger = get_logger(__name__)

ReferenceSource = Iterable[Union[DocumentReference, Mapping[str, Any]]]


class ReferenceRegistry:
    """Read-only lookup over reference entries, in insertion order."""

    def __init__(self, references: Tuple[DocumentReference, ...]):
        self._references = references
        self._by_id: Dict[str, DocumentReference] = {r.id: r for r in references}

    @classmethod
    def build(cls, entries: ReferenceSource) -> "ReferenceRegistry":
        """
        Validate entries and build a registry.

        Raises:
            ReferenceRegistryError: invalid entry or duplicate id
        """
        references: List[DocumentReference] = []
        seen = set()
        for entry in entries:
            try:
                reference = entry if isinstance(entry, DocumentReference) else DocumentReference.model_validate(entry)
            except ValidationError as e:
                raise ReferenceRegistryError(f"Invalid reference entry: {e}") from e
            if reference.id in seen:
                raise ReferenceRegistryError(f"Duplicate reference id: {reference.id}")
            seen.add(reference.id)
            references.append(reference)
        return cls(tuple(references))

    @property
    def references(self) -> Tuple[DocumentReference, ...]:
        return self._references

    def __len__(self) -> int:
        return len(self._references)

    def __iter__(self):
        return iter(self._references)

    def get(self, reference_id: str) -> Optional[DocumentReference]:
        return self._by_id.get(reference_id)

    def for_context(self, context: AIContext) -> List[DocumentReference]:
        """Active entries applicable to context."""
        return [r for r in self._references if r.applies_to(context)]

    def categories(self) -> List[str]:
        seen: List[str] = []
        for reference in self._references:
            if reference.category not in seen:
                seen.append(reference.category)
        return seen

    def file_type_definitions(self) -> List[FileTypeDefinition]:
        return [r.to_file_type_definition() for r in self._references if r.is_active]


_registry: Optional[ReferenceRegistry] = None
_registry_lock = threading.Lock()


@log_performance(logger, "Reference registry build")
def init_registry(entries: Optional[ReferenceSource] = None) -> ReferenceRegistry:
    """Build and install the process-wide registry (built-in catalogue when entries is None)."""
    global _registry
    if entries is None:
        from .catalogue import BUILTIN_REFERENCES
        entries = BUILTIN_REFERENCES
    registry = ReferenceRegistry.build(entries)
    with _registry_lock:
        _registry = registry
    logger.info(f"Reference registry initialised with {len(registry)} entries")
    return registry


def get_registry() -> ReferenceRegistry:
    """Process-wide registry, initialised from the built-in catalogue on first use."""
    if _registry is None:
        return init_registry()
    return _registry


def reload_registry(loader: Callable[[], ReferenceSource]) -> ReferenceRegistry:
    """Replace the process-wide registry with freshly loaded entries."""
    return init_registry(loader())


def clear_registry() -> None:
    global _registry
    with _registry_lock:
        _registry = None
