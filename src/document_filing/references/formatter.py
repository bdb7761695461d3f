# ============================================================================
# src/document_filing/references/formatter.py
# ============================================================================
"""
Prompt formatting for resolved references. Detail depends on the consuming
context: classification gets everything, filing only folder guidance.
"""

from typing import List, Sequence

from ..core.context.enums import AIContext
from .models import DocumentReference

HEADER = (
    "## Reference Library\n"
    "The following reference documents describe known file types. "
    "Use these to inform your analysis.\n\n"
)


def _first_paragraph(text: str) -> str:
    return text.split('\n\n')[0]


def _rules_with_prefix(reference: DocumentReference, *prefixes: str) -> List[str]:
    return [r for r in reference.identification_rules if r.startswith(prefixes)]


def _format_classification(ref: DocumentReference) -> str:
    parts = [
        f"### {ref.file_type} ({ref.category})",
        f"Tags: {', '.join(t.value for t in ref.tags)}",
        f"Keywords: {', '.join(ref.keywords[:15])}",
        f"Filing: {ref.filing.target_folder} ({ref.filing.target_level.value}-level)",
        "",
        ref.description,
    ]
    if ref.identification_rules:
        parts += ["", "**Identification Rules:**"]
        parts += [f"{i}. {rule}" for i, rule in enumerate(ref.identification_rules, 1)]
    if ref.disambiguation:
        parts += ["", "**Disambiguation:**"]
        parts += [f"- {d}" for d in ref.disambiguation]
    if ref.terminology:
        parts += ["", "**Key Terms:**"]
        parts += [f"- **{term}**: {meaning}" for term, meaning in list(ref.terminology.items())[:5]]
    return '\n'.join(parts)


def _format_extraction(ref: DocumentReference) -> str:
    parts = [f"### {ref.file_type} ({ref.category})", "", ref.description]
    if ref.expected_fields:
        parts += ["", "**Expected Fields:**"] + [f"- {f}" for f in ref.expected_fields]
    if ref.terminology:
        parts += ["", "**Terminology:**"]
        parts += [f"- **{term}**: {meaning}" for term, meaning in ref.terminology.items()]
    return '\n'.join(parts)


def _format_summarization(ref: DocumentReference) -> str:
    parts = [f"### {ref.file_type} ({ref.category})", "", _first_paragraph(ref.description)]
    key_rules = _rules_with_prefix(ref, "PRIMARY:", "CRITICAL:")[:3]
    if key_rules:
        parts += ["", "**Key Indicators:**"] + [f"- {r}" for r in key_rules]
    return '\n'.join(parts)


def _format_filing(ref: DocumentReference) -> str:
    parts = [f"### {ref.file_type} → {ref.filing.target_folder} ({ref.filing.target_level.value})"]
    parts += [f"- {d}" for d in ref.disambiguation[:2]]
    return '\n'.join(parts)


def _format_chat(ref: DocumentReference) -> str:
    parts = [f"### {ref.file_type} ({ref.category})", "", _first_paragraph(ref.description)]
    terms = list(ref.terminology.items())[:3]
    if terms:
        parts += ["", "**Terms:**"] + [f"- {term}: {meaning}" for term, meaning in terms]
    return '\n'.join(parts)


def _format_checklist(ref: DocumentReference) -> str:
    parts = [
        f"### {ref.file_type} ({ref.category})",
        f"Keywords: {', '.join(ref.keywords[:10])}",
        f"Filing: {ref.filing.target_folder} ({ref.filing.target_level.value})",
    ]
    parts += [f"- {r}" for r in _rules_with_prefix(ref, "PRIMARY:")[:2]]
    return '\n'.join(parts)


_FORMATTERS = {
    AIContext.CLASSIFICATION: _format_classification,
    AIContext.EXTRACTION: _format_extraction,
    AIContext.SUMMARIZATION: _format_summarization,
    AIContext.FILING: _format_filing,
    AIContext.CHAT: _format_chat,
    AIContext.MEETING: _format_chat,
    AIContext.CHECKLIST: _format_checklist,
}


def format_for_prompt(references: Sequence[DocumentReference], context: AIContext) -> str:
    """Prompt section describing references, "" when there are none."""
    if not references:
        return ""

    header = HEADER
    if context == AIContext.CLASSIFICATION:
        type_names = ', '.join(f'"{r.file_type}"' for r in references)
        header += (
            f"**Valid fileType values from these references:** {type_names}\n"
            "You MUST return one of these exact strings as the fileType. "
            "Do not use synonyms or subtypes.\n\n"
        )

    formatter = _FORMATTERS[context]
    return header + '\n\n'.join(formatter(ref) for ref in references)
