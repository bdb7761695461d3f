# ============================================================================
# src/document_filing/llm/prompts.py
# ============================================================================
"""
Prompt Templates

Provides:
- Summary, classification, checklist and critic templates
- Section builders that render typed pipeline data into prompt text
- create_*_prompt helpers used by the stages
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config.limits_config import text_limit_settings
from ..core.context.checklist import ChecklistItem, ChecklistMatch, FilenameMatchResult
from ..core.context.classification import (
    ClassificationDecision,
    FileTypeDefinition,
    FilenameTypeHint,
    FolderInfo,
)
from ..core.context.summary import DocumentSummary

TRUNCATION_MARKER = "\n\n[Content truncated for analysis...]"
MAX_GUIDANCE_DEFINITIONS = 8
MAX_CRITIC_FILE_TYPES = 20
MAX_CRITIC_CHECKLIST_ITEMS = 15


@dataclass
class PromptTemplate:
    """Prompt template"""
    name: str
    template: str
    required_fields: List[str]
    optional_fields: List[str] = field(default_factory=list)

    def format(self, **kwargs) -> str:
        missing = [f for f in self.required_fields if f not in kwargs]
        if missing:
            raise ValueError(f"Missing required fields: {missing}")
        values = {f: "" for f in self.optional_fields}
        values.update(kwargs)
        return self.template.format(**values)


class FilingPrompts:
    """Templates for the four model-backed stages."""

    SUMMARY_TEMPLATE = PromptTemplate(
        name="summary",
        template="""You are a document analysis specialist. Your ONLY job is to ANALYZE and SUMMARIZE this document.
You must NOT classify or categorize - just extract information and describe what you see.
{reference_guidance}
## DOCUMENT TO ANALYZE

**Filename:** {file_name}

**Content:**
{content}

## YOUR TASK

Analyze this document thoroughly and extract all relevant information. Focus on UNDERSTANDING the document, not categorizing it.

Answer these questions in your analysis:
1. **WHAT** is this document? Describe it in your own words.
2. **WHO** is involved? Extract all names (people, companies, organizations).
3. **WHERE** is mentioned? Extract locations, addresses, properties.
4. **WHAT PROJECT(S)** are discussed? Extract project names.
5. **WHAT ARE THE KEY TERMS** used? (technical terms, industry jargon, important concepts)
6. **WHAT KEY DATES** are mentioned? ALWAYS include context for each date (e.g., "Valuation Date: 15 March 2024")
7. **WHAT FINANCIAL FIGURES** or measurements are present? ALWAYS include context for each amount (e.g., "GDV: £5.2m")
8. **WHAT IS THE PURPOSE** of this document? Why does it exist?
9. **WHAT CHARACTERISTICS** does it have? (is it financial? legal? design? etc.)

## RESPONSE FORMAT

Respond with ONLY a JSON object:
{{
  "documentDescription": "What this document IS in plain language",
  "documentPurpose": "What this document is FOR",
  "entities": {{
    "people": ["Name 1"],
    "companies": ["Company A"],
    "locations": ["123 Main St, London"],
    "projects": ["Woodside Lofts"]
  }},
  "keyTerms": ["GDV", "planning permission"],
  "keyDates": ["Report Date: March 2024"],
  "keyAmounts": ["GDV: £12.5m", "Loan Amount: £8m"],
  "executiveSummary": "2-3 sentence high-level summary of the document",
  "detailedSummary": "A full paragraph providing comprehensive summary of the document contents",
  "sectionBreakdown": ["Section 1: Introduction"],
  "documentCharacteristics": {{
    "isFinancial": false,
    "isLegal": false,
    "isIdentity": false,
    "isReport": false,
    "isDesign": true,
    "isCorrespondence": false,
    "hasMultipleProjects": false,
    "isInternal": false
  }},
  "rawContentType": "Your best description of the document type without using our taxonomy",
  "confidenceInAnalysis": 0.85
}}

IMPORTANT:
- Be THOROUGH in extraction - capture all relevant information
- For rawContentType, use YOUR OWN WORDS (e.g., "passport biodata page", "building valuation report")
- If you're unsure about something, still include it with lower confidence
- Don't leave arrays empty if there IS relevant content - extract what you can""",
        required_fields=["file_name", "content"],
        optional_fields=["reference_guidance"],
    )

    CLASSIFICATION_TEMPLATE = PromptTemplate(
        name="classification",
        template="""You are a document classification specialist for a real estate lending firm.
You will receive a SUMMARY of a document (already analyzed by another agent) and must classify it.

## DOCUMENT SUMMARY (from Analysis Agent)

**Filename:** {file_name}

{summary_section}
{filename_hint}
## CLASSIFICATION GUIDANCE

Relevant file types based on document content:

{type_guidance}
{reference_guidance}
## AVAILABLE OPTIONS

**File Types (choose the MOST SPECIFIC match):**
{file_types}

**Categories:**
{categories}

**Folders:**
{folders}

## CLASSIFICATION RULES

1. **Match rawContentType to fileType**: The AI's "rawContentType" assessment is your best guide
2. **Use characteristics to narrow down**:
   - isIdentity=true → KYC category, kyc folder
   - isFinancial=true + appraisal terms → Appraisals category
   - isLegal=true → Legal Documents category
   - isDesign=true → Plans category or Project Documents
   - hasMultipleProjects=true + company experience → likely "Track Record"
3. **Consider purpose**: What is the document FOR?
4. **Avoid "Other"**: Only use "Other" if truly unidentifiable.

## OUTPUT

Respond with ONLY a JSON object:
{{
  "fileType": "The specific file type from the list",
  "category": "The category from the list",
  "suggestedFolder": "The folder key",
  "confidence": 0.85,
  "reasoning": "2-3 sentences explaining why this classification is correct based on the summary",
  "alternativeTypes": [
    {{ "type": "Alternative Type", "confidence": 0.65, "reason": "Why this could also apply" }}
  ]
}}""",
        required_fields=["file_name", "summary_section", "type_guidance", "file_types", "categories", "folders"],
        optional_fields=["filename_hint", "reference_guidance"],
    )

    CHECKLIST_TEMPLATE = PromptTemplate(
        name="checklist",
        template="""You are a document-to-checklist matching specialist. Your ONLY task is to match this document to checklist requirements.

DOCUMENT ANALYSIS:
- Filename: {file_name}
- Classified as: {file_type} (Category: {category})
- Content preview (first {content_length} chars):
{content}

CHECKLIST REQUIREMENTS TO MATCH AGAINST:
{items}
{reference_guidance}
MATCHING RULES (BE GENEROUS - users expect clear matches to work):
1. If filename explicitly contains a requirement name or its aliases → HIGH confidence (0.85+)
2. If document TYPE matches an item's "Acceptable Document Types" → MEDIUM-HIGH confidence (0.75+)
3. If document content clearly serves the purpose described → MEDIUM confidence (0.65+)
4. If there's reasonable semantic similarity → suggest with LOWER confidence (0.50-0.65)

EXAMPLES OF MATCHES:
- "Smith_ProofOfAddress_Dec2024.pdf" → "Certified Proof of Address" (0.90)
- "Passport_JohnSmith.pdf" → "Certified Proof of ID" (0.90)
- A utility bill PDF → "Certified Proof of Address" (0.85)
- A bank statement PDF → Could match "Business Bank Statements" OR "Proof of Address" (suggest both)
- A valuation report → "Valuation Report" (0.90)

IMPORTANT: If [FILENAME HINT] scores are provided, use them as strong signals - don't contradict clear filename matches.

Return ONLY a JSON array of matches:
[
  {{ "itemId": "exact_id_from_above", "confidence": 0.85, "reasoning": "Brief explanation" }}
]

Return [] if no reasonable matches. You MAY return multiple matches if the document could fulfill multiple requirements.""",
        required_fields=["file_name", "file_type", "category", "content_length", "content", "items"],
        optional_fields=["reference_guidance"],
    )

    CRITIC_TEMPLATE = PromptTemplate(
        name="critic",
        template="""You are the FINAL DECISION MAKER for document classification with SELF-IMPROVEMENT capabilities. Your job is to review all signals and make a coherent, reasoned final decision.
{corrections_context}

## INPUT DATA

**Filename:** {file_name}

{summary_section}
{classification_reasoning}
**Initial Classification:**
- File Type: {file_type}
- Category: {category}
- Folder: {folder}
- Confidence: {confidence}

**Filename Analysis Hint:**
{filename_hint}

**Current Checklist Matches (from prior agents - MAY BE WRONG, you should OVERRIDE if incorrect):**
{checklist_matches}

⚠️ IMPORTANT: Prior agents sometimes make OBVIOUS MISTAKES. If the document is clearly a PASSPORT/ID but prior agents matched "Proof of Address", YOU MUST CORRECT THIS.

**Available File Types:** {file_types}

**Available Folders:**
{folders}

**Available Checklist Items (missing/pending only):**
{checklist_items}

## YOUR TASK

Review ALL the signals above and make the FINAL classification decision.

1. **CONSISTENCY CHECK**: Does the summary describe a document type that differs from the initial classification?
2. **FIX "Other" CLASSIFICATIONS**: If the initial classification is "Other" but the summary clearly identifies a document type, CORRECT IT.
3. **CHECKLIST MATCHING**: Match on your FINAL fileType. A PASSPORT is PROOF OF IDENTITY, NOT PROOF OF ADDRESS.
4. **FOLDER SELECTION**: KYC documents → "kyc"; valuations/appraisals → "appraisals"; financial models → "operational_model"; if unsure, "miscellaneous".

## OUTPUT

Respond with ONLY a JSON object:
{{
  "fileType": "Final file type - MUST be specific, not 'Other' if identifiable",
  "category": "Final category",
  "suggestedFolder": "Must be one of the available folder keys",
  "confidence": 0.85,
  "reasoning": "2-3 sentence explanation, especially if you changed anything or applied a learned correction",
  "checklistMatches": [
    {{ "itemId": "exact_id", "confidence": 0.90, "reasoning": "Why this matches" }}
  ],
  "correctionInfluence": {{
    "appliedCorrections": ["Correction 1"],
    "reasoning": "Why I applied these corrections (or 'No relevant past corrections')"
  }}
}}

IMPORTANT:
- Return empty checklistMatches array [] if no items match
- Be DECISIVE - if you can identify the document type from the summary, commit to it
- Your checklistMatches should ONLY include items from the available checklist items list above
- If past corrections were provided, state in reasoning whether you applied any of them""",
        required_fields=[
            "file_name", "summary_section", "file_type", "category", "folder", "confidence",
            "filename_hint", "checklist_matches", "file_types", "folders", "checklist_items",
        ],
        optional_fields=["corrections_context", "classification_reasoning"],
    )


def _join_or(values: Sequence[str], default: str) -> str:
    return ', '.join(values) if values else default


def format_folders(folders: Sequence[FolderInfo]) -> str:
    return '\n'.join(f"- {f.folder_key} ({f.level.value}): {f.name}" for f in folders)


def build_summary_section(summary: DocumentSummary, none_label: str = "None") -> str:
    """Structured rendering of a DocumentSummary shared by the classification and critic prompts."""
    entities = summary.entities
    chars = summary.characteristics
    return f"""**Document Description:** {summary.document_description}
**Document Purpose:** {summary.document_purpose}
**AI's Raw Content Type Assessment:** {summary.raw_content_type}

**Entities Found:**
- People: {_join_or(entities.people, none_label)}
- Companies: {_join_or(entities.companies, none_label)}
- Locations: {_join_or(entities.locations, none_label)}
- Projects: {_join_or(entities.projects, none_label)}

**Key Terms:** {_join_or(summary.key_terms, none_label)}
**Key Amounts:** {_join_or(summary.key_amounts, none_label)}

**Document Characteristics:**
- Financial content: {str(chars.is_financial).lower()}
- Legal document: {str(chars.is_legal).lower()}
- Identity/KYC: {str(chars.is_identity).lower()}
- Professional report: {str(chars.is_report).lower()}
- Design/Architectural: {str(chars.is_design).lower()}
- Correspondence: {str(chars.is_correspondence).lower()}
- Multi-project portfolio: {str(chars.has_multiple_projects).lower()}

**Executive Summary:** {summary.executive_summary}

**Detailed Summary:** {summary.detailed_summary}"""


def build_type_guidance(summary: DocumentSummary, definitions: Sequence[FileTypeDefinition]) -> str:
    """Short notes on the definitions whose keywords or name appear in the summary."""
    summary_text = ' '.join([
        summary.raw_content_type,
        summary.document_description,
        summary.executive_summary,
    ]).lower()

    relevant = [
        d for d in definitions
        if any(k.lower() in summary_text for k in d.keywords) or d.file_type.lower() in summary_text
    ][:MAX_GUIDANCE_DEFINITIONS]

    if not relevant:
        return "No specific guidance available - use your judgment based on the available types."

    return '\n\n'.join(
        f"**{d.file_type}** ({d.category}):\n"
        f"  Description: {d.description[:200] or 'N/A'}\n"
        f"  Key indicators: {'; '.join(d.identification_rules[:3]) or 'N/A'}"
        for d in relevant
    )


def _optional_block(text: str) -> str:
    return f"\n{text}\n" if text else ""


def create_summary_prompt(file_name: str, text: str, reference_guidance: str = "") -> str:
    limit = text_limit_settings.SUMMARY_CONTENT_LENGTH
    content = text[:limit] + (TRUNCATION_MARKER if len(text) > limit else "")
    return FilingPrompts.SUMMARY_TEMPLATE.format(
        file_name=file_name,
        content=content,
        reference_guidance=_optional_block(reference_guidance),
    )


def create_classification_prompt(
    summary: DocumentSummary,
    file_name: str,
    file_types: Sequence[str],
    categories: Sequence[str],
    folders: Sequence[FolderInfo],
    definitions: Sequence[FileTypeDefinition] = (),
    filename_hint: Optional[FilenameTypeHint] = None,
    reference_guidance: str = ""
) -> str:
    hint = ""
    if filename_hint:
        hint = (
            f"\n**Filename Pattern Hint:** The filename suggests this might be: "
            f"{filename_hint.file_type} ({filename_hint.category})\n"
            f"Reason: {filename_hint.reason}\n"
            "Note: This is just a hint - use the full summary to make your decision.\n"
        )

    return FilingPrompts.CLASSIFICATION_TEMPLATE.format(
        file_name=file_name,
        summary_section=build_summary_section(summary, none_label="None identified"),
        filename_hint=hint,
        type_guidance=build_type_guidance(summary, definitions),
        reference_guidance=_optional_block(reference_guidance),
        file_types=', '.join(file_types),
        categories=', '.join(categories),
        folders=format_folders(folders),
    )


def format_checklist_item(item: ChecklistItem, filename_match: Optional[FilenameMatchResult] = None) -> str:
    hint = (
        f" [FILENAME HINT: {filename_match.reason} - score {filename_match.score:.2f}]"
        if filename_match else ""
    )
    return (
        f"ID: {item.id}\n"
        f"Name: {item.name}\n"
        f"Category: {item.category}\n"
        f"Description: {item.description or 'No description'}\n"
        f"Acceptable Document Types: {_join_or(item.matching_document_types, 'Not specified')}{hint}"
    )


def create_checklist_prompt(
    text: str,
    file_name: str,
    file_type: str,
    category: str,
    items: Sequence[ChecklistItem],
    filename_matches: Sequence[FilenameMatchResult] = (),
    reference_guidance: str = ""
) -> str:
    by_id = {m.item_id: m for m in filename_matches}
    limit = text_limit_settings.CHECKLIST_CONTENT_LENGTH
    return FilingPrompts.CHECKLIST_TEMPLATE.format(
        file_name=file_name,
        file_type=file_type,
        category=category,
        content_length=limit,
        content=text[:limit],
        items='\n\n'.join(format_checklist_item(i, by_id.get(i.id)) for i in items),
        reference_guidance=_optional_block(reference_guidance),
    )


def create_critic_prompt(
    file_name: str,
    summary: DocumentSummary,
    decision: ClassificationDecision,
    file_types: Sequence[str],
    folders: Sequence[FolderInfo],
    checklist_items: Sequence[ChecklistItem],
    checklist_matches: Sequence[ChecklistMatch] = (),
    filename_hint: Optional[FilenameTypeHint] = None,
    corrections_context: str = "",
    classification_reasoning: Optional[str] = None
) -> str:
    types_text = ', '.join(file_types[:MAX_CRITIC_FILE_TYPES])
    if len(file_types) > MAX_CRITIC_FILE_TYPES:
        types_text += '...'

    hint_text = (
        f"Detected: {filename_hint.file_type} ({filename_hint.category}) - {filename_hint.reason}"
        if filename_hint else "No clear filename patterns detected"
    )
    matches_text = '\n'.join(
        f"- {m.item_name} ({m.confidence * 100:.0f}%): {m.reasoning or 'No reason'}"
        for m in checklist_matches
    ) or "No matches suggested"

    open_items = [i for i in checklist_items if i.is_open][:MAX_CRITIC_CHECKLIST_ITEMS]
    items_text = '\n'.join(
        f"- [{i.id}] {i.name} ({i.category}) - Matches: {_join_or(i.matching_document_types, 'unspecified')}"
        for i in open_items
    )

    return FilingPrompts.CRITIC_TEMPLATE.format(
        corrections_context=corrections_context,
        file_name=file_name,
        summary_section=build_summary_section(summary),
        classification_reasoning=(
            f"\n**Classification Agent Reasoning:** {classification_reasoning}\n"
            if classification_reasoning else ""
        ),
        file_type=decision.file_type,
        category=decision.category,
        folder=decision.suggested_folder,
        confidence=f"{decision.confidence * 100:.0f}%",
        filename_hint=hint_text,
        checklist_matches=matches_text,
        file_types=types_text,
        folders=format_folders(folders),
        checklist_items=items_text,
    )
