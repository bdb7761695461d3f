# ============================================================================
# TEST 3: Filing Context
# ============================================================================

from src.document_filing.core.context.checklist import ChecklistItem, ChecklistMatch
from src.document_filing.core.context.enums import ChecklistStatus, ConfidenceFlag, FolderLevel
from src.document_filing.core.context.pipeline_io import FilingResult, PipelineInput
from src.document_filing.core.context.processing_context import FilingContext
from src.document_filing.core.context.summary import DocumentCharacteristics, DocumentSummary
from src.document_filing.core.context.taxonomy import FilingTaxonomy


def test_context():
    """Test FilingContext creation and manipulation"""
    print("=" * 70)
    print("TEST 3: Filing Context")
    print("=" * 70)

    item = ChecklistItem(id="kyc-passport", name="Passport", category="KYC")
    ctx = FilingContext(
        input=PipelineInput(extracted_text="PASSPORT", file_name="Smith_Passport.pdf"),
        checklist_items=[item],
    )

    print(f"✓ Context created for: {ctx.file_name}")
    assert ctx.text == "PASSPORT"
    assert ctx.item_by_id("kyc-passport") is item
    assert ctx.item_by_id("kyc-missing") is None

    ctx.add_warning("summary failed: timeout")
    ctx.log_stage_execution("summary", {"outcome": "fallback", "duration_seconds": 0.2})
    print(f"✓ Added warnings and stage log")
    print(f"  - Warnings: {ctx.warnings}")
    print(f"  - Stage log: {ctx.stage_log}")

    assert ctx.warnings == ["summary failed: timeout"]
    assert ctx.stage_log == [{"stage": "summary", "outcome": "fallback", "duration_seconds": 0.2}]

    print("\n✅ Filing Context test PASSED\n")


def test_summary_from_response_defaults():
    summary = DocumentSummary.from_response({
        "keyTerms": ["passport", None, "  ", 42],
        "entities": "not a dict",
        "documentCharacteristics": {"isIdentity": 1, "isLegal": 0},
        "confidenceInAnalysis": "high",
        "sectionBreakdown": ["Photo page"],
    })

    assert summary.document_description == "Unable to determine"
    assert summary.executive_summary == "No summary available"
    assert summary.raw_content_type == "Unknown document"
    assert summary.key_terms == ["passport", "42"]
    assert summary.entities.people == []
    assert summary.characteristics.active_flags() == ["identity"]
    assert summary.confidence_in_analysis == 0.5
    assert summary.section_breakdown == ["Photo page"]


def test_summary_confidence_clamped():
    assert DocumentSummary.from_response({"confidenceInAnalysis": 3}).confidence_in_analysis == 1.0
    assert DocumentSummary.from_response({"confidenceInAnalysis": float("nan")}).confidence_in_analysis == 0.5


def test_no_active_flags():
    assert DocumentCharacteristics().active_flags() == []


def test_checklist_item_open_states():
    item = ChecklistItem(id="a", name="A", category="KYC")
    assert item.is_open
    assert ChecklistItem(id="b", name="B", category="KYC", status=ChecklistStatus.PENDING_REVIEW).is_open
    assert not ChecklistItem(id="c", name="C", category="KYC", status=ChecklistStatus.FULFILLED).is_open

    enriched = item.with_filename_match(0.9, "Filename contains: passport")
    assert enriched.filename_match_score == 0.9
    assert item.filename_match_score is None
    assert enriched.to_dict()["status"] == "missing"


def test_filing_result_dict():
    result = FilingResult(
        file_type="Passport",
        category="KYC",
        suggested_folder="kyc",
        target_level=FolderLevel.CLIENT,
        confidence=0.9,
        confidence_flag=ConfidenceFlag.HIGH,
        suggested_checklist_items=[ChecklistMatch(item_id="kyc-passport", confidence=0.9)],
    )
    data = result.to_dict()

    assert data["target_level"] == "client"
    assert data["confidence_flag"] == "high"
    assert data["suggested_checklist_items"][0]["item_id"] == "kyc-passport"
    assert data["requires_review"] is True


def test_taxonomy_helpers():
    taxonomy = FilingTaxonomy()

    assert taxonomy.has_folder("kyc")
    assert not taxonomy.has_folder("archive")
    assert not taxonomy.has_folder(None)
    assert taxonomy.folder_level("kyc") == FolderLevel.CLIENT
    assert taxonomy.folder_level("appraisals") == FolderLevel.PROJECT
    assert taxonomy.folder_level("archive") is None
    assert "miscellaneous" in taxonomy.folder_keys
    assert taxonomy.active_definitions == []
