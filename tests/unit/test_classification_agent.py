# ============================================================================
# tests/unit/test_classification_agent.py
# ============================================================================
"""
Tests for the classification stage
"""

import pytest

from src.document_filing.agents.classification_agent import (
    FAILED_REASONING,
    FALLBACK_REASONING,
    ClassificationAgent,
    fallback_classification,
    parse_alternatives,
)
from src.document_filing.core.context.classification import FolderInfo
from src.document_filing.core.context.enums import FolderLevel
from src.document_filing.core.context.summary import DocumentCharacteristics
from src.document_filing.core.events import RecordingEventEmitter, StageOutcome
from src.utils.exceptions import TransientServiceError


@pytest.fixture
def classified_context(make_context, passport_summary):
    context = make_context()
    context.summary = passport_summary
    return context


class TestClassificationAgent:
    """Test model-backed classification"""

    @pytest.mark.asyncio
    async def test_labels_resolved_into_taxonomy(self, fake_client_factory, classified_context):
        client = fake_client_factory([{
            "fileType": "passport",
            "category": "kyc",
            "suggestedFolder": "KYC",
            "confidence": 0.92,
            "reasoning": "MRZ and photo page",
        }])
        decision = await ClassificationAgent(client).run(classified_context)

        assert decision.file_type == "Passport"
        assert decision.category == "KYC"
        assert decision.suggested_folder == "kyc"
        assert decision.confidence == 0.92
        assert decision.reasoning == "MRZ and photo page"

    @pytest.mark.asyncio
    async def test_prompt_lists_taxonomy(self, fake_client_factory, classified_context):
        client = fake_client_factory([{"fileType": "Passport", "category": "KYC", "suggestedFolder": "kyc"}])
        await ClassificationAgent(client).run(classified_context)

        prompt = client.prompts[0]
        assert "Smith_Passport.pdf" in prompt
        assert "Certificate of Incorporation" in prompt
        assert "terms_comparison" in prompt

    @pytest.mark.asyncio
    async def test_missing_confidence_defaults(self, fake_client_factory, classified_context):
        client = fake_client_factory([{"fileType": "Passport", "category": "KYC", "suggestedFolder": "kyc"}])
        decision = await ClassificationAgent(client).run(classified_context)

        assert decision.confidence == 0.7
        assert decision.reasoning == "Classification based on document analysis"

    @pytest.mark.asyncio
    async def test_confidence_clamped(self, fake_client_factory, classified_context):
        client = fake_client_factory([{"fileType": "Passport", "category": "KYC", "confidence": 1.4}])
        decision = await ClassificationAgent(client).run(classified_context)
        assert decision.confidence == 1.0

    @pytest.mark.asyncio
    async def test_unknown_folder_from_category(self, fake_client_factory, classified_context):
        client = fake_client_factory([{"fileType": "Passport", "category": "KYC", "suggestedFolder": "ids"}])
        decision = await ClassificationAgent(client).run(classified_context)
        assert decision.suggested_folder == "kyc"

    @pytest.mark.asyncio
    async def test_alternatives_parsed(self, fake_client_factory, classified_context):
        client = fake_client_factory([{
            "fileType": "Passport",
            "category": "KYC",
            "suggestedFolder": "kyc",
            "confidence": 0.6,
            "alternativeTypes": [{"type": "Driving License", "confidence": 0.3, "reason": "photo ID"}],
        }])
        decision = await ClassificationAgent(client).run(classified_context)

        assert decision.has_alternatives
        assert decision.alternative_types[0].type == "Driving License"

    @pytest.mark.asyncio
    async def test_service_failure_uses_characteristics(self, fake_client_factory, classified_context):
        client = fake_client_factory([TransientServiceError("503", status=503)])
        emitter = RecordingEventEmitter()

        decision = await ClassificationAgent(client, emitter=emitter).run(classified_context)

        assert decision.file_type == "ID Document"
        assert decision.category == "KYC"
        assert decision.suggested_folder == "kyc"
        assert decision.confidence == 0.4
        assert decision.reasoning == FALLBACK_REASONING
        assert emitter.events[0].outcome == StageOutcome.FALLBACK

    @pytest.mark.asyncio
    async def test_unparseable_response_uses_characteristics(self, fake_client_factory, classified_context):
        client = fake_client_factory(["I think it is a passport"])
        decision = await ClassificationAgent(client).run(classified_context)
        assert decision.file_type == "ID Document"

    @pytest.mark.asyncio
    async def test_unexpected_error(self, fake_client_factory, classified_context):
        client = fake_client_factory([RuntimeError("boom")])
        decision = await ClassificationAgent(client).run(classified_context)

        assert decision.file_type == "Other"
        assert decision.suggested_folder == "miscellaneous"
        assert decision.confidence == 0.3
        assert decision.reasoning == FAILED_REASONING

    @pytest.mark.asyncio
    async def test_no_client(self, make_context, blank_summary):
        context = make_context(file_name="scan.pdf")
        context.summary = blank_summary

        decision = await ClassificationAgent(None).run(context)

        assert decision.file_type == "Other"
        assert decision.confidence == 0.4


class TestFallbackClassification:
    """Test characteristic-flag fallbacks"""

    def test_first_flag_wins(self, taxonomy):
        flags = DocumentCharacteristics(is_financial=True, is_legal=True)
        decision = fallback_classification(flags, taxonomy.folders)
        assert decision.file_type == "Financial Document"
        assert decision.suggested_folder == "operational_model"

    def test_multi_project(self, taxonomy):
        decision = fallback_classification(DocumentCharacteristics(has_multiple_projects=True), taxonomy.folders)
        assert decision.file_type == "Track Record"

    def test_missing_folder_goes_to_miscellaneous(self):
        folders = [
            FolderInfo("appraisals", "Appraisals"),
            FolderInfo("miscellaneous", "Miscellaneous", FolderLevel.CLIENT),
        ]
        decision = fallback_classification(DocumentCharacteristics(is_identity=True), folders)
        assert decision.suggested_folder == "miscellaneous"

    def test_missing_folder_without_miscellaneous(self):
        folders = [FolderInfo("appraisals", "Appraisals")]
        decision = fallback_classification(DocumentCharacteristics(is_identity=True), folders)
        assert decision.suggested_folder == "appraisals"


class TestParseAlternatives:

    def test_invalid_entries_skipped(self):
        alternatives = parse_alternatives([
            {"type": "Driving License", "confidence": 0.2, "reason": "photo"},
            {"type": ""},
            "Utility Bill",
            {"type": "Utility Bill", "confidence": "high"},
        ])
        assert [a.type for a in alternatives] == ["Driving License", "Utility Bill"]
        assert alternatives[1].confidence == 0.0

    def test_not_a_list(self):
        assert parse_alternatives({"type": "Passport"}) == []
