# ============================================================================
# tests/unit/test_correction_store.py
# ============================================================================
"""
Tests for the correction store
"""

import pytest

from src.document_filing.cache.corrections import CorrectionStore
from src.document_filing.cache.hashing import generate_content_hash
from src.document_filing.cache.store import ClassificationCacheStore
from src.document_filing.core.context.corrections import (
    AIPrediction,
    ConfusionPair,
    PredictedChecklistItem,
    UserCorrection,
)
from src.document_filing.core.context.enums import CorrectionField
from src.document_filing.core.context.pipeline_io import CachedClassification


@pytest.fixture
def populated_store():
    store = CorrectionStore()
    store.record_correction(
        "Harbour_Homes_CV.pdf",
        AIPrediction("Other", "Other", "miscellaneous", 0.5),
        UserCorrection(file_type="Track Record", category="KYC"),
    )
    store.record_correction(
        "Jones_Statement.pdf",
        AIPrediction("Bank Statement", "KYC", "kyc", 0.7),
        UserCorrection(file_type="Utility Bill"),
    )
    store.record_correction(
        "Smith_Passport_Scan.pdf",
        AIPrediction("Driving License", "KYC", "kyc", 0.6),
        UserCorrection(file_type="Passport"),
    )
    store.record_correction(
        "Harbour_Homes_Appraisal.pdf",
        AIPrediction("Appraisal", "Appraisals", "appraisals", 0.8),
        UserCorrection(file_type="RedBook Valuation"),
    )
    return store


class TestRecordCorrection:
    """Test recording and cache invalidation"""

    def test_corrected_fields_derived(self):
        record = CorrectionStore().record_correction(
            "Smith_Passport.pdf",
            AIPrediction("Passport", "KYC", "kyc", 0.6),
            UserCorrection(
                file_type="Driving License",
                category="KYC",
                checklist_items=[PredictedChecklistItem("kyc-poa", "Proof of Address")],
            ),
        )
        assert record.corrected_fields == ["fileType", "checklistItems"]
        assert record.file_name_normalized == "smith passport"
        assert record.id == "correction-1"

    def test_explicit_fields_kept(self):
        record = CorrectionStore().record_correction(
            "a.pdf",
            AIPrediction("Passport", "KYC", "kyc"),
            UserCorrection(file_type="Passport"),
            corrected_fields=["folder"],
        )
        assert record.corrected_fields == ["folder"]

    def test_invalidates_cache_by_summary_hash(self):
        cache = ClassificationCacheStore()
        content_hash = generate_content_hash("Passport photo page")
        cache.save(content_hash, "smith passport", CachedClassification("Driving License", "KYC", "kyc", 0.8))

        store = CorrectionStore(cache=cache)
        store.record_correction(
            "Smith_Passport.pdf",
            AIPrediction("Driving License", "KYC", "kyc", 0.8),
            UserCorrection(file_type="Passport"),
            content_summary="Passport photo page",
        )

        assert not cache.check(content_hash).hit

    def test_invalidates_cache_by_explicit_hash(self):
        cache = ClassificationCacheStore()
        cache.save("0badc0de", "smith passport", CachedClassification("Driving License", "KYC", "kyc", 0.8))

        CorrectionStore(cache=cache).record_correction(
            "Smith_Passport.pdf",
            AIPrediction("Driving License", "KYC", "kyc", 0.8),
            UserCorrection(file_type="Passport"),
            content_hash="0badc0de",
        )

        assert cache.get("0badc0de").correction_count == 1


class TestRelevantCorrections:

    def test_strategies_and_scores(self, populated_store):
        corrections = populated_store.get_relevant_corrections("Other", "KYC", "Harbour Homes Schedule.pdf")

        assert [c.relevance_score for c in corrections] == [1.0, 0.8, 0.8, 0.7]
        assert corrections[0].file_name == "Harbour_Homes_CV.pdf"
        # Newest first within a strategy
        assert corrections[1].file_name == "Smith_Passport_Scan.pdf"
        assert corrections[3].file_name == "Harbour_Homes_Appraisal.pdf"
        assert corrections[3].match_reason == "Similar filename pattern was corrected before"

    def test_limit(self, populated_store):
        corrections = populated_store.get_relevant_corrections("Other", "KYC", "Harbour Homes.pdf", limit=2)
        assert len(corrections) == 2

    def test_empty_store(self):
        assert CorrectionStore().get_relevant_corrections("Other", "Other", "x.pdf") == []


class TestTargetedCorrections:

    def test_forward_direction(self, populated_store):
        pairs = [ConfusionPair(CorrectionField.FILE_TYPE, ["Other", "Track Record", "Bank Statement"])]
        corrections = populated_store.get_targeted_corrections(pairs)

        assert len(corrections) == 1
        assert corrections[0].match_reason == 'AI thought "Other" but correct answer was "Track Record"'

    def test_reverse_direction(self, populated_store):
        pairs = [ConfusionPair(CorrectionField.FILE_TYPE, ["Track Record", "Other"])]
        corrections = populated_store.get_targeted_corrections(pairs)
        assert corrections[0].file_name == "Harbour_Homes_CV.pdf"

    def test_category_pair(self, populated_store):
        pairs = [ConfusionPair(CorrectionField.CATEGORY, ["Other", "KYC"])]
        corrections = populated_store.get_targeted_corrections(pairs)
        assert corrections[0].relevance_score == 0.9

    def test_single_option_pair_ignored(self, populated_store):
        pairs = [ConfusionPair(CorrectionField.FILE_TYPE, ["Other"])]
        assert populated_store.get_targeted_corrections(pairs) == []


class TestConsolidatedRules:

    @pytest.fixture
    def store(self, populated_store):
        populated_store.record_correction(
            "Acme_Experience.pdf",
            AIPrediction("Other", "Other", "miscellaneous", 0.4),
            UserCorrection(file_type="Track Record", category="KYC"),
        )
        return populated_store

    def test_rules_need_two_corrections(self, store):
        rules = store.get_consolidated_rules()

        assert [(r.field, r.from_value, r.to_value) for r in rules] == [
            (CorrectionField.FILE_TYPE, "Other", "Track Record"),
            (CorrectionField.CATEGORY, "Other", "KYC"),
        ]
        assert rules[0].correction_count == 2
        assert rules[0].average_confidence == pytest.approx(0.45)
        assert rules[0].example_file_name == "Harbour_Homes_CV.pdf"

    def test_filter_by_file_type(self, store):
        rules = store.get_consolidated_rules(file_type="Passport")
        assert [r.field for r in rules] == [CorrectionField.CATEGORY]


class TestStats:

    def test_counts(self, populated_store):
        stats = populated_store.get_stats()

        assert stats["total_corrections"] == 4
        assert stats["by_field"]["fileType"] == 4
        assert stats["by_field"]["category"] == 1
        assert stats["by_category"]["KYC"] == 2
        assert len(populated_store) == 4
