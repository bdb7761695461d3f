# ============================================================================
# tests/unit/test_correction_tiers.py
# ============================================================================
"""
Tests for correction tier selection and correction prompt sections
"""

import pytest

from src.document_filing.classifiers.correction_tiers import (
    build_smart_corrections_context,
    determine_correction_tier,
    extract_confusion_pairs,
)
from src.document_filing.core.context.classification import AlternativeType, ClassificationDecision
from src.document_filing.core.context.corrections import (
    AIPrediction,
    ConfusionPair,
    ConsolidatedRule,
    PastCorrection,
    UserCorrection,
)
from src.document_filing.core.context.enums import CorrectionField, CorrectionTier


def past_correction(predicted, corrected, file_name="Harbour_Homes.pdf", relevance=1.0):
    return PastCorrection(
        ai_prediction=AIPrediction(predicted, "Other", "miscellaneous", 0.5),
        user_correction=UserCorrection(file_type=corrected, category="KYC"),
        file_name=file_name,
        match_reason="Same AI-predicted file type",
        relevance_score=relevance,
    )


class TestTierSelection:
    """Test confidence to tier mapping"""

    @pytest.mark.parametrize("confidence,has_alternatives,expected", [
        (0.95, False, CorrectionTier.NONE),
        (0.95, True, CorrectionTier.CONSOLIDATED),
        (0.86, False, CorrectionTier.NONE),
        (0.85, False, CorrectionTier.CONSOLIDATED),
        (0.65, False, CorrectionTier.CONSOLIDATED),
        (0.6, False, CorrectionTier.TARGETED),
        (0.5, False, CorrectionTier.TARGETED),
        (0.49, False, CorrectionTier.FULL),
        (0.3, False, CorrectionTier.FULL),
    ])
    def test_tiers(self, confidence, has_alternatives, expected):
        assert determine_correction_tier(confidence, has_alternatives) == expected


class TestConfusionPairs:
    """Test confusion pair extraction"""

    def test_from_alternatives(self):
        decision = ClassificationDecision(
            "Bank Statement", "KYC", "kyc", 0.6,
            alternative_types=[AlternativeType("Utility Bill", 0.3), AlternativeType("Bank Statement", 0.1)],
        )
        pairs = extract_confusion_pairs(decision)
        assert pairs == [ConfusionPair(CorrectionField.FILE_TYPE, ["Bank Statement", "Utility Bill"])]

    def test_static_table(self):
        decision = ClassificationDecision("Other", "Other", "miscellaneous", 0.4)
        pairs = extract_confusion_pairs(decision)
        assert pairs[0].options == ["Other", "Track Record", "Bank Statement", "ID Document"]

    def test_alternatives_take_precedence(self):
        decision = ClassificationDecision(
            "Track Record", "KYC", "kyc", 0.6,
            alternative_types=[AlternativeType("Appraisal", 0.3)],
        )
        pairs = extract_confusion_pairs(decision)
        assert len(pairs) == 1
        assert pairs[0].options == ["Track Record", "Appraisal"]

    def test_no_pairs(self):
        assert extract_confusion_pairs(ClassificationDecision("Passport", "KYC", "kyc", 0.6)) == []


class TestCorrectionsContext:
    """Test prompt sections per tier"""

    @pytest.fixture
    def rules(self):
        return [
            ConsolidatedRule(CorrectionField.FILE_TYPE, "Other", "Track Record", 3),
            ConsolidatedRule(CorrectionField.FILE_TYPE, "Invoice", "Receipt", 2, average_confidence=0.55),
        ]

    def test_none_tier_is_empty(self, rules):
        assert build_smart_corrections_context(CorrectionTier.NONE, consolidated_rules=rules) == ""

    def test_consolidated(self, rules):
        text = build_smart_corrections_context(CorrectionTier.CONSOLIDATED, consolidated_rules=rules)
        assert "LEARNED PATTERNS (from 5 past corrections)" in text
        assert "• Other → Track Record (3x, ~70% conf)" in text
        assert text.index("Other → Track Record") < text.index("Invoice → Receipt")

    def test_consolidated_without_rules(self):
        assert build_smart_corrections_context(CorrectionTier.CONSOLIDATED) == ""

    def test_targeted(self, rules):
        pairs = [ConfusionPair(CorrectionField.FILE_TYPE, ["Other", "Track Record"])]
        text = build_smart_corrections_context(
            CorrectionTier.TARGETED,
            past_corrections=[past_correction("Other", "Track Record")],
            consolidated_rules=rules,
            confusion_pairs=pairs,
        )
        assert "TARGETED CORRECTIONS (for your uncertainty: fileType: Other vs Track Record)" in text
        assert '**Harbour_Homes.pdf**: fileType: "Other" → "Track Record"' in text

    def test_targeted_falls_back_to_rules(self, rules):
        pairs = [ConfusionPair(CorrectionField.FILE_TYPE, ["Lease", "Title Deed"])]
        text = build_smart_corrections_context(
            CorrectionTier.TARGETED,
            past_corrections=[past_correction("Other", "Track Record")],
            consolidated_rules=rules,
            confusion_pairs=pairs,
        )
        assert "LEARNED PATTERNS" in text

    def test_full(self):
        text = build_smart_corrections_context(
            CorrectionTier.FULL,
            past_corrections=[past_correction("Other", "Track Record", relevance=0.8)],
        )
        assert "LEARNING FROM PAST MISTAKES" in text
        assert "### Correction 1 (Relevance: 80%)" in text
        assert "I MUST apply the learned correction" in text

    def test_full_without_corrections(self):
        assert build_smart_corrections_context(CorrectionTier.FULL) == ""
