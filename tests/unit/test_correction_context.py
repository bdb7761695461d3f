# ============================================================================
# tests/unit/test_correction_context.py
# ============================================================================
"""
Tests for correction retrieval and host collaborator calls
"""

import logging

import pytest

from src.document_filing.cache.corrections import CorrectionStore
from src.document_filing.core.collaborators import invoke_collaborator
from src.document_filing.core.context.classification import ClassificationDecision
from src.document_filing.core.context.corrections import AIPrediction, UserCorrection
from src.document_filing.core.context.enums import CorrectionTier
from src.document_filing.core.correction_context import retrieve_correction_context


@pytest.fixture
def correction_store():
    store = CorrectionStore()
    for name in ("Harbour_Homes_CV.pdf", "Acme_Experience.pdf"):
        store.record_correction(
            name,
            AIPrediction("Other", "Other", "miscellaneous", 0.5),
            UserCorrection(file_type="Track Record", category="KYC"),
        )
    return store


@pytest.fixture
def other_decision():
    return ClassificationDecision("Other", "Other", "miscellaneous", 0.5)


class TestInvokeCollaborator:

    @pytest.mark.asyncio
    async def test_missing_callback(self):
        assert await invoke_collaborator(None, "fetch", default=[]) == []

    @pytest.mark.asyncio
    async def test_sync_callback(self):
        assert await invoke_collaborator(lambda limit: list(range(limit)), "fetch", limit=3) == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_async_callback(self):
        async def fetch(value):
            return value * 2

        assert await invoke_collaborator(fetch, "fetch", value=21) == 42

    @pytest.mark.asyncio
    async def test_none_result_becomes_default(self):
        assert await invoke_collaborator(lambda: None, "fetch", default=[]) == []

    @pytest.mark.asyncio
    async def test_failure_logged_and_defaulted(self, caplog):
        def broken():
            raise ConnectionError("database unavailable")

        with caplog.at_level(logging.WARNING):
            result = await invoke_collaborator(broken, "Corrections fetch", default=[])

        assert result == []
        assert "Corrections fetch failed: database unavailable" in caplog.text


class TestRetrieveCorrectionContext:
    """Test tier-driven retrieval"""

    @pytest.mark.asyncio
    async def test_none_tier_fetches_nothing(self, other_decision):
        calls = []
        context = await retrieve_correction_context(
            CorrectionTier.NONE,
            other_decision,
            "scan.pdf",
            fetch_corrections=lambda **kw: calls.append(kw),
        )
        assert context.is_empty
        assert calls == []

    @pytest.mark.asyncio
    async def test_consolidated(self, correction_store, other_decision):
        context = await retrieve_correction_context(
            CorrectionTier.CONSOLIDATED,
            other_decision,
            "scan.pdf",
            fetch_consolidated_rules=correction_store.get_consolidated_rules,
        )
        assert [r.to_value for r in context.consolidated_rules] == ["Track Record", "KYC"]
        assert context.past_corrections == []

    @pytest.mark.asyncio
    async def test_targeted(self, correction_store, other_decision):
        context = await retrieve_correction_context(
            CorrectionTier.TARGETED,
            other_decision,
            "scan.pdf",
            fetch_consolidated_rules=correction_store.get_consolidated_rules,
            fetch_targeted_corrections=correction_store.get_targeted_corrections,
        )
        assert context.confusion_pairs[0].options[:2] == ["Other", "Track Record"]
        assert len(context.past_corrections) == 2
        assert context.consolidated_rules

    @pytest.mark.asyncio
    async def test_targeted_without_pairs_skips_fetch(self):
        calls = []
        decision = ClassificationDecision("Passport", "KYC", "kyc", 0.55)
        context = await retrieve_correction_context(
            CorrectionTier.TARGETED,
            decision,
            "scan.pdf",
            fetch_targeted_corrections=lambda **kw: calls.append(kw),
        )
        assert calls == []
        assert context.confusion_pairs == []

    @pytest.mark.asyncio
    async def test_full_with_async_callback(self, correction_store, other_decision):
        async def fetch_corrections(**kwargs):
            return correction_store.get_relevant_corrections(**kwargs)

        context = await retrieve_correction_context(
            CorrectionTier.FULL,
            other_decision,
            "Harbour_Homes_Schedule.pdf",
            fetch_corrections=fetch_corrections,
        )
        assert len(context.past_corrections) == 2
        assert context.past_corrections[0].relevance_score == 1.0

    @pytest.mark.asyncio
    async def test_failing_callback_yields_empty(self, other_decision):
        async def fetch_corrections(**kwargs):
            raise TimeoutError("slow database")

        context = await retrieve_correction_context(
            CorrectionTier.FULL,
            other_decision,
            "scan.pdf",
            fetch_corrections=fetch_corrections,
        )
        assert context.past_corrections == []
        assert context.tier == CorrectionTier.FULL
