# ============================================================================
# tests/unit/test_checklist_agent.py
# ============================================================================
"""
Tests for the checklist stage and checklist match merging
"""

import pytest

from src.document_filing.agents.checklist_agent import (
    ChecklistAgent,
    matches_from_filename,
    merge_checklist_matches,
    parse_item_matches,
)
from src.document_filing.core.context.checklist import ChecklistMatch, FilenameMatchResult
from src.document_filing.core.context.classification import ClassificationDecision


@pytest.fixture
def checklist_context(make_context, passport_text, passport_summary, checklist_items):
    context = make_context(text=passport_text, checklist_items=checklist_items)
    context.summary = passport_summary
    context.decision = ClassificationDecision("Passport", "KYC", "kyc", 0.9)
    return context


class TestChecklistAgent:
    """Test model-backed checklist matching"""

    @pytest.mark.asyncio
    async def test_no_open_items(self, fake_client_factory, make_context):
        client = fake_client_factory([[{"itemId": "x", "confidence": 0.9}]])
        matches = await ChecklistAgent(client).run(make_context())

        assert matches == []
        assert client.prompts == []

    @pytest.mark.asyncio
    async def test_only_known_open_items_kept(self, fake_client_factory, checklist_context):
        client = fake_client_factory([[
            {"itemId": "kyc-passport", "confidence": 0.95, "reasoning": "Passport photo page"},
            {"itemId": "not-an-item", "confidence": 0.9},
            {"itemId": "kyc-poa", "confidence": "high"},
            {"itemId": "kyc-old", "confidence": 0.9},
        ]])
        matches = await ChecklistAgent(client).run(checklist_context)

        assert [m.item_id for m in matches] == ["kyc-passport"]
        assert matches[0].item_name == "Passport"
        assert matches[0].category == "KYC"
        assert matches[0].reasoning == "Passport photo page"

    @pytest.mark.asyncio
    async def test_prompt_lists_open_items_with_hints(self, fake_client_factory, checklist_context):
        checklist_context.filename_matches = [
            FilenameMatchResult("kyc-passport", 0.9, "Filename contains requirement name"),
        ]
        client = fake_client_factory([[]])
        await ChecklistAgent(client).run(checklist_context)

        prompt = client.prompts[0]
        assert "ID: kyc-passport" in prompt
        assert "ID: kyc-old" not in prompt
        assert "[FILENAME HINT: Filename contains requirement name - score 0.90]" in prompt
        assert "Classified as: Passport (Category: KYC)" in prompt

    @pytest.mark.asyncio
    async def test_prose_wrapped_array(self, fake_client_factory, checklist_context):
        client = fake_client_factory(['Matches:\n[{"itemId": "kyc-passport", "confidence": 1.5}]\nDone.'])
        matches = await ChecklistAgent(client).run(checklist_context)

        assert matches[0].confidence == 1.0
        assert matches[0].reasoning == "Matched by checklist agent"

    @pytest.mark.asyncio
    async def test_fallback_uses_filename_matches(self, checklist_context):
        checklist_context.filename_matches = [
            FilenameMatchResult("kyc-passport", 0.9, "Filename contains requirement name"),
            FilenameMatchResult("kyc-poa", 0.8, 'Filename matches alias "passport"'),
            FilenameMatchResult("kyc-track-record", 0.5, "weak"),
        ]
        matches = await ChecklistAgent(None).run(checklist_context)

        assert [(m.item_id, m.confidence) for m in matches] == [("kyc-passport", 0.9), ("kyc-poa", 0.8)]
        assert checklist_context.warnings


class TestHelpers:
    """Test parsing and merge helpers"""

    def test_parse_not_a_list(self, checklist_items):
        assert parse_item_matches({"itemId": "kyc-passport"}, checklist_items, "r") == []

    def test_parse_rejects_boolean_confidence(self, checklist_items):
        assert parse_item_matches([{"itemId": "kyc-passport", "confidence": True}], checklist_items, "r") == []

    def test_matches_from_filename_unknown_item(self, checklist_items):
        matches = matches_from_filename([FilenameMatchResult("gone", 0.9, "r")], checklist_items)
        assert matches[0].item_name == "Unknown"

    def test_merge_keeps_higher_confidence(self):
        existing = [ChecklistMatch("a", 0.6, "filename")]
        new = [ChecklistMatch("a", 0.8, "model"), ChecklistMatch("b", 0.45), ChecklistMatch("c", 0.7)]

        merged = merge_checklist_matches(existing, new)

        assert [(m.item_id, m.confidence) for m in merged] == [("a", 0.8), ("c", 0.7)]
        assert merged[0].reasoning == "model"

    def test_merge_tie_keeps_existing(self):
        merged = merge_checklist_matches([ChecklistMatch("a", 0.7, "first")], [ChecklistMatch("a", 0.7, "second")])
        assert merged[0].reasoning == "first"

    def test_merge_custom_floor(self):
        merged = merge_checklist_matches([], [ChecklistMatch("a", 0.3)], min_confidence=0.2)
        assert len(merged) == 1
