# ============================================================================
# tests/unit/test_references.py
# ============================================================================
"""
Tests for the reference registry, resolver and prompt formatter
"""

import pytest

from src.document_filing.core.context.enums import AIContext
from src.document_filing.references import (
    BatchDocument,
    ReferenceRegistry,
    ReferenceResolver,
    clear_registry,
    format_for_prompt,
    get_registry,
    init_registry,
    reload_registry,
)
from src.utils.exceptions import ReferenceRegistryError


def entry(ref_id, file_type, category, **kwargs):
    data = {
        "id": ref_id,
        "file_type": file_type,
        "category": category,
        "filing": {"target_folder": "background", "target_level": "project"},
        "applicable_contexts": ["classification"],
    }
    data.update(kwargs)
    return data


class TestRegistry:
    """Test registry construction and lookups"""

    def test_builtin_catalogue(self):
        registry = get_registry()
        passport = registry.get("passport")

        assert passport.file_type == "Passport"
        assert passport.filing.target_folder == "kyc"
        assert "KYC" in registry.categories()
        assert registry.get("missing") is None

    def test_invalid_entry(self):
        with pytest.raises(ReferenceRegistryError, match="Invalid reference entry"):
            ReferenceRegistry.build([{"id": "broken"}])

    def test_invalid_priority(self):
        bad = entry("lease", "Lease", "Legal Documents", decision_rules=[{"condition": "x", "priority": 11}])
        with pytest.raises(ReferenceRegistryError):
            ReferenceRegistry.build([bad])

    def test_duplicate_id(self):
        with pytest.raises(ReferenceRegistryError, match="Duplicate reference id: lease"):
            ReferenceRegistry.build([entry("lease", "Lease", "Legal"), entry("lease", "Lease", "Legal")])

    def test_entries_are_immutable(self):
        registry = ReferenceRegistry.build([entry("lease", "Lease", "Legal Documents")])
        with pytest.raises(Exception):
            registry.get("lease").file_type = "Other"

    def test_for_context_skips_inactive(self):
        registry = ReferenceRegistry.build([
            entry("lease", "Lease", "Legal Documents"),
            entry("old", "Old", "Legal Documents", is_active=False),
            entry("chat-only", "Note", "Other", applicable_contexts=["chat"]),
        ])
        assert [r.id for r in registry.for_context(AIContext.CLASSIFICATION)] == ["lease"]
        assert [d.file_type for d in registry.file_type_definitions()] == ["Lease", "Note"]

    def test_init_reload_clear(self):
        custom = init_registry([entry("lease", "Lease", "Legal Documents")])
        assert get_registry() is custom

        reloaded = reload_registry(lambda: [entry("deed", "Title Deed", "Legal Documents")])
        assert get_registry() is reloaded
        assert reloaded.get("lease") is None

        clear_registry()
        assert get_registry().get("passport") is not None

    def test_definitions_from_catalogue(self):
        definitions = {d.file_type: d for d in get_registry().file_type_definitions()}
        passport = definitions["Passport"]

        assert "mrz" in passport.keywords
        assert passport.target_folder_key == "kyc"
        assert "driving" in passport.exclude_patterns


class TestResolver:
    """Test reference ranking"""

    def test_passport_ranked_first(self, passport_text):
        result = ReferenceResolver(get_registry()).resolve(
            AIContext.CLASSIFICATION,
            signals=["identity"],
            document_type="Passport",
            category="KYC",
            text_sample=passport_text,
            file_name="Smith_Passport.pdf",
        )
        assert result.references[0].id == "passport"
        assert "type-match:Passport" in result.scores[0].match_reasons
        assert "filename-pattern:passport" in result.scores[0].match_reasons

    def test_weak_entries_dropped(self):
        registry = ReferenceRegistry.build([
            entry("lease", "Lease", "Legal Documents", filename_patterns=["lease"]),
            entry("deed", "Title Deed", "Legal Documents"),
        ])
        result = ReferenceResolver(registry).resolve(AIContext.CLASSIFICATION, file_name="Unit_4_Lease.pdf")
        assert [r.id for r in result.references] == ["lease"]
        assert result.scores[0].score == 15

    def test_exclude_pattern_penalty(self):
        registry = ReferenceRegistry.build([
            entry("lease", "Lease", "Legal Documents", filename_patterns=["lease"], exclude_patterns=["draft"]),
        ])
        scored = ReferenceResolver(registry).score_reference(
            registry.get("lease"), AIContext.CLASSIFICATION, file_name="draft_lease.pdf"
        )
        assert scored.score == 0
        assert "excluded:draft" in scored.match_reasons

    def test_weak_top_score_falls_back(self):
        registry = ReferenceRegistry.build([
            entry("lease", "Lease", "Legal Documents",
                  tags=[{"namespace": "context", "value": "classification", "weight": 1.0}]),
            entry("invoice", "Invoice", "Financial Documents"),
        ])
        result = ReferenceResolver(registry).resolve(AIContext.CLASSIFICATION)

        assert [r.id for r in result.references] == ["lease", "invoice"]
        assert all(s.match_reasons == ["fallback"] for s in result.scores)

    def test_all_excluded_keeps_scored_entries(self):
        registry = ReferenceRegistry.build([
            entry("lease", "Lease", "Legal Documents", exclude_patterns=["draft"]),
            entry("deed", "Title Deed", "Legal Documents", exclude_patterns=["draft"]),
        ])
        result = ReferenceResolver(registry).resolve(AIContext.CLASSIFICATION, file_name="draft.pdf")

        assert [r.id for r in result.references] == ["lease", "deed"]
        assert all(s.score < 0 for s in result.scores)
        assert all("excluded:draft" in s.match_reasons for s in result.scores)

    def test_diversity_fallback(self):
        registry = ReferenceRegistry.build([
            entry("lease", "Lease", "Legal Documents"),
            entry("deed", "Title Deed", "Legal Documents"),
            entry("invoice", "Invoice", "Financial Documents"),
        ])
        result = ReferenceResolver(registry).resolve(AIContext.CLASSIFICATION)

        assert [r.id for r in result.references] == ["lease", "invoice"]
        assert result.scores[0].match_reasons == ["fallback"]

    def test_max_results(self):
        result = ReferenceResolver(get_registry()).resolve(AIContext.CLASSIFICATION, max_results=2)
        assert len(result.references) <= 2

    def test_more_results_never_shrink(self):
        resolver = ReferenceResolver(get_registry())
        fewer = resolver.resolve(AIContext.FILING, file_name="Smith_Passport.pdf", max_results=2)
        more = resolver.resolve(AIContext.FILING, file_name="Smith_Passport.pdf", max_results=5)

        assert {r.id for r in fewer.references} <= {r.id for r in more.references}

    def test_scores_sorted(self):
        result = ReferenceResolver(get_registry()).resolve(
            AIContext.CLASSIFICATION, file_name="utility_bill_march.pdf", max_results=8
        )
        scores = [s.score for s in result.scores]
        assert scores == sorted(scores, reverse=True)

    def test_batch(self):
        result = ReferenceResolver(get_registry()).resolve_batch(
            [BatchDocument("Smith_Passport.pdf"), BatchDocument("utility_bill_march.pdf")],
            AIContext.FILING,
        )
        ids = {r.id for r in result.references}
        assert {"passport", "utility-bill"} <= ids


class TestFormatter:
    """Test per-context prompt rendering"""

    def test_empty(self):
        assert format_for_prompt([], AIContext.CLASSIFICATION) == ""

    def test_classification(self):
        text = format_for_prompt([get_registry().get("passport")], AIContext.CLASSIFICATION)

        assert text.startswith("## Reference Library")
        assert '**Valid fileType values from these references:** "Passport"' in text
        assert "**Identification Rules:**" in text
        assert "**Disambiguation:**" in text

    def test_summarization_uses_first_paragraph(self):
        text = format_for_prompt([get_registry().get("passport")], AIContext.SUMMARIZATION)

        assert "Government-issued photographic identity document" in text
        assert "Copies should show" not in text
        assert "**Key Indicators:**" in text
        assert "Valid fileType values" not in text

    def test_filing(self):
        text = format_for_prompt([get_registry().get("passport")], AIContext.FILING)
        assert "### Passport → kyc (client)" in text
