# ============================================================================
# src/document_filing/core/orchestrator.py
# ============================================================================
"""
Document Filing Pipeline

This is the MAIN entry point for classifying an uploaded document.

Flow:
0. Cache check (skipped when bypass is requested)
1. Filename analysis (type hint, checklist filename matches)
2. Summary stage
3. Classification stage
4. Canonical validation of type / category / folder
5. Deterministic verification (below high confidence only)
6. Checklist stage
7. Critic stage (uncertain decisions, critic credential required)
8. Cache save (confident results only)

Stages run strictly in sequence. Every stage has a deterministic fallback,
so the worst outcome is a low-confidence, review-flagged "Other"
classification rather than an exception.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from ...utils.exceptions import ClassificationError
from ...utils.logging import LogContext
from ..agents.checklist_agent import ChecklistAgent, merge_checklist_matches
from ..agents.classification_agent import ClassificationAgent
from ..agents.critic_agent import CriticAgent, merge_critic_matches, should_run_critic
from ..agents.summary_agent import SummaryAgent
from ..cache.hashing import generate_content_hash, normalize_filename_for_cache
from ..classifiers.canonical_matching import (
    find_best_category_match,
    find_best_type_match,
    match_category_to_folder,
)
from ..classifiers.correction_tiers import determine_correction_tier
from ..classifiers.deterministic_verifier import DeterministicVerifier, apply_verification_adjustments
from ..classifiers.filename_matcher import FilenameMatcher
from ..config.thresholds_config import threshold_settings
from ..constants.taxonomy import MISCELLANEOUS_FOLDER, get_type_abbreviation
from ..llm.base import BaseCompletionClient
from ..llm.client import ANALYSIS, CRITIC, create_client
from ..references.registry import get_registry
from ..references.resolver import ReferenceResolver
from .collaborators import invoke_collaborator
from .context.checklist import ChecklistItem, ChecklistMatch
from .context.classification import ClassificationDecision, CriticDecision
from .context.corrections import PredictedChecklistItem
from .context.enums import ConfidenceFlag, CorrectionField, FolderLevel
from .context.pipeline_io import (
    CachedClassification,
    CacheLookup,
    FilingResult,
    PipelineInput,
    PipelineOutput,
)
from .context.processing_context import FilingContext
from .context.taxonomy import FilingTaxonomy
from .correction_context import retrieve_correction_context
from .events import EventEmitter, PipelineEvent, StageOutcome, create_default_emitter

CACHED_SUMMARY = "[Cached result - re-upload to refresh analysis]"
CACHED_NOTES = "Classification loaded from cache"
CACHED_REASONING = "From cache"
HIGH_CONFIDENCE_NOTES = "High confidence - verification skipped"
AMBIGUOUS_NOTES = " | Top keyword matches are close - critic review advised"
VERIFIER_RULES_LIMIT = 10


def confidence_band(confidence: float) -> Tuple[ConfidenceFlag, bool]:
    """(flag, requires_review): high >= 0.85, medium >= 0.65, else low."""
    if confidence >= threshold_settings.HIGH_CONFIDENCE:
        return ConfidenceFlag.HIGH, False
    if confidence >= threshold_settings.MEDIUM_CONFIDENCE:
        return ConfidenceFlag.MEDIUM, True
    return ConfidenceFlag.LOW, True


@dataclass
class PipelineConfig:
    """
    Everything the host supplies for one pipeline.

    Collaborator callbacks are optional and may be plain functions or
    coroutines; they are called with keyword arguments:
        fetch_corrections(file_type, category, file_name, limit)
        fetch_consolidated_rules(file_type, category, limit)
        fetch_targeted_corrections(confusion_pairs, file_name, limit)
        check_cache(content_hash) -> CacheLookup
        save_to_cache(content_hash, file_name_pattern, classification)
        on_cache_hit(cache_id)
    """
    taxonomy: FilingTaxonomy = field(default_factory=FilingTaxonomy)
    checklist_items: List[ChecklistItem] = field(default_factory=list)

    analysis_client: Optional[BaseCompletionClient] = None
    critic_client: Optional[BaseCompletionClient] = None
    resolver: Optional[ReferenceResolver] = None
    filename_matcher: Optional[FilenameMatcher] = None
    verifier: Optional[DeterministicVerifier] = None
    emitter: Optional[EventEmitter] = None

    fetch_corrections: Optional[Callable[..., Any]] = None
    fetch_consolidated_rules: Optional[Callable[..., Any]] = None
    fetch_targeted_corrections: Optional[Callable[..., Any]] = None
    check_cache: Optional[Callable[..., Any]] = None
    save_to_cache: Optional[Callable[..., Any]] = None
    on_cache_hit: Optional[Callable[..., Any]] = None

    agent_config: Dict[str, Any] = field(default_factory=dict)


def create_default_pipeline_config(
    config: Optional[Dict[str, Any]] = None,
    checklist_items: Optional[List[ChecklistItem]] = None,
    use_references: bool = True
) -> PipelineConfig:
    """
    Pipeline config for hosts without their own taxonomy database.

    Uses the built-in taxonomy defaults, and (with use_references) the
    built-in reference registry for prompt guidance and verifier keyword
    definitions. Services without a configured credential are left out.
    Events go to the log (and the metrics collector when enabled).
    """
    definitions = []
    resolver = None
    if use_references:
        registry = get_registry()
        resolver = ReferenceResolver(registry)
        definitions = registry.file_type_definitions()

    return PipelineConfig(
        taxonomy=FilingTaxonomy(definitions=definitions),
        checklist_items=list(checklist_items or []),
        analysis_client=create_client(ANALYSIS, config),
        critic_client=create_client(CRITIC, config),
        resolver=resolver,
        emitter=create_default_emitter(),
        agent_config=dict(config or {}),
    )


def bind_collaborators(config: PipelineConfig, cache_store=None, correction_store=None) -> PipelineConfig:
    """Copy of config wired to the in-memory cache and correction stores."""
    updates: Dict[str, Any] = {}
    if cache_store is not None:
        updates.update(
            check_cache=cache_store.check,
            save_to_cache=cache_store.save,
            on_cache_hit=cache_store.record_hit,
        )
    if correction_store is not None:
        updates.update(
            fetch_corrections=correction_store.get_relevant_corrections,
            fetch_consolidated_rules=correction_store.get_consolidated_rules,
            fetch_targeted_corrections=correction_store.get_targeted_corrections,
        )
    return replace(config, **updates)


class DocumentFilingPipeline:
    """
    Main orchestration engine for document classification.

    Responsibilities:
    1. Cache short-circuit
    2. Stage sequencing and gating
    3. Keeping every label inside the caller's taxonomy
    4. Confidence bands and review flags

    Example:
        pipeline = DocumentFilingPipeline(create_default_pipeline_config())
        output = await pipeline.process(PipelineInput(
            extracted_text=text,
            file_name="Smith_Passport.pdf",
        ))
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self.logger = logging.getLogger(__name__)
        self.emitter = self.config.emitter

        agent_config = self.config.agent_config
        self.matcher = self.config.filename_matcher or FilenameMatcher()
        self.verifier = self.config.verifier or DeterministicVerifier()
        self.summary_agent = SummaryAgent(
            self.config.analysis_client, agent_config, self.emitter, self.config.resolver
        )
        self.classification_agent = ClassificationAgent(
            self.config.analysis_client, agent_config, self.emitter, self.config.resolver
        )
        self.checklist_agent = ChecklistAgent(
            self.config.analysis_client, agent_config, self.emitter, self.config.resolver
        )
        self.critic_agent = CriticAgent(self.config.critic_client, agent_config, self.emitter)

    # ========================================================================
    # MAIN PROCESSING PIPELINE
    # ========================================================================

    async def process(self, pipeline_input: PipelineInput) -> PipelineOutput:
        """
        Classify one document.

        Args:
            pipeline_input: Extracted text, filename and upload metadata

        Returns:
            PipelineOutput; success is False only if the pipeline itself hit
            an unexpected error, in which case the result is a review-flagged
            "Other" classification
        """
        start_time = datetime.now()
        ctx = FilingContext(
            input=pipeline_input,
            taxonomy=self.config.taxonomy,
            content_hash=generate_content_hash(pipeline_input.extracted_text),
        )

        with LogContext(self.logger, file_name=ctx.file_name, content_hash=ctx.content_hash):
            self.logger.info(f"Processing document: {ctx.file_name} (hash: {ctx.content_hash})")

            try:
                output = await self._check_cache(ctx)
                if output is None:
                    output = await self._run_stages(ctx)

            except Exception as e:
                self.logger.error(f"Pipeline failed for {ctx.file_name}: {e}", exc_info=True)
                self._emit("pipeline", StageOutcome.ERROR, start_time, {"error_type": type(e).__name__})
                return self._failure_output(ctx)

            result = output.result
            self.logger.info(
                f"Final: {result.file_type} ({result.category}) -> {result.suggested_folder} "
                f"at {result.confidence:.2f} ({result.confidence_flag.value})"
            )
            self._emit("pipeline", StageOutcome.OK, start_time, {
                "confidence": result.confidence,
                "confidence_flag": result.confidence_flag.value,
                "requires_review": result.requires_review,
                "from_cache": result.from_cache,
            })
            return output

    async def _run_stages(self, ctx: FilingContext) -> PipelineOutput:
        taxonomy = ctx.taxonomy
        if not ctx.file_name.strip():
            raise ClassificationError("Document has no file name")

        # ================================================================
        # STEP 1: Filename Analysis
        # ================================================================
        ctx.filename_hint = self.matcher.get_type_hint(ctx.file_name)
        ctx.filename_matches = self.matcher.match_checklist_items(ctx.file_name, self.config.checklist_items)
        ctx.checklist_items = self.matcher.enrich_checklist_items(self.config.checklist_items, ctx.file_name)

        if ctx.filename_hint:
            self.logger.info(f"Filename hint: {ctx.filename_hint.file_type} ({ctx.filename_hint.category})")

        # ================================================================
        # STEP 2-3: Summary and Classification
        # ================================================================
        ctx.summary = await self.summary_agent.run(ctx)
        classification = await self.classification_agent.run(ctx)

        # ================================================================
        # STEP 4: Canonical Validation
        # ================================================================
        decision, target_level = self._validate(classification, ctx)
        ctx.decision = decision

        result = FilingResult(
            file_type=decision.file_type,
            category=decision.category,
            suggested_folder=decision.suggested_folder,
            target_level=target_level,
            confidence=decision.confidence,
            summary=ctx.summary.executive_summary or "No summary available",
        )
        self._set_confidence(result, result.confidence)
        ctx.result = result

        # ================================================================
        # STEP 5: Deterministic Verification
        # ================================================================
        if result.confidence < threshold_settings.HIGH_CONFIDENCE:
            await self._verify(ctx)
        else:
            result.verification_passed = True
            result.verification_notes = HIGH_CONFIDENCE_NOTES

        if not taxonomy.has_folder(result.suggested_folder):
            self.logger.warning(f"Final folder {result.suggested_folder} not found, defaulting to miscellaneous")
            result.suggested_folder = MISCELLANEOUS_FOLDER
            result.target_level = FolderLevel.CLIENT
            ctx.decision.suggested_folder = MISCELLANEOUS_FOLDER

        # ================================================================
        # STEP 6: Checklist Matching
        # ================================================================
        await self._match_checklist(ctx)

        # ================================================================
        # STEP 7: Critic
        # ================================================================
        await self._review(ctx)

        # ================================================================
        # STEP 8: Cache Save
        # ================================================================
        result.suggested_checklist_items = list(ctx.checklist_matches)
        await self._save_cache(ctx)

        result.type_abbreviation = get_type_abbreviation(result.category)
        result.original_file_name = ctx.file_name
        result.file_size = ctx.input.file_size
        result.mime_type = ctx.input.mime_type

        return PipelineOutput(
            success=True,
            result=result,
            available_folders=list(taxonomy.folders),
            available_checklist_items=ctx.checklist_items,
            document_summary=ctx.summary,
            classification_reasoning=classification.reasoning,
        )

    # ========================================================================
    # STAGE HELPERS
    # ========================================================================

    async def _check_cache(self, ctx: FilingContext) -> Optional[PipelineOutput]:
        if ctx.input.bypass_cache or self.config.check_cache is None:
            return None

        start_time = datetime.now()
        lookup = await invoke_collaborator(
            self.config.check_cache,
            "Cache check",
            content_hash=ctx.content_hash,
        )
        hit = isinstance(lookup, CacheLookup) and lookup.hit and lookup.classification is not None
        self._emit("cache_check", StageOutcome.OK, start_time, {"hit": hit})
        if not hit:
            return None

        self.logger.info(f"Cache hit for {ctx.file_name} (hits: {lookup.hit_count})")
        if lookup.cache_id is not None:
            await invoke_collaborator(self.config.on_cache_hit, "Cache hit update", cache_id=lookup.cache_id)

        return self._cached_output(ctx, lookup)

    def _cached_output(self, ctx: FilingContext, lookup: CacheLookup) -> PipelineOutput:
        cached = lookup.classification
        flag, _ = confidence_band(cached.confidence)
        level = ctx.taxonomy.folder_level(cached.target_folder) or FolderLevel.PROJECT

        result = FilingResult(
            file_type=cached.file_type,
            category=cached.category,
            suggested_folder=cached.target_folder,
            target_level=level,
            confidence=cached.confidence,
            summary=CACHED_SUMMARY,
            confidence_flag=flag,
            requires_review=cached.confidence < threshold_settings.CACHED_REVIEW_THRESHOLD,
            suggested_checklist_items=[
                ChecklistMatch(
                    item_id=item.item_id,
                    confidence=item.confidence,
                    reasoning=CACHED_REASONING,
                    item_name=item.item_name,
                    category=item.category,
                )
                for item in cached.suggested_checklist_items
            ],
            verification_notes=CACHED_NOTES,
            type_abbreviation=get_type_abbreviation(cached.category),
            original_file_name=ctx.file_name,
            file_size=ctx.input.file_size,
            mime_type=ctx.input.mime_type,
            from_cache=True,
            cache_hit_count=lookup.hit_count,
        )
        return PipelineOutput(
            success=True,
            result=result,
            available_folders=list(ctx.taxonomy.folders),
            available_checklist_items=list(self.config.checklist_items),
        )

    def _validate(
        self,
        decision: ClassificationDecision,
        ctx: FilingContext
    ) -> Tuple[ClassificationDecision, FolderLevel]:
        """Force type, category and folder into the caller's taxonomy."""
        taxonomy = ctx.taxonomy
        search_text = ctx.summary.detailed_summary

        file_type = decision.file_type
        if file_type not in taxonomy.file_types:
            file_type, _ = find_best_type_match(
                file_type, search_text, taxonomy.file_types, taxonomy.active_definitions
            )
            self.logger.info(f"Type \"{decision.file_type}\" -> \"{file_type}\"")

        category = decision.category
        if category not in taxonomy.categories:
            category = find_best_category_match(category, search_text, taxonomy.categories)
            self.logger.info(f"Category \"{decision.category}\" -> \"{category}\"")

        folder = decision.suggested_folder
        level = taxonomy.folder_level(folder)
        if level is None:
            folder, level = match_category_to_folder(category, taxonomy.folders)
            self.logger.info(f"Folder \"{decision.suggested_folder}\" -> \"{folder}\"")

        validated = replace(decision, file_type=file_type, category=category, suggested_folder=folder)
        return validated, level

    async def _verify(self, ctx: FilingContext) -> None:
        start_time = datetime.now()
        result = ctx.result

        rules = await invoke_collaborator(
            self.config.fetch_consolidated_rules,
            "Consolidated rules fetch",
            default=[],
            file_type=result.file_type,
            category=result.category,
            limit=VERIFIER_RULES_LIMIT,
        )
        type_rules = [r for r in rules if r.field == CorrectionField.FILE_TYPE]

        verification = self.verifier.verify(
            ctx.summary,
            ctx.file_name,
            ctx.decision,
            ctx.taxonomy.active_definitions,
            rules=type_rules,
            folders=ctx.taxonomy.folders,
        )
        ctx.verification = verification
        ambiguous = self.verifier.should_run_critic(verification.scores)

        adjusted = apply_verification_adjustments(ctx.decision, verification)
        if adjusted is not ctx.decision:
            ctx.decision = adjusted
            result.file_type = adjusted.file_type
            result.category = adjusted.category
            result.confidence = adjusted.confidence
            if adjusted.suggested_folder != result.suggested_folder:
                result.suggested_folder = adjusted.suggested_folder
                result.target_level = ctx.taxonomy.folder_level(adjusted.suggested_folder) or result.target_level

        result.verification_passed = verification.verified
        result.verification_notes = verification.notes + (AMBIGUOUS_NOTES if ambiguous else "")
        self._set_confidence(result, result.confidence)

        self.logger.info(f"Verified: {verification.verified}, Notes: {verification.notes}")
        self._emit("verification", StageOutcome.OK, start_time, {
            "verified": verification.verified,
            "overridden": verification.adjustment is not None,
            "ambiguous": ambiguous,
            "candidates": len(verification.scores),
        })

    async def _match_checklist(self, ctx: FilingContext) -> None:
        if not ctx.checklist_items:
            return

        has_matches = bool(ctx.checklist_matches)
        matched_ids = {m.item_id for m in ctx.checklist_matches}
        has_unused_filename_matches = any(
            m.score >= threshold_settings.FILENAME_FALLBACK_MIN_SCORE and m.item_id not in matched_ids
            for m in ctx.filename_matches
        )
        if has_matches and not has_unused_filename_matches:
            return

        matches = await self.checklist_agent.run(ctx)
        if matches:
            ctx.checklist_matches = merge_checklist_matches(ctx.checklist_matches, matches)
            self.logger.info(f"Checklist: {len(matches)} matches, merged to {len(ctx.checklist_matches)}")

    async def _review(self, ctx: FilingContext) -> None:
        result = ctx.result
        if not should_run_critic(ctx.decision, ctx.filename_hint):
            return

        if not self.critic_agent.is_configured:
            self.logger.info("Critic review advised but no critic service configured")
            self._emit("critic", StageOutcome.SKIPPED, datetime.now(), {"reason": "not_configured"})
            return

        tier = determine_correction_tier(result.confidence, ctx.decision.has_alternatives)
        ctx.correction_context = await retrieve_correction_context(
            tier,
            ctx.decision,
            ctx.file_name,
            fetch_corrections=self.config.fetch_corrections,
            fetch_consolidated_rules=self.config.fetch_consolidated_rules,
            fetch_targeted_corrections=self.config.fetch_targeted_corrections,
        )
        self.logger.info(f"Correction tier: {tier.value} (confidence: {result.confidence:.2f})")

        critic = await self.critic_agent.run(ctx)
        if critic is not None:
            self._apply_critic(ctx, critic)

    def _apply_critic(self, ctx: FilingContext, critic: CriticDecision) -> None:
        result = ctx.result
        previous_type = result.file_type
        previous_category = result.category

        result.file_type = critic.file_type
        result.category = critic.category
        result.confidence = critic.confidence

        level = ctx.taxonomy.folder_level(critic.suggested_folder)
        if level is not None:
            result.suggested_folder = critic.suggested_folder
            result.target_level = level
        else:
            result.suggested_folder, result.target_level = match_category_to_folder(
                critic.category, ctx.taxonomy.folders
            )

        self._set_confidence(result, result.confidence)
        ctx.decision = replace(
            ctx.decision,
            file_type=result.file_type,
            category=result.category,
            suggested_folder=result.suggested_folder,
            confidence=result.confidence,
        )

        if previous_type != critic.file_type or previous_category != critic.category:
            self.logger.info(f"Critic corrected: {previous_type} -> {critic.file_type}")
            result.verification_notes = (
                (result.verification_notes or "")
                + f" | Critic corrected: {previous_type} → {critic.file_type}. {critic.reasoning}"
            )

        if critic.checklist_matches:
            ctx.checklist_matches = merge_critic_matches(critic.checklist_matches, ctx.checklist_matches)

        if critic.correction_influence and critic.correction_influence.applied_corrections:
            self.logger.info(
                f"Applied corrections: {', '.join(critic.correction_influence.applied_corrections)}"
            )

    async def _save_cache(self, ctx: FilingContext) -> None:
        result = ctx.result
        if self.config.save_to_cache is None or result.confidence < threshold_settings.CACHE_SAVE:
            return

        await invoke_collaborator(
            self.config.save_to_cache,
            "Cache save",
            content_hash=ctx.content_hash,
            file_name_pattern=normalize_filename_for_cache(ctx.file_name),
            classification=CachedClassification(
                file_type=result.file_type,
                category=result.category,
                target_folder=result.suggested_folder,
                confidence=result.confidence,
                suggested_checklist_items=[
                    PredictedChecklistItem(
                        item_id=m.item_id,
                        item_name=m.item_name,
                        category=m.category,
                        confidence=m.confidence,
                    )
                    for m in result.suggested_checklist_items
                ],
            ),
        )

    # ========================================================================
    # UTILITIES
    # ========================================================================

    @staticmethod
    def _set_confidence(result: FilingResult, confidence: float) -> None:
        result.confidence_flag, result.requires_review = confidence_band(confidence)

    def _failure_output(self, ctx: FilingContext) -> PipelineOutput:
        folder, level = match_category_to_folder("Other", ctx.taxonomy.folders)
        result = FilingResult(
            file_type="Other",
            category="Other",
            suggested_folder=folder,
            target_level=level,
            confidence=0.0,
            confidence_flag=ConfidenceFlag.LOW,
            requires_review=True,
            verification_notes="Classification failed - manual review required",
            type_abbreviation=get_type_abbreviation("Other"),
            original_file_name=ctx.file_name,
            file_size=ctx.input.file_size,
            mime_type=ctx.input.mime_type,
        )
        return PipelineOutput(
            success=False,
            result=result,
            available_folders=list(ctx.taxonomy.folders),
            available_checklist_items=list(self.config.checklist_items),
            document_summary=ctx.summary,
        )

    def _emit(self, stage: str, outcome: str, start_time: datetime, metrics: Dict[str, Any]) -> None:
        if self.emitter is None:
            return
        duration_ms = (datetime.now() - start_time).total_seconds() * 1000.0
        self.emitter.emit(PipelineEvent(stage=stage, outcome=outcome, duration_ms=duration_ms, metrics=metrics))


async def process_document(
    pipeline_input: PipelineInput,
    config: Optional[PipelineConfig] = None
) -> PipelineOutput:
    """Convenience wrapper: one pipeline, one document."""
    return await DocumentFilingPipeline(config).process(pipeline_input)
