# ============================================================================
# src/document_filing/core/agent_base.py
# ============================================================================
"""
Abstract Base Stage Class

Every pipeline stage (summary, classification, checklist, critic) inherits
from this base class.

Every stage must implement:
- execute(context): Main processing logic, may raise
- get_name(): Stage identifier

Every stage gets:
- Logging
- Error handling at the stage boundary: a failed execute() is logged and
  replaced by the stage's deterministic fallback()
- One structured PipelineEvent per run
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import logging
import time

from .context.processing_context import FilingContext
from .config import get_config
from .events import EventEmitter, PipelineEvent, StageOutcome


class Agent(ABC):
    """
    Abstract base class for all pipeline stages.

    Design principles:
    1. Single responsibility - each stage does ONE thing
    2. Context-based communication - read from the shared FilingContext
    3. Never raise to the orchestrator - failures become fallbacks
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, emitter: Optional[EventEmitter] = None):
        """
        Args:
            config: Configuration dictionary (passed config overrides env defaults)
            emitter: Receives one event per run
        """
        env_config = get_config()
        self.config = {**env_config, **(config or {})}
        self.emitter = emitter
        self.logger = logging.getLogger(f"{__name__}.{self.get_name()}")
        self._execution_count = 0
        self._fallback_count = 0
        self._total_duration = 0.0

    @abstractmethod
    async def execute(self, context: FilingContext) -> Any:
        """
        Main stage logic. Returns the stage's typed result.

        Raising is fine: run() turns any exception into fallback().
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Stage name for logging and events, e.g. "summary"."""
        pass

    def fallback(self, context: FilingContext, error: Exception) -> Any:
        """Deterministic result used when execute() fails."""
        return None

    def describe(self, result: Any) -> Dict[str, Any]:
        """Key metrics of a result, attached to the stage event."""
        return {}

    async def run(self, context: FilingContext) -> Any:
        """
        Wrapper around execute() that handles logging, timing, events and errors.

        This method is called by the orchestrator, not execute() directly.
        """
        stage_name = self.get_name()
        start_time = time.perf_counter()

        self.logger.info(f"Executing {stage_name}")

        try:
            result = await self.execute(context)

        except Exception as e:
            duration = time.perf_counter() - start_time
            self._execution_count += 1
            self._fallback_count += 1
            self._total_duration += duration

            self.logger.error(f"{stage_name} failed: {str(e)}", exc_info=True)
            context.add_warning(f"{stage_name} failed: {str(e)}")

            result = self.fallback(context, e)
            context.log_stage_execution(stage_name, {
                "outcome": StageOutcome.FALLBACK,
                "error": str(e),
                "duration_seconds": duration,
            })
            self._emit(stage_name, StageOutcome.FALLBACK, duration, {
                "error_type": type(e).__name__,
                **self.describe(result),
            })
            return result

        duration = time.perf_counter() - start_time
        self._execution_count += 1
        self._total_duration += duration

        metrics = self.describe(result)
        context.log_stage_execution(stage_name, {
            "outcome": StageOutcome.OK,
            "duration_seconds": duration,
            **metrics,
        })
        self._emit(stage_name, StageOutcome.OK, duration, metrics)

        self.logger.info(f"{stage_name} completed in {duration:.2f}s")
        return result

    def _emit(self, stage: str, outcome: str, duration: float, metrics: Dict[str, Any]) -> None:
        if self.emitter is not None:
            self.emitter.emit(PipelineEvent(
                stage=stage,
                outcome=outcome,
                duration_ms=duration * 1000.0,
                metrics=metrics,
            ))

    def get_metrics(self) -> Dict[str, Any]:
        """Execution count, fallback count, total and average time."""
        avg_duration = (
            self._total_duration / self._execution_count
            if self._execution_count > 0
            else 0.0
        )

        return {
            "agent_name": self.get_name(),
            "execution_count": self._execution_count,
            "fallback_count": self._fallback_count,
            "total_duration_seconds": self._total_duration,
            "average_duration_seconds": avg_duration,
        }
