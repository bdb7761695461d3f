# ============================================================================
# src/document_filing/core/events.py
# ============================================================================
"""
Structured Pipeline Events

Every stage reports one PipelineEvent (stage name, outcome, duration, key
metrics). The orchestrator is handed an EventEmitter and never writes to a
particular output stream itself.

Emitters:
- LoggingEventEmitter: one log record per event, fields passed as `extra`
- RecordingEventEmitter: keeps events in memory
- MetricsEventEmitter: feeds the metrics collector
- CompositeEventEmitter: fan-out to several emitters

create_default_emitter() is what create_default_pipeline_config() installs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional
import logging

from ...utils.metrics import MetricsCollector, PipelineTracker, get_metrics
from ..config.logging_config import logging_settings


class StageOutcome:
    OK = "ok"
    FALLBACK = "fallback"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class PipelineEvent:
    stage: str
    outcome: str
    duration_ms: float = 0.0
    metrics: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EventEmitter(ABC):
    """Receives pipeline events."""

    @abstractmethod
    def emit(self, event: PipelineEvent) -> None:
        pass


class LoggingEventEmitter(EventEmitter):
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("document_filing.events")

    def emit(self, event: PipelineEvent) -> None:
        level = logging.WARNING if event.outcome in (StageOutcome.FALLBACK, StageOutcome.ERROR) else logging.INFO
        self.logger.log(
            level,
            f"[{event.stage}] {event.outcome} in {event.duration_ms:.0f}ms",
            extra={"event": event.to_dict()},
        )


class RecordingEventEmitter(EventEmitter):
    def __init__(self):
        self.events: List[PipelineEvent] = []

    def emit(self, event: PipelineEvent) -> None:
        self.events.append(event)

    def stages(self) -> List[str]:
        return [e.stage for e in self.events]

    def for_stage(self, stage: str) -> List[PipelineEvent]:
        return [e for e in self.events if e.stage == stage]

    def clear(self) -> None:
        self.events.clear()


class MetricsEventEmitter(EventEmitter):
    def __init__(self, collector: Optional[MetricsCollector] = None):
        self.tracker = PipelineTracker(collector or get_metrics())

    def emit(self, event: PipelineEvent) -> None:
        self.tracker.record_stage(event.stage, event.duration_ms / 1000.0, event.outcome)
        if event.stage == "cache_check" and event.outcome != StageOutcome.SKIPPED:
            self.tracker.record_cache(bool(event.metrics.get("hit")))
        if event.metrics.get("overridden"):
            self.tracker.record_override(event.stage)
        if "error_type" in event.metrics:
            self.tracker.record_error(event.metrics["error_type"])
        if event.stage == "pipeline" and "confidence" in event.metrics:
            self.tracker.record_classification(
                event.metrics["confidence"],
                event.metrics.get("confidence_flag", "low"),
                bool(event.metrics.get("requires_review", True)),
            )


class CompositeEventEmitter(EventEmitter):
    def __init__(self, *emitters: EventEmitter):
        self.emitters = list(emitters)

    def emit(self, event: PipelineEvent) -> None:
        for emitter in self.emitters:
            emitter.emit(event)


def create_default_emitter(logger: Optional[logging.Logger] = None) -> EventEmitter:
    """Log every event; also feed the process-wide metrics collector when ENABLE_METRICS is set."""
    emitter = LoggingEventEmitter(logger)
    if not logging_settings.ENABLE_METRICS:
        return emitter
    return CompositeEventEmitter(emitter, MetricsEventEmitter())
