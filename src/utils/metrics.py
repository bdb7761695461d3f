# ============================================================================
# src/utils/metrics.py
# ============================================================================
"""
Pipeline metrics for the document filing engine.

MetricsCollector holds four kinds of series (counters, gauges, value
histograms, durations). PipelineTracker names the filing-specific ones:
stage durations and outcomes, confidence bands, review flags, cache hits,
overrides and errors.
"""

import statistics
import time
from collections import Counter, defaultdict
from typing import Dict, List, Optional, Any


def summarize(values: List[float]) -> Optional[Dict[str, float]]:
    """count / min / max / mean / median / p95 / p99, or None for no values."""
    if not values:
        return None

    ordered = sorted(values)
    last = len(ordered) - 1

    def percentile(fraction: float) -> float:
        return ordered[min(int(len(ordered) * fraction), last)]

    return {
        'count': len(ordered),
        'min': ordered[0],
        'max': ordered[-1],
        'mean': statistics.mean(ordered),
        'median': statistics.median(ordered),
        'p95': percentile(0.95),
        'p99': percentile(0.99),
    }


class MetricsCollector:
    """In-process metric store. Durations are in seconds."""

    def __init__(self):
        self._counters: Counter = Counter()
        self._gauges: Dict[str, float] = {}
        self._values: Dict[str, List[float]] = defaultdict(list)
        self._durations: Dict[str, List[float]] = defaultdict(list)

    def increment(self, name: str, value: int = 1) -> None:
        self._counters[name] += value

    def set_gauge(self, name: str, value: float) -> None:
        self._gauges[name] = value

    def record_value(self, name: str, value: float) -> None:
        self._values[name].append(value)

    def record_time(self, name: str, duration: float) -> None:
        self._durations[name].append(duration)

    def get_counter(self, name: str) -> int:
        return self._counters[name]

    def get_gauge(self, name: str) -> Optional[float]:
        return self._gauges.get(name)

    def get_histogram_stats(self, name: str) -> Optional[Dict[str, float]]:
        return summarize(self._values.get(name, []))

    def get_timer_stats(self, name: str) -> Optional[Dict[str, float]]:
        return summarize(self._durations.get(name, []))

    def get_all_metrics(self) -> Dict[str, Any]:
        return {
            'counters': dict(self._counters),
            'gauges': dict(self._gauges),
            'histograms': {name: summarize(values) for name, values in self._values.items()},
            'timers': {name: summarize(values) for name, values in self._durations.items()},
        }

    def reset(self) -> None:
        for series in (self._counters, self._gauges, self._values, self._durations):
            series.clear()


class Timer:
    """`with` block whose elapsed time is recorded under `operation`."""

    def __init__(self, collector: MetricsCollector, operation: str):
        self.collector = collector
        self.operation = operation
        self.duration: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self):
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._started
        self.collector.record_time(self.operation, self.duration)


class PipelineTracker:
    """Filing pipeline measurements on top of a MetricsCollector."""

    def __init__(self, collector: Optional[MetricsCollector] = None):
        self.metrics = collector or MetricsCollector()

    def record_stage(self, stage: str, duration: float, outcome: str) -> None:
        """One stage execution and its outcome (ok / fallback / skipped / error)."""
        self.metrics.record_time(f'stage_{stage}', duration)
        self.metrics.increment(f'stage_{stage}_{outcome}')

    def record_classification(self, confidence: float, confidence_flag: str, requires_review: bool) -> None:
        self.metrics.increment('documents_classified')
        self.metrics.increment(f'confidence_{confidence_flag}')
        self.metrics.record_value('final_confidence', confidence)
        if requires_review:
            self.metrics.increment('review_required')

    def record_cache(self, hit: bool) -> None:
        self.metrics.increment('cache_hits' if hit else 'cache_misses')
        self.metrics.set_gauge('cache_hit_rate', self._cache_hit_rate())

    def _cache_hit_rate(self) -> float:
        hits = self.metrics.get_counter('cache_hits')
        lookups = hits + self.metrics.get_counter('cache_misses')
        return hits / lookups if lookups else 0.0

    def record_override(self, source: str) -> None:
        """A decision overridden by the verifier or the critic."""
        self.metrics.increment(f'override_{source}')

    def record_error(self, error_type: str) -> None:
        self.metrics.increment(f'error_{error_type}')

    def time_operation(self, operation: str) -> Timer:
        return Timer(self.metrics, operation)

    def get_summary(self) -> Dict[str, Any]:
        """Totals plus review rate (percent), cache hit rate (fraction) and error count."""
        snapshot = self.metrics.get_all_metrics()
        counters = snapshot['counters']
        classified = counters.get('documents_classified', 0)

        return {
            'total_documents': classified,
            'cache_hit_rate': self._cache_hit_rate(),
            'review_rate': counters.get('review_required', 0) / classified * 100 if classified else 0,
            'errors': sum(count for name, count in counters.items() if name.startswith('error_')),
            'metrics': snapshot,
        }


# Process-wide collector fed by the default event emitter
_global_metrics = MetricsCollector()


def get_metrics() -> MetricsCollector:
    return _global_metrics
