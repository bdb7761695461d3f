# ============================================================================
# src/utils/__init__.py
# ============================================================================
"""
Utility modules for the document filing engine.
"""

from .exceptions import (
    DocumentFilingError,
    ServiceError,
    TransientServiceError,
    ServiceRequestError,
    MalformedResponseError,
    ConfigurationError,
    ConfigurationGap,
    ClassificationError,
    CacheError,
    ReferenceRegistryError,
)

from .logging import (
    setup_logging,
    get_logger,
    JsonFormatter,
    LogContext,
    LogAdapter,
    log_performance,
)

from .metrics import (
    MetricsCollector,
    Timer,
    PipelineTracker,
    get_metrics,
)

__all__ = [
    # Exceptions
    'DocumentFilingError',
    'ServiceError',
    'TransientServiceError',
    'ServiceRequestError',
    'MalformedResponseError',
    'ConfigurationError',
    'ConfigurationGap',
    'ClassificationError',
    'CacheError',
    'ReferenceRegistryError',
    # Logging
    'setup_logging',
    'get_logger',
    'JsonFormatter',
    'LogContext',
    'LogAdapter',
    'log_performance',
    # Metrics
    'MetricsCollector',
    'Timer',
    'PipelineTracker',
    'get_metrics',
]
