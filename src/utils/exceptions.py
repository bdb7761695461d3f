# ============================================================================
# src/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the document filing engine.

Stage code raises these; the stage boundary (Agent.run) catches them and
hands over to the stage's deterministic fallback, so none of them escape
the pipeline orchestrator.
"""

from typing import Optional


class DocumentFilingError(Exception):
    """Base exception for all document filing errors."""
    pass


class ServiceError(DocumentFilingError):
    """Error talking to an external text-completion service."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TransientServiceError(ServiceError):
    """Network failure, HTTP 5xx or HTTP 429. Retried by the retry policy."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        retry_after: Optional[float] = None
    ):
        super().__init__(message, status)
        self.retry_after = retry_after


class ServiceRequestError(ServiceError):
    """Non-retryable service failure (4xx other than 429)."""
    pass


class MalformedResponseError(DocumentFilingError):
    """Service responded but the payload could not be parsed into the expected shape."""
    pass


class ConfigurationError(DocumentFilingError):
    """Invalid or missing configuration."""
    pass


class ConfigurationGap(ConfigurationError):
    """A credential or collaborator callback needed by a stage is absent."""
    pass


class ClassificationError(DocumentFilingError):
    """Error classifying a document."""
    pass


class CacheError(DocumentFilingError):
    """Error reading or writing the classification cache."""
    pass


class ReferenceRegistryError(DocumentFilingError):
    """Reference registry was used before being built, or holds invalid entries."""
    pass
