# src/document_filing/llm/__init__.py

from .base import BaseCompletionClient, extract_json, extract_json_array
from .retry import RetryPolicy, default_retry_policy, is_retryable
from .chat_client import ChatCompletionClient
from .client import create_client, close_clients, ANALYSIS, CRITIC

__all__ = [
    "BaseCompletionClient",
    "extract_json",
    "extract_json_array",
    "RetryPolicy",
    "default_retry_policy",
    "is_retryable",
    "ChatCompletionClient",
    "create_client",
    "close_clients",
    "ANALYSIS",
    "CRITIC",
]
