# ============================================================================
# src/document_filing/llm/client.py
# ============================================================================
"""
Completion Client Factory

Two services:
- analysis: summary, classification and checklist stages
- critic: final arbitration (optional; absent without a credential)

Usage:
    from src.document_filing.llm.client import create_client

    analysis = create_client("analysis")
    critic = create_client("critic")     # None when OPENAI_API_KEY is unset

    result = await analysis.generate("Summarise this document ...")
"""

from typing import Dict, Any, Optional, Tuple
import logging

from ...utils.exceptions import ConfigurationError
from ..core.config import get_config
from .base import BaseCompletionClient
from .chat_client import ChatCompletionClient
from .retry import RetryPolicy

ANALYSIS = "analysis"
CRITIC = "critic"

# Keyed by (service, url, model) so HTTP sessions are reused across documents
_client_cache: Dict[Tuple[str, str, str], BaseCompletionClient] = {}

_logger = logging.getLogger(__name__)


def _service_config(service: str, config: Dict[str, Any]) -> Dict[str, Any]:
    if service == ANALYSIS:
        return {
            'api_url': config.get('analysis_api_url'),
            'api_key': config.get('together_api_key'),
            'model': config.get('analysis_model'),
            'max_tokens': config.get('analysis_max_tokens'),
            'temperature': config.get('analysis_temperature'),
            'request_timeout': config.get('request_timeout'),
        }
    if service == CRITIC:
        return {
            'api_url': config.get('critic_api_url'),
            'api_key': config.get('openai_api_key'),
            'model': config.get('critic_model'),
            'max_tokens': config.get('critic_max_tokens'),
            'temperature': config.get('critic_temperature'),
            'request_timeout': config.get('request_timeout'),
        }
    raise ConfigurationError(f"Unknown completion service: {service}. Supported: {ANALYSIS}, {CRITIC}")


def create_client(
    service: str = ANALYSIS,
    config: Optional[Dict[str, Any]] = None,
    retry_policy: Optional[RetryPolicy] = None
) -> Optional[BaseCompletionClient]:
    """
    Build (or reuse) the client for a service.

    Configuration is loaded from .env and merged with any passed config;
    passed values take precedence.

    Returns:
        The client, or None when the service has no API key configured
    """
    merged = {**get_config(), **(config or {})}
    service_config = _service_config(service, merged)

    if not service_config['api_key']:
        _logger.info(f"No credential configured for {service} service")
        return None

    cache_key = (service, service_config['api_url'], service_config['model'])
    if cache_key in _client_cache:
        _logger.debug(f"Reusing cached {service} client: {cache_key}")
        return _client_cache[cache_key]

    client = ChatCompletionClient(service_config, retry_policy=retry_policy)
    _client_cache[cache_key] = client
    _logger.info(f"Created and cached {service} client: {cache_key}")
    return client


async def close_clients() -> None:
    """Close and forget every cached client."""
    for client in list(_client_cache.values()):
        await client.close()
    _client_cache.clear()
