# ============================================================================
# src/document_filing/core/config.py
# ============================================================================
"""
Centralized Configuration Management

Loads service credentials and endpoints from environment variables (.env
file) with defaults taken from the settings modules. Credentials are never
invented: an empty key means the dependent service is not configured.

Usage:
    from src.document_filing.core.config import get_config, Config

    config = get_config()

    cfg = get_config_instance()
    print(cfg.analysis_model)
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

from ...utils.logging import setup_logging
from ..config.logging_config import logging_settings
from ..config.models_config import model_settings


def _load_dotenv() -> bool:
    """Load .env file if it exists."""
    # Project root
    env_path = Path(__file__).parent.parent.parent.parent / '.env'
    if env_path.exists():
        load_dotenv(env_path)
        return True

    cwd_env = Path.cwd() / '.env'
    if cwd_env.exists():
        load_dotenv(cwd_env)
        return True

    return False


def _get_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes', 'on')


def _get_int(key: str, default: int = 0) -> int:
    """Get integer from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(key: str, default: float = 0.0) -> float:
    """Get float from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Config:
    """
    Configuration container with attribute access.

    All values are loaded from environment variables with defaults.
    """

    # General
    log_level: str = field(default_factory=lambda: os.getenv('LOG_LEVEL', logging_settings.LOG_LEVEL))
    log_json: bool = field(default_factory=lambda: _get_bool('LOG_JSON', logging_settings.LOG_JSON))

    # Analysis service (summary / classification / checklist)
    together_api_key: str = field(default_factory=lambda: os.getenv('TOGETHER_API_KEY', ''))
    analysis_api_url: str = field(default_factory=lambda: os.getenv('ANALYSIS_API_URL', model_settings.ANALYSIS_API_URL))
    analysis_model: str = field(default_factory=lambda: os.getenv('ANALYSIS_MODEL', model_settings.ANALYSIS_MODEL))
    analysis_temperature: float = field(
        default_factory=lambda: _get_float('ANALYSIS_TEMPERATURE', model_settings.ANALYSIS_TEMPERATURE)
    )
    analysis_max_tokens: int = field(
        default_factory=lambda: _get_int('ANALYSIS_MAX_TOKENS', model_settings.ANALYSIS_MAX_TOKENS)
    )

    # Critic service (optional)
    openai_api_key: str = field(default_factory=lambda: os.getenv('OPENAI_API_KEY', ''))
    critic_api_url: str = field(default_factory=lambda: os.getenv('CRITIC_API_URL', model_settings.CRITIC_API_URL))
    critic_model: str = field(default_factory=lambda: os.getenv('CRITIC_MODEL', model_settings.CRITIC_MODEL))
    critic_temperature: float = field(
        default_factory=lambda: _get_float('CRITIC_TEMPERATURE', model_settings.CRITIC_TEMPERATURE)
    )
    critic_max_tokens: int = field(
        default_factory=lambda: _get_int('CRITIC_MAX_TOKENS', model_settings.CRITIC_MAX_TOKENS)
    )

    # Requests
    request_timeout: float = field(
        default_factory=lambda: _get_float('REQUEST_TIMEOUT', model_settings.REQUEST_TIMEOUT_SECONDS)
    )

    # Cache
    use_cache: bool = field(default_factory=lambda: _get_bool('USE_CACHE', True))

    def __post_init__(self):
        """Ensure .env is loaded before accessing values."""
        _load_dotenv()

    @property
    def has_analysis_credentials(self) -> bool:
        return bool(self.together_api_key)

    @property
    def has_critic_credentials(self) -> bool:
        return bool(self.openai_api_key)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for passing to components."""
        return {
            # General
            'log_level': self.log_level,
            'log_json': self.log_json,

            # Analysis service
            'together_api_key': self.together_api_key,
            'analysis_api_url': self.analysis_api_url,
            'analysis_model': self.analysis_model,
            'analysis_temperature': self.analysis_temperature,
            'analysis_max_tokens': self.analysis_max_tokens,

            # Critic service
            'openai_api_key': self.openai_api_key,
            'critic_api_url': self.critic_api_url,
            'critic_model': self.critic_model,
            'critic_temperature': self.critic_temperature,
            'critic_max_tokens': self.critic_max_tokens,

            # Requests
            'request_timeout': self.request_timeout,

            # Cache
            'use_cache': self.use_cache,
        }


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """
    Get configuration dictionary.

    Cached for performance - call once and pass to components.
    """
    _load_dotenv()
    return Config().to_dict()


def get_config_instance() -> Config:
    """Get Config instance for attribute access."""
    _load_dotenv()
    return Config()


def reload_config() -> Dict[str, Any]:
    """Drop the cached configuration and re-read the environment."""
    get_config.cache_clear()
    return get_config()


def configure_logging(config: Optional[Dict[str, Any]] = None) -> None:
    """Install root logging handlers from LOG_LEVEL / LOG_JSON (hosts call this once at startup)."""
    config = config or get_config()
    setup_logging(
        level=config.get('log_level', logging_settings.LOG_LEVEL),
        format_json=config.get('log_json', logging_settings.LOG_JSON),
    )
