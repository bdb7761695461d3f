# ============================================================================
# src/document_filing/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .thresholds_config import threshold_settings
from .models_config import model_settings
from .retry_config import retry_settings
from .limits_config import text_limit_settings
from .logging_config import logging_settings
