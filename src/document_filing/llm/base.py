# ============================================================================
# src/document_filing/llm/base.py
# ============================================================================
"""
Base Completion Client Interface

Every text-completion backend implements generate(), which returns a dict
with at least {"text": str}. Stages only ever depend on this interface, so
tests can stand in a fake client with the same signature.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional, Union
import json
import logging

from json_repair import repair_json

logger = logging.getLogger(__name__)


def _balanced_block(text: str, open_char: str, close_char: str) -> Optional[str]:
    """First balanced {...} / [...] block in text, or None."""
    start_idx = text.find(open_char)
    if start_idx == -1:
        return None

    depth = 0
    for i, char in enumerate(text[start_idx:], start=start_idx):
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return text[start_idx:i + 1]
    # Unterminated: hand the tail to json_repair
    return text[start_idx:]


def _parse(text: str, expected: type) -> Optional[Union[Dict, List]]:
    try:
        parsed = json.loads(text)
        if isinstance(parsed, expected):
            return parsed
    except json.JSONDecodeError:
        pass

    try:
        repaired = repair_json(text, return_objects=True)
    except Exception as e:
        logger.debug(f"json_repair failed: {e}")
        return None
    if isinstance(repaired, expected):
        logger.debug("json_repair fixed response")
        return repaired
    return None


def _extract(response_text: str, expected: type, open_char: str, close_char: str):
    if not response_text or not response_text.strip():
        logger.warning("Empty response text, no JSON to extract")
        return None

    text = response_text.strip()

    # Try 1/2: whole response, direct then repaired
    parsed = _parse(text, expected)
    if parsed is not None:
        return parsed

    # Try 3/4: first balanced block, direct then repaired
    block = _balanced_block(text, open_char, close_char)
    if block is None:
        logger.warning("No JSON found in response")
        return None

    parsed = _parse(block, expected)
    if parsed is None:
        logger.warning(f"Could not parse JSON from response: {text[:200]}...")
    return parsed


def extract_json(response_text: str) -> Optional[Dict[str, Any]]:
    """
    Extract a JSON object from model output.

    Models often wrap JSON in prose or code fences and emit single quotes
    or trailing commas; json_repair handles those.
    """
    return _extract(response_text, dict, '{', '}')


def extract_json_array(response_text: str) -> Optional[List[Any]]:
    """Extract a JSON array from model output."""
    return _extract(response_text, list, '[', ']')


class BaseCompletionClient(ABC):
    """
    Abstract base class for text-completion clients.

    Implementations must provide:
    - generate(): async completion returning {"text": ...}
    - model_name
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)

        self._inference_count = 0
        self._failure_count = 0
        self._total_inference_time = 0.0

    @property
    @abstractmethod
    def model_name(self) -> str:
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Generate a completion.

        Returns:
            {
                "text": str,            # Generated text
                "model": str,           # Model identifier
                "inference_time": float # Seconds, all attempts included
            }

        Raises:
            TransientServiceError: retry budget exhausted on a retryable failure
            ServiceRequestError: non-retryable failure
        """
        pass

    async def close(self) -> None:
        """Release network resources. Nothing to do by default."""
        return None

    def get_statistics(self) -> Dict[str, Any]:
        avg_time = (
            self._total_inference_time / self._inference_count
            if self._inference_count > 0
            else 0.0
        )
        return {
            "model": self.model_name,
            "inference_count": self._inference_count,
            "failure_count": self._failure_count,
            "total_inference_time": self._total_inference_time,
            "average_inference_time": avg_time,
        }
