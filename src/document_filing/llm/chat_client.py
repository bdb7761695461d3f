# ============================================================================
# src/document_filing/llm/chat_client.py
# ============================================================================
"""
Chat-Completions Client

Talks to any OpenAI-compatible /chat/completions endpoint (Together for the
analysis stages, OpenAI for the critic) over aiohttp with bearer auth.

Failure mapping:
- network errors, timeouts, HTTP 5xx, HTTP 429 -> TransientServiceError (retried)
- any other non-2xx                              -> ServiceRequestError
- 2xx with a non-JSON body                       -> MalformedResponseError
- 2xx without message content                    -> MalformedResponseError
"""

from typing import Dict, Any, Optional
import asyncio
import json
import time

import aiohttp

from ...utils.exceptions import (
    MalformedResponseError,
    ServiceRequestError,
    TransientServiceError,
)
from ...utils.logging import LogAdapter
from .base import BaseCompletionClient
from .retry import RetryPolicy


def _retry_after_seconds(headers) -> Optional[float]:
    value = headers.get("Retry-After") if headers else None
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class ChatCompletionClient(BaseCompletionClient):
    """
    OpenAI-compatible chat-completions client.

    Config options:
        api_url: Endpoint URL
        api_key: Bearer token
        model: Model name
        max_tokens: Default max tokens
        temperature: Default temperature
        request_timeout: Per-attempt timeout in seconds (default: 120)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, retry_policy: Optional[RetryPolicy] = None):
        super().__init__(config)

        self.api_url = self.config.get('api_url', '')
        self.api_key = self.config.get('api_key', '')
        self._model_name = self.config.get('model', '')
        self.default_max_tokens = self.config.get('max_tokens', 800)
        self.default_temperature = self.config.get('temperature', 0.2)
        self.request_timeout = self.config.get('request_timeout', 120)
        self.retry_policy = retry_policy or RetryPolicy()
        self.logger = LogAdapter(self.logger, {"model": self._model_name, "api_url": self.api_url})

        # HTTP session (created lazily, tied to event loop)
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def model_name(self) -> str:
        return self._model_name

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session for current event loop."""
        current_loop = asyncio.get_running_loop()

        needs_new_session = (
            self._session is None
            or self._session.closed
            or self._session_loop is not current_loop
        )

        if needs_new_session:
            if self._session is not None and not self._session.closed and self._session_loop is current_loop:
                await self._session.close()

            timeout = aiohttp.ClientTimeout(total=None, sock_connect=30)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
            self._session_loop = current_loop

        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._session_loop = None

    async def _post_once(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        session = await self._get_session()

        async def _do_request():
            async with session.post(self.api_url, json=payload) as response:
                if response.status == 429 or response.status >= 500:
                    error_text = await response.text()
                    raise TransientServiceError(
                        f"Completion service error ({response.status}): {error_text[:200]}",
                        status=response.status,
                        retry_after=_retry_after_seconds(response.headers),
                    )
                if response.status < 200 or response.status >= 300:
                    error_text = await response.text()
                    raise ServiceRequestError(
                        f"Completion service rejected request ({response.status}): {error_text[:200]}",
                        status=response.status,
                    )
                try:
                    return await response.json(content_type=None)
                except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
                    body = await response.text()
                    raise MalformedResponseError(
                        f"Completion service returned a non-JSON body ({response.status}): {body[:200]}"
                    ) from e

        try:
            return await asyncio.wait_for(_do_request(), timeout=self.request_timeout)
        except asyncio.TimeoutError:
            raise TransientServiceError(
                f"Completion request timed out after {self.request_timeout}s (model={self._model_name})"
            )
        except aiohttp.ClientError as e:
            raise TransientServiceError(f"Cannot reach completion service at {self.api_url}: {e}")

    async def generate(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> Dict[str, Any]:
        start_time = time.perf_counter()

        payload = {
            "model": self._model_name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens or self.default_max_tokens,
            "temperature": temperature if temperature is not None else self.default_temperature,
        }

        try:
            data = await self.retry_policy.run(
                lambda: self._post_once(payload),
                description=f"{self._model_name} completion",
            )
        except Exception:
            self._failure_count += 1
            raise

        try:
            text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            self._failure_count += 1
            raise MalformedResponseError(f"Unexpected completion payload: {str(data)[:200]}") from e

        inference_time = time.perf_counter() - start_time
        self._inference_count += 1
        self._total_inference_time += inference_time

        usage = data.get("usage") or {}
        self.logger.info(
            f"Generated {usage.get('completion_tokens', 0)} tokens in {inference_time:.2f}s ({self._model_name})"
        )

        return {
            "text": text.strip(),
            "model": self._model_name,
            "prompt_tokens": usage.get("prompt_tokens", 0),
            "generated_tokens": usage.get("completion_tokens", 0),
            "inference_time": inference_time,
        }
