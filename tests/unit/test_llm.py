# ============================================================================
# tests/unit/test_llm.py
# ============================================================================
"""
Tests for JSON extraction, the retry policy, the client factory and the
chat-completions client against a local aiohttp server.
"""

import pytest
from aiohttp import web

from src.document_filing.llm.base import extract_json, extract_json_array
from src.document_filing.llm.chat_client import ChatCompletionClient
from src.document_filing.llm.client import ANALYSIS, CRITIC, close_clients, create_client
from src.document_filing.llm.retry import RetryPolicy
from src.utils.exceptions import (
    ConfigurationError,
    MalformedResponseError,
    ServiceRequestError,
    TransientServiceError,
)


class FakeSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def completion(content):
    return {
        "choices": [{"message": {"content": content}}],
        "usage": {"prompt_tokens": 120, "completion_tokens": 30},
    }


async def start_server(responses):
    """Serve scripted (status, body, headers) tuples on a free local port. String bodies go out as HTML."""
    requests = []

    async def handler(request):
        requests.append(await request.json())
        status, body, headers = responses.pop(0)
        if isinstance(body, str):
            return web.Response(text=body, status=status, headers=headers, content_type="text/html")
        return web.json_response(body, status=status, headers=headers)

    app = web.Application()
    app.router.add_post("/v1/chat/completions", handler)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    return runner, f"http://127.0.0.1:{port}/v1/chat/completions", requests


class TestExtractJson:
    """Test lenient JSON extraction"""

    def test_plain_object(self):
        assert extract_json('{"fileType": "Passport"}') == {"fileType": "Passport"}

    def test_code_fence(self):
        assert extract_json('```json\n{"fileType": "Passport"}\n```') == {"fileType": "Passport"}

    def test_trailing_comma(self):
        assert extract_json('{"fileType": "Passport", "confidence": 0.9,}') == {
            "fileType": "Passport",
            "confidence": 0.9,
        }

    def test_object_inside_prose(self):
        text = 'Here is my answer: {"fileType": "Lease", "confidence": 0.7} Hope that helps.'
        assert extract_json(text)["fileType"] == "Lease"

    def test_no_json(self):
        assert extract_json("The document is a passport.") is None

    def test_empty(self):
        assert extract_json("") is None
        assert extract_json("   ") is None

    def test_array_is_not_an_object(self):
        assert extract_json("[1, 2, 3]") is None

    def test_array(self):
        assert extract_json_array('[{"itemId": "kyc-passport", "confidence": 0.9}]') == [
            {"itemId": "kyc-passport", "confidence": 0.9}
        ]
        assert extract_json_array("[]") == []


class TestRetryPolicy:
    """Test bounded exponential backoff"""

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        sleep = FakeSleep()
        attempts = []

        async def operation():
            attempts.append(1)
            if len(attempts) < 3:
                raise TransientServiceError("503", status=503)
            return "ok"

        result = await RetryPolicy(max_attempts=3, initial_delay=1.0, multiplier=2.0, sleep=sleep).run(operation)

        assert result == "ok"
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_non_retryable_raised_immediately(self):
        sleep = FakeSleep()
        attempts = []

        async def operation():
            attempts.append(1)
            raise ServiceRequestError("400", status=400)

        with pytest.raises(ServiceRequestError):
            await RetryPolicy(sleep=sleep).run(operation)

        assert len(attempts) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_budget_exhausted(self):
        sleep = FakeSleep()
        attempts = []

        async def operation():
            attempts.append(1)
            raise TransientServiceError("timeout")

        with pytest.raises(TransientServiceError):
            await RetryPolicy(max_attempts=3, sleep=sleep).run(operation)

        assert len(attempts) == 3
        assert len(sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_retry_after_wins(self):
        sleep = FakeSleep()
        errors = [TransientServiceError("429", status=429, retry_after=7.0)]

        async def operation():
            if errors:
                raise errors.pop()
            return "ok"

        await RetryPolicy(sleep=sleep).run(operation)
        assert sleep.delays == [7.0]

    def test_backoff_capped(self):
        policy = RetryPolicy(initial_delay=4.0, max_delay=10.0, multiplier=2.0)
        assert policy.backoff(0) == 4.0
        assert policy.backoff(2) == 10.0


class TestClientFactory:
    """Test client creation and caching"""

    def test_no_credential(self):
        assert create_client(ANALYSIS, {"together_api_key": ""}) is None
        assert create_client(CRITIC, {"openai_api_key": ""}) is None

    def test_unknown_service(self):
        with pytest.raises(ConfigurationError):
            create_client("vision", {})

    @pytest.mark.asyncio
    async def test_clients_cached(self):
        config = {
            "together_api_key": "test-key",
            "analysis_api_url": "http://127.0.0.1:9/v1/chat/completions",
            "analysis_model": "test-model",
        }
        try:
            first = create_client(ANALYSIS, config)
            second = create_client(ANALYSIS, config)

            assert isinstance(first, ChatCompletionClient)
            assert first is second
            assert first.model_name == "test-model"
        finally:
            await close_clients()

        assert create_client(ANALYSIS, config) is not first
        await close_clients()


class TestChatCompletionClient:
    """Test HTTP status mapping against a local server"""

    @pytest.mark.asyncio
    async def test_retries_server_error_then_succeeds(self):
        runner, url, requests = await start_server([
            (503, {"error": "overloaded"}, {"Retry-After": "0"}),
            (200, completion('  {"fileType": "Passport"}  '), None),
        ])
        client = ChatCompletionClient(
            {"api_url": url, "api_key": "k", "model": "test-model"},
            retry_policy=RetryPolicy(sleep=FakeSleep()),
        )
        try:
            result = await client.generate("Classify this", max_tokens=50, temperature=0.1)
        finally:
            await client.close()
            await runner.cleanup()

        assert result["text"] == '{"fileType": "Passport"}'
        assert result["generated_tokens"] == 30
        assert len(requests) == 2
        assert requests[0]["model"] == "test-model"
        assert requests[0]["max_tokens"] == 50
        assert requests[0]["messages"][0]["content"] == "Classify this"

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        runner, url, requests = await start_server([(400, {"error": "bad request"}, None)])
        client = ChatCompletionClient(
            {"api_url": url, "api_key": "k", "model": "m"},
            retry_policy=RetryPolicy(sleep=FakeSleep()),
        )
        try:
            with pytest.raises(ServiceRequestError) as exc_info:
                await client.generate("x")
        finally:
            await client.close()
            await runner.cleanup()

        assert exc_info.value.status == 400
        assert len(requests) == 1
        assert client.get_statistics()["failure_count"] == 1

    @pytest.mark.asyncio
    async def test_empty_choices_malformed(self):
        runner, url, _ = await start_server([(200, {"choices": []}, None)])
        client = ChatCompletionClient({"api_url": url, "api_key": "k", "model": "m"})
        try:
            with pytest.raises(MalformedResponseError):
                await client.generate("x")
        finally:
            await client.close()
            await runner.cleanup()

    @pytest.mark.asyncio
    async def test_html_body_malformed(self):
        runner, url, requests = await start_server([(200, "<html>gateway</html>", None)])
        client = ChatCompletionClient(
            {"api_url": url, "api_key": "k", "model": "m"},
            retry_policy=RetryPolicy(sleep=FakeSleep()),
        )
        try:
            with pytest.raises(MalformedResponseError) as exc_info:
                await client.generate("x")
        finally:
            await client.close()
            await runner.cleanup()

        assert "gateway" in str(exc_info.value)
        assert len(requests) == 1
