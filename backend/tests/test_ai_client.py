import asyncio
import json

import httpx
import pytest

from backend.ai import retry as retry_module
from backend.ai.client import OllamaClient
from backend.ai.errors import LLMError, MalformedResponseError
from backend.ai.retry import retry_with_backoff


def _generate(handler, api_key=None, **kwargs):
    transport = httpx.MockTransport(handler)

    async def run():
        async with httpx.AsyncClient(transport=transport) as client:
            llm = OllamaClient(client=client, url="http://ollama.test/api/generate", model="test-model", api_key=api_key)
            return await llm.generate("Solve it", **kwargs)

    return asyncio.run(run())


def test_generate_builds_payload():
    payloads = []

    def handler(request):
        payloads.append(json.loads(request.content))
        return httpx.Response(200, json={"response": "  C \n"})

    text = _generate(handler, json_mode=True, think_budget=1024, system="Be brief", temperature=0.1)

    assert text == "C"
    payload = payloads[0]
    assert payload["model"] == "test-model"
    assert payload["stream"] is False
    assert payload["format"] == "json"
    assert payload["think"] is True
    assert payload["system"] == "Be brief"
    assert payload["options"]["temperature"] == 0.1


def test_plain_generate_has_no_structured_flags():
    payloads = []

    def handler(request):
        payloads.append(json.loads(request.content))
        return httpx.Response(200, json={"response": "hi"})

    _generate(handler, model="other")
    assert payloads[0]["model"] == "other"
    assert "format" not in payloads[0]
    assert "think" not in payloads[0]


def test_error_status_raises_llm_error():
    def handler(request):
        return httpx.Response(429, text="rate limited")

    with pytest.raises(LLMError) as exc_info:
        _generate(handler)
    assert exc_info.value.status_code == 429
    assert exc_info.value.is_retryable


def test_search_grounds_prompt_when_key_configured():
    prompts = []

    def handler(request):
        if request.url.host == "ollama.com":
            assert request.headers["Authorization"] == "Bearer secret"
            return httpx.Response(200, json={"results": [
                {"title": "Mock AMC 10", "url": "https://example.com/mock", "content": "Problem 7: ..."}
            ]})
        prompts.append(json.loads(request.content)["prompt"])
        return httpx.Response(200, json={"response": "{}"})

    _generate(handler, api_key="secret", search=True)
    assert prompts[0].startswith("Web search results:")
    assert "Mock AMC 10" in prompts[0]
    assert prompts[0].endswith("Solve it")


def test_search_skipped_without_key():
    hosts = []

    def handler(request):
        hosts.append(request.url.host)
        return httpx.Response(200, json={"response": "ok"})

    assert _generate(handler, search=True) == "ok"
    assert hosts == ["ollama.test"]


def test_retry_backs_off_exponentially(monkeypatch):
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    calls = []

    async def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise LLMError("busy", status_code=503)
        return "done"

    assert asyncio.run(retry_with_backoff(flaky)) == "done"
    assert sleeps == [3.0, 6.0]


def test_retry_gives_up_after_limit(monkeypatch):
    async def fake_sleep(seconds):
        pass

    monkeypatch.setattr(retry_module.asyncio, "sleep", fake_sleep)
    calls = []

    async def always_limited():
        calls.append(1)
        raise LLMError("quota exceeded")

    with pytest.raises(LLMError):
        asyncio.run(retry_with_backoff(always_limited, retries=3))
    assert len(calls) == 4


def test_retry_does_not_repeat_malformed_output():
    calls = []

    async def malformed():
        calls.append(1)
        raise MalformedResponseError("no JSON")

    with pytest.raises(MalformedResponseError):
        asyncio.run(retry_with_backoff(malformed))
    assert len(calls) == 1


def test_retry_does_not_repeat_client_errors():
    calls = []

    async def bad_request():
        calls.append(1)
        raise LLMError("bad request", status_code=400)

    with pytest.raises(LLMError):
        asyncio.run(retry_with_backoff(bad_request))
    assert len(calls) == 1
