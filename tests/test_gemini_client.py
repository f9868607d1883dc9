import asyncio
import json

import httpx
import pytest

from smarthomework.gemini_client import GeminiClient, GeminiError
from smarthomework.settings import Settings


def _config(**env):
    values = {"GEMINI_API_KEY": "test-key"}
    values.update(env)
    return Settings(**values)


def _run(client, coro):
    async def go():
        try:
            return await coro
        finally:
            await client.aclose()

    return asyncio.run(go())


def test_generate_json_sends_schema_and_reads_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": '{"ok": '}, {"text": "true}"}]}}]},
        )

    client = GeminiClient(_config(), transport=httpx.MockTransport(handler))
    text = _run(client, client.generate_json("prompt", {"type": "OBJECT"}, temperature=0.3))

    assert text == '{"ok": true}'
    assert "key=test-key" in seen["url"]
    assert "gemini-2.5-flash:generateContent" in seen["url"]
    config = seen["body"]["generationConfig"]
    assert config["responseMimeType"] == "application/json"
    assert config["responseSchema"] == {"type": "OBJECT"}
    assert config["temperature"] == 0.3


def test_vertex_uses_header_auth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["headers"] = request.headers
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "hi"}]}}]})

    config = _config(GEMINI_PROVIDER="vertex", GEMINI_VERTEX_PROJECT="proj")
    client = GeminiClient(config, transport=httpx.MockTransport(handler))
    assert _run(client, client.generate("hello")) == "hi"
    assert seen["headers"]["x-goog-api-key"] == "test-key"
    assert "projects/proj" in seen["url"]
    assert "key=" not in seen["url"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(200, text="<html>"),
    ],
)
def test_errors_become_gemini_error(response):
    client = GeminiClient(_config(), transport=httpx.MockTransport(lambda request: response))
    with pytest.raises(GeminiError):
        _run(client, client.generate("x"))


def test_missing_key_is_rejected():
    with pytest.raises(ValueError):
        GeminiClient(Settings(GEMINI_API_KEY=None))
