import asyncio
import json

import httpx
import pytest


def _client(handler, **kwargs):
    from backend.toi.config import ModelApiConfig
    from backend.toi.services.model_client import ModelClient

    return ModelClient(
        embedding=ModelApiConfig(
            base_url="http://e.test/v1/",
            headers={"Authorization": "Bearer e"},
            params={"api-version": "1"},
            json={"model": "embedder", "input": "overridden"},
        ),
        generation=ModelApiConfig(base_url="http://g.test/v1", json={"model": "generator"}),
        reranking=ModelApiConfig(base_url="http://r.test/v1"),
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_embed_merges_configured_defaults():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": [{"embedding": [1, 0.5, 0]}]})

    client = _client(handler)
    vec = asyncio.run(client.embed("hello"))
    assert vec == [1.0, 0.5, 0.0]
    assert seen["url"] == "http://e.test/v1/embeddings?api-version=1"
    assert seen["auth"] == "Bearer e"
    # Operation keys win over configured defaults.
    assert seen["body"] == {"model": "embedder", "input": "hello"}


def test_embed_rejects_malformed_payload():
    from backend.toi.utils.error_handlers import UpstreamParseError

    client = _client(lambda request: httpx.Response(200, json={"data": []}))
    with pytest.raises(UpstreamParseError):
        asyncio.run(client.embed("hello"))


def test_http_errors_are_retried_then_raised(monkeypatch):
    from backend.toi.services import model_client as mc
    from backend.toi.utils.error_handlers import UpstreamConnectionError

    async def no_sleep(seconds):
        return None

    monkeypatch.setattr(mc.asyncio, "sleep", no_sleep)
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(503, text="busy")

    client = _client(handler, max_retries=2)
    with pytest.raises(UpstreamConnectionError) as exc_info:
        asyncio.run(client.embed("hello"))
    assert len(attempts) == 3
    assert exc_info.value.status_code == 502
    assert "503" in exc_info.value.message


def test_client_errors_are_not_retried():
    from backend.toi.utils.error_handlers import UpstreamConnectionError

    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(400, text="bad request")

    client = _client(handler, max_retries=3)
    with pytest.raises(UpstreamConnectionError):
        asyncio.run(client.generate([]))
    assert len(attempts) == 1


def test_generate_forwards_response_format():
    from backend.toi.schemas.assist import Message, MessageRole

    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "6"}}]})

    client = _client(handler)
    fmt = {"type": "json_object"}
    reply = asyncio.run(client.generate([Message(role=MessageRole.user, content="hi")], fmt))
    assert reply == "6"
    assert seen["body"]["model"] == "generator"
    assert seen["body"]["messages"] == [{"role": "user", "content": "hi"}]
    assert seen["body"]["response_format"] == fmt


def test_rerank_validates_indices():
    from backend.toi.utils.error_handlers import UpstreamParseError

    def handler(request):
        return httpx.Response(200, json={"results": [{"index": 0, "relevance_score": 0.9}, {"index": 5, "relevance_score": 0.1}]})

    client = _client(handler)
    with pytest.raises(UpstreamParseError):
        asyncio.run(client.rerank("q", ["a", "b"]))


def test_rerank_returns_scores():
    def handler(request):
        body = json.loads(request.content)
        assert body == {"query": "rice", "documents": ["fried rice", "pasta"]}
        return httpx.Response(
            200,
            json={"results": [{"index": 0, "relevance_score": 0.9, "document": {"text": "fried rice"}}]},
        )

    client = _client(handler)
    results = asyncio.run(client.rerank("rice", ["fried rice", "pasta"]))
    assert [(r.index, r.relevance_score) for r in results] == [(0, 0.9)]
    assert results[0].document.text == "fried rice"


def _collect(client, messages):
    async def run():
        stream = await client.generate_stream(messages)
        return [chunk async for chunk in stream]

    return asyncio.run(run())


def test_generate_stream_relays_event_lines():
    seen = {}
    sse = (
        'data: {"choices": [{"index": 0, "delta": {"content": "Hi"}}]}\n\n'
        'data: {"choices": [], "usage": {"total_tokens": 1}}\n\n'
        "data: [DONE]\n\n"
    )

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, content=sse.encode())

    chunks = _collect(_client(handler), [])
    assert b"".join(chunks).decode() == sse
    assert seen["body"]["stream"] is True
    assert seen["body"]["stream_options"] == {"include_usage": True}


def test_generate_stream_rejects_malformed_frames():
    from backend.toi.utils.error_handlers import UpstreamParseError

    def handler(request):
        return httpx.Response(200, content=b'data: {"nope": 1}\n\n')

    with pytest.raises(UpstreamParseError):
        _collect(_client(handler), [])


@pytest.mark.parametrize(
    "line",
    ['data: {"choices": ["oops"]}', 'data: {"choices": [null]}', 'data: {"choices": [{"delta": "x"}]}'],
)
def test_stream_line_with_malformed_choice(line):
    from backend.toi.services.model_client import _check_stream_line
    from backend.toi.utils.error_handlers import UpstreamParseError

    with pytest.raises(UpstreamParseError):
        _check_stream_line(line)


def test_generate_stream_raises_before_streaming_on_http_error():
    from backend.toi.utils.error_handlers import UpstreamConnectionError

    client = _client(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(UpstreamConnectionError):
        asyncio.run(client.generate_stream([]))
