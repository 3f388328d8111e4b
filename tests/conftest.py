import json
import os
import re
import sys
from dataclasses import replace
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


# Ensure `import backend.toi...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before importing backend.toi.config so a developer's .env never leaks in.
os.environ["DISABLE_DOTENV"] = "1"

EMBEDDING_URL = "http://embedding.test/v1"
GENERATION_URL = "http://generation.test/v1"
RERANKING_URL = "http://reranking.test/v1"

STOPWORDS = {"a", "an", "and", "at", "for", "i", "in", "is", "my", "of", "on", "the", "to", "who", "with"}
EMBEDDING_DIM = 512


def words(text: str) -> list[str]:
    return [w for w in re.findall(r"[a-z0-9]+", text.lower()) if len(w) > 1 and w not in STOPWORDS]


def anagram_key(word: str) -> str:
    return "#" + "".join(sorted(word))


def relevance(query: str, document: str) -> float:
    """Share of query words found in the document, counting anagrams (typos like asain/asian) as hits."""
    q = words(query)
    if not q:
        return 0.0
    doc_words = set(words(document))
    doc_keys = {anagram_key(w) for w in doc_words}
    hits = sum(1 for w in q if w in doc_words or anagram_key(w) in doc_keys)
    return hits / len(q)


class FakeUpstream:
    """Stands in for the embedding, reranking and chat completion APIs.

    Embeddings are bag-of-words vectors (word + anagram features, each feature
    gets its own dimension) so cosine distance tracks word overlap. Chat replies
    are scripted per pipeline stage, keyed by the system prompt.
    """

    def __init__(self):
        self.vocab: dict[str, int] = {}
        self.replies: dict[str, list[str]] = {"classify": [], "plan": [], "request": [], "simple": []}
        self.stream_chunks: list[str] = ["Done", "."]
        self.chat_bodies: list[dict] = []
        self.calls: list[str] = []
        self.fail_with: int | None = None
        # Return rerank results worst first; callers must not rely on upstream order.
        self.rerank_reversed = False

    def embedding(self, text: str) -> list[float]:
        text = text.rsplit("Query: ", 1)[-1]
        vec = [0.0] * EMBEDDING_DIM
        for w in words(text):
            for feature in (w, anagram_key(w)):
                index = self.vocab.setdefault(feature, len(self.vocab) + 1)
                vec[index % EMBEDDING_DIM] += 1.0
        if not any(vec):
            vec[0] = 1.0
        return vec

    def _stage(self, system_prompt: str) -> str:
        from backend.toi.services import prompts

        if system_prompt.startswith(prompts.CLASSIFICATION_INTRO):
            return "classify"
        if system_prompt.startswith(prompts.PLAN_INTRO):
            return "plan"
        if system_prompt.startswith(prompts.REQUEST_INTRO):
            return "request"
        return "simple"

    def _chat(self, body: dict) -> httpx.Response:
        self.chat_bodies.append(body)
        if body.get("stream"):
            lines = []
            for chunk in self.stream_chunks:
                frame = {"choices": [{"index": 0, "delta": {"content": chunk}}]}
                lines.append(f"data: {json.dumps(frame)}\n\n")
            lines.append('data: {"choices": [], "usage": {"total_tokens": 3}}\n\n')
            lines.append("data: [DONE]\n\n")
            return httpx.Response(200, content="".join(lines).encode(), headers={"content-type": "text/event-stream"})
        stage = self._stage(body["messages"][0]["content"])
        queue = self.replies[stage]
        content = queue.pop(0) if queue else "I don't know."
        return httpx.Response(200, json={"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, text="upstream unavailable")
        body = json.loads(request.content or b"{}")
        if path.endswith("/embeddings"):
            return httpx.Response(200, json={"data": [{"index": 0, "embedding": self.embedding(body["input"])}]})
        if path.endswith("/rerank"):
            results = [
                {"index": i, "relevance_score": relevance(body["query"], doc)}
                for i, doc in enumerate(body["documents"])
            ]
            results.sort(key=lambda r: -r["relevance_score"])
            if self.rerank_reversed:
                results.reverse()
            return httpx.Response(200, json={"results": results})
        if path.endswith("/chat/completions"):
            return self._chat(body)
        return httpx.Response(404, json={"error": "unknown endpoint"})


class FakeWeb:
    """Outbound web traffic (news feed, geocoder, weather.gov), routed by host."""

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.host)
        if handler is None:
            return httpx.Response(404, text="not found")
        return handler(request)


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def web() -> FakeWeb:
    return FakeWeb()


@pytest.fixture()
def model_client(upstream: FakeUpstream):
    from backend.toi.config import ModelApiConfig
    from backend.toi.services.model_client import ModelClient

    return ModelClient(
        embedding=ModelApiConfig(base_url=EMBEDDING_URL, json={"model": "embedder"}),
        generation=ModelApiConfig(base_url=GENERATION_URL, json={"model": "generator"}),
        reranking=ModelApiConfig(base_url=RERANKING_URL, json={"model": "reranker"}),
        max_retries=0,
        transport=httpx.MockTransport(upstream),
    )


@pytest.fixture()
def toi_state(tmp_path: Path, model_client, web: FakeWeb):
    """State wired to a temporary SQLite DB, the fake model APIs and the fake web."""
    from backend.toi.config import ServerConfig
    from backend.toi.database import create_db_engine, create_session_factory, init_db
    from backend.toi.services.news import seed_aliases
    from backend.toi.state import ToiState

    engine = create_db_engine(f"sqlite:///{(tmp_path / 'toi.sqlite3').as_posix()}")
    init_db(engine)
    session_factory = create_session_factory(engine)
    seed_aliases(session_factory, ["alpha", "bravo", "charlie"])

    state = ToiState(
        session_factory=session_factory,
        model_client=model_client,
        server=ServerConfig(),
        web_client=httpx.AsyncClient(transport=httpx.MockTransport(web)),
        loopback_client=httpx.AsyncClient(base_url="http://127.0.0.1:6969"),
    )
    yield state
    engine.dispose()


@pytest.fixture()
def app(toi_state) -> FastAPI:
    from backend.toi.main import create_app

    fastapi_app = create_app(toi_state)
    # Loop the assistant's self-calls straight back into this app.
    loopback = httpx.AsyncClient(transport=httpx.ASGITransport(app=fastapi_app), base_url="http://127.0.0.1:6969")
    fastapi_app.state.toi = replace(fastapi_app.state.toi, loopback_client=loopback)
    return fastapi_app


@pytest.fixture()
def state(app: FastAPI):
    """The state the running app actually uses (OpenAPI spec and loopback filled in)."""
    return app.state.toi


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
