import asyncio
import json
import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..config import HTTP_TIMEOUT_S, LOG_PAYLOADS, ModelApiConfig
from ..schemas.assist import Message
from ..utils.error_handlers import UpstreamConnectionError, UpstreamParseError

logger = logging.getLogger(__name__)

MODEL_MAX_RETRIES = 1
_RETRY_STATUSES = {408, 429, 500, 502, 503, 504}


class RerankDocument(BaseModel):
    text: str


class RerankResult(BaseModel):
    index: int
    relevance_score: float
    document: RerankDocument | None = None


@dataclass
class ModelApi:
    """One upstream: its config plus the long-lived client carrying its default headers/params."""

    config: ModelApiConfig
    client: httpx.AsyncClient

    def url(self, endpoint: str) -> str:
        return self.config.base_url.rstrip("/") + endpoint

    def body(self, payload: dict[str, Any]) -> dict[str, Any]:
        # Operation keys win over configured defaults.
        return {**self.config.json_, **payload}


def _safe_truncate(s: str, n: int = 800) -> str:
    s = s or ""
    if len(s) <= n:
        return s
    return s[:n] + "…"


def _build_api(config: ModelApiConfig, timeout_s: float, transport: httpx.AsyncBaseTransport | None) -> ModelApi:
    client = httpx.AsyncClient(
        headers=config.headers,
        params=config.params,
        timeout=timeout_s,
        transport=transport,
    )
    return ModelApi(config=config, client=client)


def _check_stream_line(line: str) -> None:
    """Raise UpstreamParseError unless ``line`` is a well-formed event stream line."""
    stripped = line.strip()
    if not stripped or stripped.startswith(":"):
        return
    if not stripped.startswith("data:"):
        raise UpstreamParseError(f"unexpected stream line: {_safe_truncate(stripped, 200)}")
    data = stripped[len("data:"):].strip()
    if not data or data == "[DONE]":
        return
    try:
        frame = json.loads(data)
    except json.JSONDecodeError as e:
        raise UpstreamParseError(f"invalid stream frame: {e}") from e
    choices = frame.get("choices") if isinstance(frame, dict) else None
    if not isinstance(choices, list):
        raise UpstreamParseError("stream frame is missing choices")
    # The final usage frame carries an empty choices list.
    if choices and not (isinstance(choices[0], dict) and isinstance(choices[0].get("delta"), dict)):
        raise UpstreamParseError("stream frame is missing choices[0].delta")


class ModelClient:
    """Talks to the embedding, generation and reranking APIs (OpenAI-style wire formats)."""

    def __init__(
        self,
        *,
        embedding: ModelApiConfig,
        generation: ModelApiConfig,
        reranking: ModelApiConfig,
        timeout_s: float = HTTP_TIMEOUT_S,
        max_retries: int = MODEL_MAX_RETRIES,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.embedding_api = _build_api(embedding, timeout_s, transport)
        self.generation_api = _build_api(generation, timeout_s, transport)
        self.reranking_api = _build_api(reranking, timeout_s, transport)
        self.max_retries = max_retries

    async def aclose(self) -> None:
        for api in (self.embedding_api, self.generation_api, self.reranking_api):
            await api.client.aclose()

    async def _post(self, api: ModelApi, endpoint: str, payload: dict[str, Any]) -> Any:
        url = api.url(endpoint)
        body = api.body(payload)
        start = time.perf_counter()

        for attempt in range(self.max_retries + 1):
            if LOG_PAYLOADS:
                logger.info("model api request url=%s body=%s", url, _safe_truncate(json.dumps(body, ensure_ascii=False)))
            try:
                r = await api.client.post(url, json=body)
            except (httpx.ReadTimeout, httpx.ConnectTimeout, httpx.PoolTimeout):
                if attempt < self.max_retries:
                    backoff = 0.5 * (2**attempt)
                    logger.warning("model api timeout url=%s; retrying in %.1fs", url, backoff)
                    await asyncio.sleep(backoff)
                    continue
                raise UpstreamConnectionError(f"request to {url} timed out") from None
            except httpx.RequestError as e:
                if attempt < self.max_retries:
                    backoff = 0.5 * (2**attempt)
                    logger.warning("model api network error (%s); retrying in %.1fs", type(e).__name__, backoff)
                    await asyncio.sleep(backoff)
                    continue
                raise UpstreamConnectionError(f"request to {url} failed: {type(e).__name__}: {e}") from e

            if r.status_code >= 400:
                # Retry only on transient server errors / rate limits.
                if r.status_code in _RETRY_STATUSES and attempt < self.max_retries:
                    backoff = 0.5 * (2**attempt)
                    logger.warning("model api HTTP %s url=%s; retrying in %.1fs", r.status_code, url, backoff)
                    await asyncio.sleep(backoff)
                    continue
                raise UpstreamConnectionError(
                    f"{url} responded with HTTP {r.status_code}: {_safe_truncate(r.text, 1000)}"
                )

            try:
                data = r.json()
            except ValueError as e:
                raise UpstreamParseError(f"{url} returned invalid JSON: {e}") from e
            logger.info(
                "model api ok url=%s status=%s latency_ms=%s retries=%s",
                url,
                r.status_code,
                int((time.perf_counter() - start) * 1000),
                attempt,
            )
            return data

        raise UpstreamConnectionError(f"request to {url} failed")  # pragma: no cover

    async def embed(self, text: str) -> list[float]:
        data = await self._post(self.embedding_api, "/embeddings", {"input": text})
        try:
            embedding = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamParseError("embedding response is missing data[0].embedding") from e
        if not isinstance(embedding, list) or not all(isinstance(x, (int, float)) for x in embedding):
            raise UpstreamParseError("embedding response data[0].embedding is not a list of numbers")
        return [float(x) for x in embedding]

    async def generate(self, messages: list[Message], response_format: dict[str, Any] | None = None) -> str:
        payload: dict[str, Any] = {"messages": [m.model_dump(mode="json") for m in messages]}
        if response_format is not None:
            payload["response_format"] = response_format
        data = await self._post(self.generation_api, "/chat/completions", payload)
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamParseError("generation response is missing choices[0].message.content") from e
        if not isinstance(content, str):
            raise UpstreamParseError("generation response content is not a string")
        return content

    async def generate_stream(self, messages: list[Message]) -> AsyncIterator[bytes]:
        """Start a streaming completion and return an iterator over its event-stream lines.

        Connection and HTTP errors are raised here, before any byte is relayed;
        malformed frames raise from inside the iterator.
        """
        api = self.generation_api
        url = api.url("/chat/completions")
        body = api.body(
            {
                "messages": [m.model_dump(mode="json") for m in messages],
                "stream": True,
                "stream_options": {"include_usage": True},
            }
        )
        request = api.client.build_request("POST", url, json=body)
        try:
            response = await api.client.send(request, stream=True)
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"request to {url} failed: {type(e).__name__}: {e}") from e
        if response.status_code >= 400:
            await response.aread()
            await response.aclose()
            raise UpstreamConnectionError(
                f"{url} responded with HTTP {response.status_code}: {_safe_truncate(response.text, 1000)}"
            )
        logger.info("model api stream open url=%s status=%s", url, response.status_code)
        return self._relay(response)

    async def _relay(self, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for line in response.aiter_lines():
                _check_stream_line(line)
                yield (line + "\n").encode("utf-8")
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"stream interrupted: {type(e).__name__}: {e}") from e
        finally:
            await response.aclose()

    async def rerank(self, query: str, documents: list[str]) -> list[RerankResult]:
        data = await self._post(self.reranking_api, "/rerank", {"query": query, "documents": documents})
        raw = data.get("results") if isinstance(data, dict) else None
        if not isinstance(raw, list):
            raise UpstreamParseError("rerank response is missing results")
        try:
            results = [RerankResult.model_validate(item) for item in raw]
        except PydanticValidationError as e:
            raise UpstreamParseError(f"rerank response item is malformed: {e}") from e
        for result in results:
            if not 0 <= result.index < len(documents):
                raise UpstreamParseError(f"rerank result index {result.index} is out of range")
        return results
