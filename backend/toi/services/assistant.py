"""
Assistant turn pipeline.

classify -> (one-shot answer | plan -> for each step: materialize -> execute) -> summarize

Each step of a plan is turned into a concrete request against our own HTTP
surface and sent over loopback, so the model only ever sees (and drives)
the same API contract external clients use.
"""
import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from ..schemas.assist import (
    ExecutedRequest,
    GeneratedRequest,
    Message,
    MessageRole,
    Plan,
    PlannedRequest,
    ResponseKind,
)
from ..state import ToiState
from ..utils.error_handlers import UpstreamConnectionError
from . import prompts
from .llm_json import parse_first_int, parse_generated

logger = logging.getLogger(__name__)


def _with_system(system_prompt: str, history: list[Message]) -> list[Message]:
    return [Message(role=MessageRole.system, content=system_prompt), *history]


def _stream_frame(content: str) -> bytes:
    frame = {"choices": [{"index": 0, "delta": {"content": content}}]}
    return f"data: {json.dumps(frame)}\n\ndata: [DONE]\n\n".encode("utf-8")


async def _single_frame(content: str) -> AsyncIterator[bytes]:
    yield _stream_frame(content)


def _query_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
    """Flatten generated JSON params into something a query string can carry."""
    if not params:
        return None
    flat: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            flat[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            flat[key] = [v if isinstance(v, (str, int, float)) else json.dumps(v) for v in value]
        elif isinstance(value, dict):
            flat[key] = json.dumps(value)
        else:
            flat[key] = value
    return flat


async def classify(state: ToiState, history: list[Message]) -> ResponseKind:
    messages = _with_system(prompts.response_classification_prompt(state.openapi_spec), history)
    reply = await state.model_client.generate(messages)
    kind = ResponseKind.from_number(parse_first_int(reply))
    logger.info("assistant classified kind=%s", kind.name)
    return kind


async def plan_requests(state: ToiState, kind: ResponseKind, history: list[Message]) -> Plan:
    messages = _with_system(prompts.plan_prompt(kind, state.openapi_spec), history)
    reply = await state.model_client.generate(messages, prompts.plan_response_format())
    plan = parse_generated(reply, Plan)
    logger.info("assistant planned steps=%s", [f"{s.method.value} {s.path}" for s in plan.requests])
    return plan


async def materialize(
    state: ToiState,
    plan: Plan,
    executed: list[ExecutedRequest],
    step: PlannedRequest,
    history: list[Message],
) -> GeneratedRequest:
    messages = _with_system(prompts.request_prompt(state.openapi_spec, plan, executed, step), history)
    reply = await state.model_client.generate(messages, prompts.request_response_format(step))
    return parse_generated(reply, GeneratedRequest)


async def execute(state: ToiState, request: GeneratedRequest) -> str:
    """Send ``request`` to our own routes and return the response body as text.

    Non-2xx responses are returned like any other; only transport failures raise.
    """
    kwargs: dict[str, Any] = {"params": _query_params(request.params)}
    if request.body is not None and request.method.value not in ("GET", "DELETE"):
        kwargs["json"] = request.body
    try:
        r = await state.loopback_client.request(request.method.value, request.path, **kwargs)
    except httpx.RequestError as e:
        raise UpstreamConnectionError(f"loopback request {request.method.value} {request.path} failed: {e}") from e
    logger.info("assistant executed %s %s status=%s", request.method.value, request.path, r.status_code)
    return r.text


async def run_plan(state: ToiState, plan: Plan, history: list[Message]) -> list[ExecutedRequest]:
    executed: list[ExecutedRequest] = []
    conversation = list(history)
    previous_response: str | None = None
    for step in plan.requests:
        conversation.append(Message(role=MessageRole.user, content=prompts.step_message(step, previous_response)))
        request = await materialize(state, plan, executed, step, conversation)
        request_text = request.to_text()
        conversation.append(Message(role=MessageRole.assistant, content=request_text))
        try:
            previous_response = await execute(state, request)
        except UpstreamConnectionError as e:
            # Later steps usually depend on this one; stop and let the summary narrate it.
            logger.warning("assistant loopback failed: %s", e.message)
            executed.append(ExecutedRequest(request=request_text, response=e.message))
            break
        executed.append(ExecutedRequest(request=request_text, response=previous_response))
    return executed


async def summarize(state: ToiState, executed: list[ExecutedRequest], history: list[Message]) -> AsyncIterator[bytes]:
    messages = _with_system(prompts.summary_prompt(executed), history)
    return await state.model_client.generate_stream(messages)


async def answer(state: ToiState, kind: ResponseKind, history: list[Message]) -> AsyncIterator[bytes]:
    messages = _with_system(prompts.simple_prompt(kind, state.openapi_spec), history)
    reply = await state.model_client.generate(messages)
    return _single_frame(reply)


async def assist(state: ToiState, history: list[Message]) -> AsyncIterator[bytes]:
    """Run one assistant turn and return the byte stream to relay to the client."""
    kind = await classify(state, history)
    if not kind.executes_requests:
        return await answer(state, kind, history)
    plan = await plan_requests(state, kind, history)
    executed = await run_plan(state, plan, history)
    return await summarize(state, executed, history)
