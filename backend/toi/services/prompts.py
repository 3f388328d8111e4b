"""
System prompts and response formats for the assistant pipeline.

Every function here is a pure string/dict builder so prompts can be
snapshotted in tests.
"""
import json

from ..schemas.assist import ExecutedRequest, HttpMethod, Plan, PlannedRequest, ResponseKind

RESPONSE_KIND_DESCRIPTIONS = {
    ResponseKind.unfulfillable: (
        "Unfulfillable: the user's message cannot accurately be responded to by an answer "
        "or fulfilled by HTTP request(s). It's best to notify the user."
    ),
    ResponseKind.follow_up: (
        "Follow-up: the user's message cannot be fulfilled by an answer or HTTP request(s). "
        "It's best to follow-up to seek clarification."
    ),
    ResponseKind.answer: (
        "Answer: the user's message is clear and can be answered directly without HTTP "
        "request(s). It's best to concisely answer."
    ),
    ResponseKind.answer_with_draft_requests: (
        "Answer with draft HTTP request(s): the user's message indicates they want an action "
        "to be performed with HTTP request(s), but the HTTP request(s) could benefit from user "
        "clarifications and/or updates. It's best to show a draft of the HTTP request(s) to the "
        "user and seek their input and confirmation."
    ),
    ResponseKind.partially_answer_with_requests: (
        "Partially answer with HTTP request(s): the user's message is clear and can be "
        "accurately fulfilled with HTTP request(s), but it's best to only partially fulfill "
        "those HTTP request(s) to make sure the user understands exactly what they're "
        "requesting. This is good for scenarios where the user is requesting a lot of changes "
        "like deleting or adding a lot of resources, and it's best to retrieve the resources "
        "first so the user can confirm."
    ),
    ResponseKind.answer_with_requests: (
        "Answer with HTTP request(s): the user's message is clear and can be accurately "
        "fulfilled with HTTP request(s). It's best to make the HTTP request(s) and summarize "
        "those requests and their respective responses to the user. This is good for scenarios "
        "where the user is requesting small changes like deleting or adding one or two resources."
    ),
}

CLASSIFICATION_INTRO = (
    "You are a chat assistant that helps preprocess a user's message. Given an OpenAPI spec "
    "and a chat history, your job is to classify what kind of response is best."
)
CLASSIFICATION_OUTRO = "Only respond with the number of the response that fits best and nothing else."

SIMPLE_INTRO = (
    "You are a helpful assistant, but don't ever mention you're a language model or that you "
    "have limitations. If you don't know the answer to something, say so."
)

PLAN_INTRO = (
    "You are a chat assistant that plans HTTP requests to make on behalf of a user. Given an "
    "OpenAPI spec and a chat history, your job is to list the HTTP requests, in order, that "
    "fulfill the user's message. Later requests can depend on the responses of earlier ones."
)
PLAN_OUTRO = (
    "Only respond with the JSON of the plan and nothing else. The JSON should have format:\n\n"
    "{\n"
    '    "requests": [\n'
    "        {\n"
    '            "method": DELETE/GET/POST/PUT,\n'
    '            "path": The endpoint path beginning with a forward slash,\n'
    '            "description": Description of the purpose of this request as part of the plan\n'
    "        }\n"
    "    ]\n"
    "}"
)

REQUEST_INTRO = "Your job is to construct an HTTP request. Respond concisely in JSON format."
REQUEST_OUTRO = (
    "Only respond with the JSON of the HTTP request and nothing else. The JSON should have format:\n\n"
    "{\n"
    '    "method": DELETE/GET/POST/PUT,\n'
    '    "path": The endpoint path beginning with a forward slash,\n'
    '    "params": Mapping of query parameter names to their values,\n'
    '    "body": Mapping of JSON body parameter names to their values\n'
    "}"
)

SUMMARY_INTRO = (
    "Your job is to concisely summarize the HTTP requests made on the user's behalf and their "
    "responses. If a response indicates an error, describe the error in detail, apologize, "
    "and then ask the user to try again."
)

_METHODS = [m.value for m in HttpMethod]


def _openapi_section(openapi_spec: str) -> str:
    return f"Here is the OpenAPI spec for reference:\n\n{openapi_spec}"


def _executed_section(executed: list[ExecutedRequest]) -> str:
    if not executed:
        return "None"
    return "\n".join(item.to_text() for item in executed)


def response_classification_prompt(openapi_spec: str) -> str:
    options = "\n".join(f"{kind.value}. {RESPONSE_KIND_DESCRIPTIONS[kind]}" for kind in ResponseKind)
    return (
        f"{CLASSIFICATION_INTRO}\n\n"
        f"{_openapi_section(openapi_spec)}\n\n"
        f"And here are your classification options:\n\n{options}\n\n"
        f"{CLASSIFICATION_OUTRO}"
    )


def simple_prompt(kind: ResponseKind, openapi_spec: str) -> str:
    return (
        f"{SIMPLE_INTRO}\n\n"
        f"{_openapi_section(openapi_spec)}\n\n"
        f"And here is how you should respond:\n\n{RESPONSE_KIND_DESCRIPTIONS[kind]}"
    )


def plan_prompt(kind: ResponseKind, openapi_spec: str) -> str:
    return (
        f"{PLAN_INTRO}\n\n"
        f"{_openapi_section(openapi_spec)}\n\n"
        f"And here is how you should respond:\n\n{RESPONSE_KIND_DESCRIPTIONS[kind]}\n\n"
        f"{PLAN_OUTRO}"
    )


def plan_response_format() -> dict:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "plan",
            "schema": {
                "type": "object",
                "properties": {
                    "requests": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "method": {"type": "string", "enum": _METHODS},
                                "path": {
                                    "type": "string",
                                    "description": "The endpoint path beginning with a forward slash",
                                    "pattern": "^/",
                                },
                                "description": {
                                    "type": "string",
                                    "description": "Description of the purpose of this request as part of the plan",
                                },
                            },
                            "additionalProperties": False,
                            "required": ["method", "path", "description"],
                        },
                    }
                },
                "additionalProperties": False,
                "required": ["requests"],
            },
        },
    }


def request_prompt(
    openapi_spec: str,
    plan: Plan,
    executed: list[ExecutedRequest],
    step: PlannedRequest,
) -> str:
    plan_text = json.dumps(plan.model_dump(mode="json"), indent=2)
    return (
        f"{REQUEST_INTRO}\n\n"
        f"{_openapi_section(openapi_spec)}\n\n"
        f"Here is the full plan of requests:\n\n{plan_text}\n\n"
        f"Here are the requests made so far and their responses:\n{_executed_section(executed)}\n\n"
        f"And here is the request to construct now:\n\n{step.method.value} {step.path}: {step.description}\n\n"
        f"{REQUEST_OUTRO}"
    )


def request_response_format(step: PlannedRequest) -> dict:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "request",
            "schema": {
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "The endpoint path beginning with a forward slash",
                        "enum": [step.path],
                    },
                    "method": {
                        "type": "string",
                        "description": "The HTTP method to use for the request",
                        "enum": [step.method.value],
                    },
                    "params": {"type": "object", "description": "Query parameters"},
                    "body": {"type": "object", "description": "JSON body"},
                },
                "additionalProperties": False,
                "required": ["path", "method", "params", "body"],
            },
        },
    }


def step_message(step: PlannedRequest, previous_response: str | None) -> str:
    if previous_response is None:
        return step.description
    return (
        f"\nHere's the response from that request:\n\n{previous_response}\n\n"
        f"And here's the description for the next request:\n\n{step.description}"
    )


def summary_prompt(executed: list[ExecutedRequest]) -> str:
    return f"{SUMMARY_INTRO}\n\nHere are the HTTP request-responses:\n{_executed_section(executed)}"
