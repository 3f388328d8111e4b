import pytest


def test_extract_first_json_object_handles_wrapped_json():
    from backend.toi.services.llm_json import extract_first_json_object

    raw = "here you go:\n\n{ \"a\": 1, \"b\": {\"c\": 2} }\nthanks"
    obj = extract_first_json_object(raw)
    assert obj["a"] == 1
    assert obj["b"]["c"] == 2


def test_parse_generated_rejects_wrong_shape():
    from backend.toi.schemas.assist import Plan
    from backend.toi.services.llm_json import parse_generated
    from backend.toi.utils.error_handlers import UpstreamParseError

    with pytest.raises(UpstreamParseError):
        parse_generated('{"requests": [{"method": "PATCH", "path": "/notes", "description": "x"}]}', Plan)
    with pytest.raises(UpstreamParseError):
        parse_generated('{"requests": [{"method": "GET", "path": "notes", "description": "x"}]}', Plan)
    with pytest.raises(UpstreamParseError):
        parse_generated("", Plan)


def test_parse_first_int():
    from backend.toi.services.llm_json import parse_first_int
    from backend.toi.utils.error_handlers import UpstreamParseError

    assert parse_first_int("6") == 6
    assert parse_first_int("Option 4, because...") == 4
    with pytest.raises(UpstreamParseError):
        parse_first_int("no idea")


def test_response_kind_mapping():
    from backend.toi.schemas.assist import ResponseKind

    assert ResponseKind.from_number(0) is ResponseKind.unfulfillable
    assert ResponseKind.from_number(7) is ResponseKind.unfulfillable
    assert ResponseKind.from_number(4) is ResponseKind.answer_with_draft_requests
    assert [k.value for k in ResponseKind if k.executes_requests] == [5, 6]


def test_classification_prompt_lists_all_options():
    from backend.toi.services.prompts import response_classification_prompt

    prompt = response_classification_prompt('{"paths": {}}')
    assert '{"paths": {}}' in prompt
    for number in range(1, 7):
        assert f"\n{number}. " in prompt
    assert prompt.endswith("Only respond with the number of the response that fits best and nothing else.")


def test_request_prompt_includes_plan_and_history():
    from backend.toi.schemas.assist import ExecutedRequest, HttpMethod, Plan, PlannedRequest
    from backend.toi.services.prompts import request_prompt

    step = PlannedRequest(method=HttpMethod.delete, path="/events/attendees", description="Remove Jane")
    plan = Plan(requests=[step])
    executed = [ExecutedRequest(request="GET /events/attendees/search", response='{"contacts": []}')]
    prompt = request_prompt("{}", plan, executed, step)
    assert "DELETE /events/attendees: Remove Jane" in prompt
    assert '"path": "/events/attendees"' in prompt
    assert "\nRequest:\nGET /events/attendees/search\n\nResponse:\n{\"contacts\": []}" in prompt


def test_step_message():
    from backend.toi.schemas.assist import HttpMethod, PlannedRequest
    from backend.toi.services.prompts import step_message

    step = PlannedRequest(method=HttpMethod.get, path="/datetime/now", description="Get the time")
    assert step_message(step, None) == "Get the time"
    message = step_message(step, '{"id": 1}')
    assert message.startswith("\nHere's the response from that request:\n\n{\"id\": 1}")
    assert message.endswith("Get the time")


def test_summary_prompt_without_requests():
    from backend.toi.services.prompts import summary_prompt

    assert summary_prompt([]).endswith("Here are the HTTP request-responses:\nNone")


def test_generated_request_text_is_pretty_json():
    from backend.toi.schemas.assist import GeneratedRequest

    request = GeneratedRequest(method="POST", path="/notes", body={"content": "x"})
    assert request.to_text() == (
        '{\n  "method": "POST",\n  "path": "/notes",\n  "params": null,\n  "body": {\n    "content": "x"\n  }\n}'
    )


def test_embedding_prompt_template():
    from backend.toi.services.embedding_prompt import NOTES, EmbeddingPromptTemplate

    assert NOTES.apply("milk").endswith("\nQuery: milk")
    assert NOTES.apply("milk").startswith("Instruction: Given a user query, find notes")
    assert EmbeddingPromptTemplate(None, None).apply("milk") == "milk"
    assert EmbeddingPromptTemplate("Find tags", None).apply("milk") == "Find tags\nmilk"
    assert EmbeddingPromptTemplate(None).apply("milk") == "Query: milk"
