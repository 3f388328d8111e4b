import json
import re
from typing import TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..utils.error_handlers import UpstreamParseError

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_FIRST_INT_RE = re.compile(r"\d+")

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_first_json_object(text: str) -> dict:
    """
    Best-effort extraction of the first JSON object from a model response.
    Handles cases where the model wraps JSON in prose or a code fence.
    """
    raw = (text or "").strip()
    if not raw:
        raise ValueError("Empty model response")

    # Fast path: pure JSON
    try:
        obj = json.loads(raw)
        if isinstance(obj, dict):
            return obj
    except json.JSONDecodeError:
        pass

    # Heuristic: take first {...} block
    m = _JSON_OBJECT_RE.search(raw)
    if not m:
        raise ValueError("No JSON object found in model response")
    obj = json.loads(m.group(0))
    if not isinstance(obj, dict):
        raise ValueError("Model response JSON is not an object")
    return obj


def parse_generated(text: str, model: type[ModelT]) -> ModelT:
    try:
        return model.model_validate(extract_first_json_object(text))
    except (ValueError, PydanticValidationError) as e:
        raise UpstreamParseError(f"could not parse generated {model.__name__}: {e}") from e


def parse_first_int(text: str) -> int:
    m = _FIRST_INT_RE.search(text or "")
    if not m:
        raise UpstreamParseError(f"expected a number, got: {(text or '')[:200]!r}")
    return int(m.group(0))
