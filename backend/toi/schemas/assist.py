import json
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"


class Message(BaseModel):
    role: MessageRole
    content: str


class GenerationRequest(BaseModel):
    messages: list[Message] = Field(min_length=1)


class HttpMethod(str, Enum):
    delete = "DELETE"
    get = "GET"
    post = "POST"
    put = "PUT"


class ResponseKind(IntEnum):
    unfulfillable = 1
    follow_up = 2
    answer = 3
    answer_with_draft_requests = 4
    partially_answer_with_requests = 5
    answer_with_requests = 6

    @property
    def executes_requests(self) -> bool:
        return self in (ResponseKind.partially_answer_with_requests, ResponseKind.answer_with_requests)

    @classmethod
    def from_number(cls, value: int) -> "ResponseKind":
        try:
            return cls(value)
        except ValueError:
            return cls.unfulfillable


class PlannedRequest(BaseModel):
    method: HttpMethod
    path: str = Field(pattern=r"^/")
    description: str


class Plan(BaseModel):
    requests: list[PlannedRequest]


class GeneratedRequest(BaseModel):
    method: HttpMethod
    path: str = Field(pattern=r"^/")
    params: dict[str, Any] | None = None
    body: dict[str, Any] | None = None

    def to_text(self) -> str:
        return json.dumps(self.model_dump(mode="json"), indent=2)


class ExecutedRequest(BaseModel):
    request: str
    response: str

    def to_text(self) -> str:
        return f"\nRequest:\n{self.request}\n\nResponse:\n{self.response}"
