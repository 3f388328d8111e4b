from pydantic import BaseModel, Field

from .common import EntityOut, SearchParams, UpdateRequest, UtcDatetime


class TodoOut(EntityOut):
    id: int
    item: str
    due_at: UtcDatetime | None = None
    completed_at: UtcDatetime | None = None
    created_at: UtcDatetime


class NewTodoRequest(BaseModel):
    item: str = Field(min_length=1, description="What needs to be done")
    due_at: UtcDatetime | None = Field(default=None, description="When the todo is due")
    completed_at: UtcDatetime | None = Field(default=None, description="When the todo was completed")


class TodoFilters(BaseModel):
    due_from: UtcDatetime | None = Field(default=None, description="Only todos due at or after this time")
    due_to: UtcDatetime | None = Field(default=None, description="Only todos due at or before this time")
    completed_from: UtcDatetime | None = Field(default=None, description="Only todos completed at or after this time")
    completed_to: UtcDatetime | None = Field(default=None, description="Only todos completed at or before this time")
    incomplete: bool | None = Field(
        default=None,
        description="true for todos that aren't completed yet, false for completed todos",
    )
    never_due: bool | None = Field(
        default=None,
        description="true for todos without a due date, false for todos with one",
    )


class TodoSearchParams(TodoFilters, SearchParams):
    pass


class TodoUpdates(BaseModel):
    item: str | None = Field(default=None, min_length=1)
    due_at: UtcDatetime | None = None
    completed_at: UtcDatetime | None = None


class UpdateTodoRequest(TodoFilters, UpdateRequest):
    todo_updates: TodoUpdates
