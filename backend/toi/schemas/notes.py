from pydantic import BaseModel, Field

from .common import EntityOut, SearchParams, UpdateRequest, UtcDatetime


class NoteOut(EntityOut):
    id: int
    content: str
    created_at: UtcDatetime


class NewNoteRequest(BaseModel):
    content: str = Field(min_length=1, description="Note content")


class NoteSearchParams(SearchParams):
    pass


class NoteUpdates(BaseModel):
    content: str | None = Field(default=None, min_length=1)


class UpdateNoteRequest(UpdateRequest):
    note_updates: NoteUpdates
