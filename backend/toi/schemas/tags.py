from pydantic import BaseModel, Field

from .common import EntityOut, SearchParams, UpdateRequest, UtcDatetime


class TagOut(EntityOut):
    id: int
    name: str
    created_at: UtcDatetime


class NewTagRequest(BaseModel):
    name: str = Field(min_length=1, description="Tag name, e.g. a cuisine like 'asian'")


class TagFilters(BaseModel):
    use_edit_distance_filter: bool = Field(
        default=False,
        description="Only keep tags spelled almost exactly like the query",
    )


class TagSearchParams(TagFilters, SearchParams):
    pass


class TagUpdates(BaseModel):
    name: str | None = Field(default=None, min_length=1)


class UpdateTagRequest(TagFilters, UpdateRequest):
    tag_updates: TagUpdates
