from datetime import datetime
from enum import Enum
from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from ..utils.dates import as_utc

UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]

ParamsT = TypeVar("ParamsT", bound=BaseModel)


class OrderBy(str, Enum):
    oldest = "Oldest"
    newest = "Newest"


class EntityOut(BaseModel):
    """Base for response models read straight off ORM rows."""

    model_config = ConfigDict(from_attributes=True)


class SimilarityFilter(BaseModel):
    query: str | None = Field(
        default=None,
        description="Natural-language query; items are ranked by semantic similarity to it",
    )
    use_reranking_filter: bool = Field(
        default=False,
        description="Whether to apply a stricter relevance filter to the results of the query. "
        "Only use this when the user is asking about a specific item.",
    )
    distance_threshold: float | None = Field(
        default=None,
        ge=0.0,
        le=2.0,
        description="Override the maximum cosine distance for the similarity search",
    )
    similarity_threshold: float | None = Field(
        default=None,
        description="Override the minimum relevance score for the reranking filter",
    )


class CreatedFilter(BaseModel):
    created_from: UtcDatetime | None = Field(default=None, description="Only items created at or after this time")
    created_to: UtcDatetime | None = Field(default=None, description="Only items created at or before this time")
    order_by: OrderBy | None = Field(
        default=None,
        description="Order by creation time instead of relevance; the query is ignored when set",
    )


class SearchParams(SimilarityFilter, CreatedFilter):
    ids: list[int] | None = Field(
        default=None,
        description="Always include items with these IDs, regardless of the other filters",
    )
    limit: int | None = Field(default=None, ge=1, description="Maximum number of items to return")


class UpdateRequest(SimilarityFilter, CreatedFilter):
    """Locates exactly one row to update: by id when given, otherwise the best search match."""

    id: int | None = Field(default=None, description="ID of the item to update")

    def to_search_params(self, cls: type[ParamsT], updates_field: str) -> ParamsT:
        if self.id is not None:
            return cls(ids=[self.id], limit=1)
        values = self.model_dump(exclude={"id", updates_field})
        return cls.model_validate({**values, "limit": 1})


def sub_params(params: BaseModel, prefix: str, cls: type[ParamsT], **overrides: Any) -> ParamsT:
    """Pull one axis of a composite request out into its own search params.

    ``event_query`` becomes ``query`` on the event axis, while fields that
    already carry the prefix (``event_day``) are taken as-is.
    """
    values: dict[str, Any] = {}
    available = type(params).model_fields
    for name in cls.model_fields:
        for key in (f"{prefix}{name}", name if name.startswith(prefix) else None):
            if key and key in available:
                values[name] = getattr(params, key)
                break
    values.update(overrides)
    return cls.model_validate(values)
