from datetime import date

from pydantic import BaseModel, Field, model_validator

from ..utils.dates import DateFallsOn
from .common import EntityOut, OrderBy, SearchParams, UpdateRequest, UtcDatetime, sub_params
from .contacts import ContactOut, ContactSearchParams


class EventOut(EntityOut):
    id: int
    description: str
    starts_at: UtcDatetime
    ends_at: UtcDatetime
    created_at: UtcDatetime


class NewEventRequest(BaseModel):
    description: str = Field(min_length=1)
    starts_at: UtcDatetime
    ends_at: UtcDatetime

    @model_validator(mode="after")
    def _ends_after_start(self):
        if self.ends_at < self.starts_at:
            raise ValueError("ends_at must not be before starts_at")
        return self


class EventFilters(BaseModel):
    event_day: date | None = Field(default=None, description="Find events happening around this date")
    event_day_falls_on: DateFallsOn | None = Field(
        default=None,
        description="Match events starting or ending on the same Day, Week (Sunday to Saturday), or Month as `event_day`",
    )


class EventSearchParams(EventFilters, SearchParams):
    pass


class EventUpdates(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    starts_at: UtcDatetime | None = None
    ends_at: UtcDatetime | None = None


class UpdateEventRequest(EventFilters, UpdateRequest):
    event_updates: EventUpdates


class AttendeeQueryParams(BaseModel):
    """Finds one event, then contacts attending (or to attend) it."""

    event_id: int | None = Field(default=None, description="ID of the event")
    event_query: str | None = Field(default=None, description="Query used to find the event")
    event_use_reranking_filter: bool = False
    event_created_from: UtcDatetime | None = None
    event_created_to: UtcDatetime | None = None
    event_day: date | None = None
    event_day_falls_on: DateFallsOn | None = None
    event_order_by: OrderBy | None = None
    contact_ids: list[int] | None = Field(default=None, description="IDs of contacts")
    contact_query: str | None = Field(default=None, description="Query used to find the contacts")
    contact_use_reranking_filter: bool = False
    contact_limit: int | None = Field(default=None, ge=1)

    def event_search(self) -> EventSearchParams:
        return sub_params(self, "event_", EventSearchParams, ids=[self.event_id] if self.event_id else None, limit=1)

    def contact_search(self) -> ContactSearchParams:
        return sub_params(self, "contact_", ContactSearchParams)


class Attendees(BaseModel):
    event: EventOut
    contacts: list[ContactOut]
