from datetime import date

from pydantic import BaseModel, Field

from ..utils.dates import DateFallsOn
from .common import EntityOut, SearchParams, UpdateRequest, UtcDatetime


class ContactOut(EntityOut):
    id: int
    first_name: str
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    birthday: date | None = None
    relationship: str | None = None
    created_at: UtcDatetime


class NewContactRequest(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    birthday: date | None = None
    relationship: str | None = Field(default=None, description="How the user knows this contact")


class ContactFilters(BaseModel):
    birthday: date | None = Field(default=None, description="Find contacts with a birthday around this date")
    birthday_falls_on: DateFallsOn | None = Field(
        default=None,
        description="Match birthdays on the same Day, Week (Sunday to Saturday), or Month as `birthday`",
    )


class ContactSearchParams(ContactFilters, SearchParams):
    pass


class ContactUpdates(BaseModel):
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    birthday: date | None = None
    relationship: str | None = None


class UpdateContactRequest(ContactFilters, UpdateRequest):
    contact_updates: ContactUpdates
