from pydantic import BaseModel, Field

from .common import EntityOut, SearchParams, UpdateRequest, UtcDatetime


class PlaceOut(EntityOut):
    id: int
    name: str
    description: str
    address: str | None = None
    phone: str | None = None
    created_at: UtcDatetime


class NewPlaceRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1, description="What the place is and why it matters to the user")
    address: str | None = None
    phone: str | None = None


class PlaceSearchParams(SearchParams):
    pass


class PlaceUpdates(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    address: str | None = None
    phone: str | None = None


class UpdatePlaceRequest(UpdateRequest):
    place_updates: PlaceUpdates
