from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ..schemas.contacts import ContactOut
from ..schemas.events import AttendeeQueryParams, Attendees, EventOut
from ..services import attendees as attendee_service
from ..state import ToiState, get_state

router = APIRouter(prefix="/events/attendees", tags=["Events"])


def _attendees(event, contacts) -> Attendees:  # noqa: ANN001
    return Attendees(
        event=EventOut.model_validate(event),
        contacts=[ContactOut.model_validate(c) for c in contacts],
    )


@router.post("", status_code=201, response_model=Attendees)
async def add_attendees(params: AttendeeQueryParams, state: ToiState = Depends(get_state)):
    """Add the matching contacts as attendees of the event that best matches the event fields."""
    return _attendees(*await attendee_service.add_attendees(state, params))


@router.get("/search", response_model=Attendees)
async def search_attendees(
    params: Annotated[AttendeeQueryParams, Query()], state: ToiState = Depends(get_state)
):
    """Find an event and the contacts attending it."""
    return _attendees(*await attendee_service.get_attendees(state, params))


@router.delete("", response_model=Attendees)
async def delete_attendees(
    params: Annotated[AttendeeQueryParams, Query()], state: ToiState = Depends(get_state)
):
    """Remove contacts from an event's attendees. The contacts themselves are kept."""
    return _attendees(*await attendee_service.delete_attendees(state, params))
