from fastapi import APIRouter, Depends

from ..schemas.events import EventOut, EventSearchParams, NewEventRequest, UpdateEventRequest
from ..services.entities import EVENTS, add_entity, delete_entities, get_entities, update_entity
from ..state import ToiState, get_state

router = APIRouter(prefix="/events", tags=["Events"])


@router.post("", status_code=201, response_model=EventOut)
async def add_event(request: NewEventRequest, state: ToiState = Depends(get_state)):
    """Add a calendar event."""
    return EventOut.model_validate(await add_entity(state, EVENTS, request.model_dump()))


@router.put("", response_model=EventOut)
async def update_event(request: UpdateEventRequest, state: ToiState = Depends(get_state)):
    params = request.to_search_params(EventSearchParams, "event_updates")
    return EventOut.model_validate(await update_entity(state, EVENTS, params, request.event_updates))


@router.post("/search", response_model=list[EventOut])
async def search_events(params: EventSearchParams, state: ToiState = Depends(get_state)):
    """Search events.

    `event_day` with `event_day_falls_on` matches events that start or end
    within that day, week (Sunday to Saturday) or month.
    """
    return [EventOut.model_validate(row) for row in await get_entities(state, EVENTS, params)]


@router.post("/delete", response_model=list[EventOut])
async def delete_events(params: EventSearchParams, state: ToiState = Depends(get_state)):
    """Delete events. Their attendee lists go with them; the contacts are kept."""
    return [EventOut.model_validate(row) for row in await delete_entities(state, EVENTS, params)]
