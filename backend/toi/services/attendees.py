import logging

from sqlalchemy import delete, select

from ..models.contact import Contact
from ..models.event import Event, EventAttendee
from ..schemas.events import AttendeeQueryParams
from ..state import ToiState
from ..utils.error_handlers import NotFoundError
from .entities import CONTACTS, EVENTS, get_entities
from .search import fetch_rows, search_ids

logger = logging.getLogger(__name__)


async def find_event(state: ToiState, params: AttendeeQueryParams) -> Event:
    ids = await search_ids(state, EVENTS, params.event_search())
    with state.session_factory() as db:
        rows = fetch_rows(db, Event, ids[:1])
    if not rows:
        raise NotFoundError("event not found")
    return rows[0]


def _attendee_scope(event_id: int):
    return (Contact.id.in_(select(EventAttendee.contact_id).where(EventAttendee.event_id == event_id)),)


async def add_attendees(state: ToiState, params: AttendeeQueryParams) -> tuple[Event, list[Contact]]:
    event = await find_event(state, params)
    contact_ids = await search_ids(state, CONTACTS, params.contact_search())
    with state.session_factory() as db:
        with db.begin():
            existing = set(db.scalars(select(EventAttendee.contact_id).where(EventAttendee.event_id == event.id)))
            db.add_all(
                [EventAttendee(event_id=event.id, contact_id=c) for c in contact_ids if c not in existing]
            )
        contacts = fetch_rows(db, Contact, contact_ids)
    logger.info("event id=%s attendees added=%s", event.id, contact_ids)
    return event, contacts


async def get_attendees(state: ToiState, params: AttendeeQueryParams) -> tuple[Event, list[Contact]]:
    event = await find_event(state, params)
    contacts = await get_entities(state, CONTACTS, params.contact_search(), scope=_attendee_scope(event.id))
    return event, contacts


async def delete_attendees(state: ToiState, params: AttendeeQueryParams) -> tuple[Event, list[Contact]]:
    """Remove contacts from the event's attendee list; the contacts themselves are kept."""
    event = await find_event(state, params)
    contacts = await get_entities(state, CONTACTS, params.contact_search(), scope=_attendee_scope(event.id))
    if contacts:
        with state.session_factory() as db:
            db.execute(
                delete(EventAttendee).where(
                    EventAttendee.event_id == event.id,
                    EventAttendee.contact_id.in_([c.id for c in contacts]),
                )
            )
            db.commit()
    return event, contacts
