"""
Searchable entity catalog and the add/get/update/delete contract they share.
"""
import logging
from typing import Any

from pydantic import BaseModel
from sqlalchemy import delete, or_, update
from sqlalchemy.sql.elements import ColumnElement

from ..models.banking import BankAccount, BankTransaction
from ..models.contact import Contact
from ..models.event import Event
from ..models.note import Note
from ..models.place import Place
from ..models.recipe import Recipe
from ..models.tag import Tag
from ..models.todo import Todo
from ..schemas.common import SearchParams
from ..state import ToiState
from ..utils.dates import date_span, datetime_span
from ..utils.error_handlers import NotFoundError
from . import embedding_prompt as prompts
from .search import SearchableEntity, fetch_rows, search_ids

logger = logging.getLogger(__name__)


def _labelled_lines(pairs: list[tuple[str, Any]]) -> str:
    return "\n".join(f"{label}: {value}" for label, value in pairs if value is not None)


def contact_text(contact: Contact) -> str:
    return _labelled_lines(
        [
            ("First Name", contact.first_name),
            ("Last Name", contact.last_name),
            ("Email", contact.email),
            ("Phone", contact.phone),
            ("Birthday", contact.birthday.isoformat() if contact.birthday else None),
            ("Relationship", contact.relationship),
        ]
    )


def place_text(place: Place) -> str:
    return _labelled_lines(
        [
            ("Name", place.name),
            ("Description", place.description),
            ("Address", place.address),
            ("Phone", place.phone),
        ]
    )


def _todo_filters(params: Any) -> list[ColumnElement]:
    filters = []
    if params.due_from is not None:
        filters.append(Todo.due_at >= params.due_from)
    if params.due_to is not None:
        filters.append(Todo.due_at <= params.due_to)
    if params.completed_from is not None:
        filters.append(Todo.completed_at >= params.completed_from)
    if params.completed_to is not None:
        filters.append(Todo.completed_at <= params.completed_to)
    if params.incomplete is not None:
        filters.append(Todo.completed_at.is_(None) if params.incomplete else Todo.completed_at.is_not(None))
    if params.never_due is not None:
        filters.append(Todo.due_at.is_(None) if params.never_due else Todo.due_at.is_not(None))
    return filters


def _contact_filters(params: Any) -> list[ColumnElement]:
    if params.birthday is None:
        return []
    first, last = date_span(params.birthday, params.birthday_falls_on)
    return [Contact.birthday >= first, Contact.birthday <= last]


def _event_filters(params: Any) -> list[ColumnElement]:
    if params.event_day is None:
        return []
    start, end = datetime_span(params.event_day, params.event_day_falls_on)
    return [
        or_(
            Event.starts_at.between(start, end),
            Event.ends_at.between(start, end),
        )
    ]


def _transaction_filters(params: Any) -> list[ColumnElement]:
    filters = []
    if params.posted_from is not None:
        filters.append(BankTransaction.posted_at >= params.posted_from)
    if params.posted_to is not None:
        filters.append(BankTransaction.posted_at <= params.posted_to)
    return filters


NOTES = SearchableEntity("note", Note, prompts.NOTES, lambda row: row.content)
TODOS = SearchableEntity("todo", Todo, prompts.TODOS, lambda row: row.item, _todo_filters)
CONTACTS = SearchableEntity("contact", Contact, prompts.CONTACTS, contact_text, _contact_filters)
EVENTS = SearchableEntity("event", Event, prompts.EVENTS, lambda row: row.description, _event_filters)
PLACES = SearchableEntity("place", Place, prompts.PLACES, place_text)
RECIPES = SearchableEntity("recipe", Recipe, prompts.RECIPES, lambda row: row.description)
TAGS = SearchableEntity("tag", Tag, prompts.TAGS, lambda row: row.name)
BANK_ACCOUNTS = SearchableEntity("bank account", BankAccount, prompts.BANK_ACCOUNTS, lambda row: row.description)
TRANSACTIONS = SearchableEntity(
    "transaction", BankTransaction, prompts.TRANSACTIONS, lambda row: row.description, _transaction_filters
)


async def add_entity(state: ToiState, entity: SearchableEntity, values: dict[str, Any]) -> Any:
    row = entity.model(**values)
    row.embedding = await state.model_client.embed(entity.project(row))
    with state.session_factory() as db:
        db.add(row)
        db.commit()
        db.refresh(row)
    logger.info("added %s id=%s", entity.name, row.id)
    return row


async def get_entities(
    state: ToiState,
    entity: SearchableEntity,
    params: SearchParams,
    *,
    scope: tuple[ColumnElement, ...] = (),
) -> list[Any]:
    ids = await search_ids(state, entity, params, scope=scope)
    with state.session_factory() as db:
        return fetch_rows(db, entity.model, ids)


async def delete_entities(
    state: ToiState,
    entity: SearchableEntity,
    params: SearchParams,
    *,
    scope: tuple[ColumnElement, ...] = (),
) -> list[Any]:
    ids = await search_ids(state, entity, params, scope=scope)
    if not ids:
        return []
    model = entity.model
    with state.session_factory() as db:
        rows = fetch_rows(db, model, ids)
        db.execute(delete(model).where(model.id.in_([row.id for row in rows])), execution_options={"synchronize_session": False})
        db.commit()
    logger.info("deleted %s ids=%s", entity.name, [row.id for row in rows])
    return rows


async def update_entity(
    state: ToiState,
    entity: SearchableEntity,
    params: SearchParams,
    updates: BaseModel,
) -> Any:
    """Merge non-null ``updates`` into the single best match and re-embed it."""
    ids = await search_ids(state, entity, params)
    if not ids:
        raise NotFoundError(f"{entity.name} not found")
    model = entity.model
    changes = updates.model_dump(exclude_none=True)

    with state.session_factory() as db:
        rows = fetch_rows(db, model, ids[:1])
    if not rows:
        raise NotFoundError(f"{entity.name} not found")
    row = rows[0]
    # Detached copy; only used to compute the new text projection.
    for key, value in changes.items():
        setattr(row, key, value)
    embedding = await state.model_client.embed(entity.project(row))

    with state.session_factory() as db:
        db.execute(
            update(model).where(model.id == row.id).values(**changes, embedding=embedding),
            execution_options={"synchronize_session": False},
        )
        db.commit()
        updated = db.get(model, row.id)
    if updated is None:
        raise NotFoundError(f"{entity.name} not found")
    logger.info("updated %s id=%s fields=%s", entity.name, updated.id, sorted(changes))
    return updated
