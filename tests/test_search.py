import asyncio

from sqlalchemy import literal, select
from sqlalchemy.dialects import postgresql, sqlite


def test_cosine_distance_renders_per_dialect():
    from pgvector.sqlalchemy import Vector

    from backend.toi.database import cosine_distance
    from backend.toi.models.note import Note

    stmt = select(Note.id).where(cosine_distance(Note.embedding, literal([1.0, 0.0], Vector())) <= 0.5)
    assert "<=>" in str(stmt.compile(dialect=postgresql.dialect()))
    assert "cosine_distance(" in str(stmt.compile(dialect=sqlite.dialect()))


def test_sqlite_cosine_distance():
    from backend.toi.database import _sqlite_cosine_distance

    assert _sqlite_cosine_distance("[1, 0]", "[0, 1]") == 1.0
    assert abs(_sqlite_cosine_distance("[1, 1]", "[2, 2]")) < 1e-9
    assert _sqlite_cosine_distance(None, "[1]") is None


def test_edit_similarity():
    from backend.toi.services.search import EDIT_DISTANCE_THRESHOLD, edit_similarity

    assert edit_similarity("asian", " Asian") == 1.0
    assert edit_similarity("asain", "asian") >= EDIT_DISTANCE_THRESHOLD
    assert edit_similarity("italian", "asian") < EDIT_DISTANCE_THRESHOLD


def test_distance_threshold_override(client):
    client.post("/notes", json={"content": "schedule house cleaning service"})

    assert len(client.post("/notes/search", json={"query": "cleaning"}).json()) == 1
    r = client.post("/notes/search", json={"query": "cleaning", "distance_threshold": 0.1})
    assert r.json() == []


def test_similarity_threshold_override(client):
    client.post("/notes", json={"content": "pick up dry cleaning"})
    body = {"query": "cleaning supplies", "use_reranking_filter": True}

    assert client.post("/notes/search", json=body).json()
    assert client.post("/notes/search", json={**body, "similarity_threshold": 0.9}).json() == []


def test_created_range(client):
    note = client.post("/notes", json={"content": "buy groceries"}).json()
    created = note["created_at"]

    assert [n["id"] for n in client.post("/notes/search", json={"created_from": created}).json()] == [note["id"]]
    assert client.post("/notes/search", json={"created_to": "2000-01-01T00:00:00Z"}).json() == []


def test_scope_applies_to_explicit_ids(state):
    from backend.toi.models.note import Note
    from backend.toi.schemas.notes import NoteSearchParams
    from backend.toi.services.entities import NOTES, add_entity
    from backend.toi.services.search import search_ids

    async def run():
        a = await add_entity(state, NOTES, {"content": "first"})
        b = await add_entity(state, NOTES, {"content": "second"})
        params = NoteSearchParams(ids=[a.id, b.id])
        return a, b, await search_ids(state, NOTES, params, scope=(Note.id != a.id,))

    a, b, ids = asyncio.run(run())
    assert ids == [b.id]


def test_fetch_rows_keeps_requested_order(state):
    from backend.toi.models.note import Note
    from backend.toi.services.entities import NOTES, add_entity
    from backend.toi.services.search import fetch_rows

    async def run():
        return [await add_entity(state, NOTES, {"content": c}) for c in ("one", "two", "three")]

    rows = asyncio.run(run())
    with state.session_factory() as db:
        fetched = fetch_rows(db, Note, [rows[2].id, rows[0].id, 999])
    assert [r.content for r in fetched] == ["three", "one"]


def test_sub_params_maps_prefixed_fields():
    from backend.toi.schemas.events import AttendeeQueryParams

    params = AttendeeQueryParams(
        event_id=3,
        event_query="party",
        event_day="2025-05-08",
        event_day_falls_on="Week",
        contact_ids=[1, 2],
        contact_query="marky",
        contact_limit=5,
    )
    event = params.event_search()
    assert (event.ids, event.query, event.limit) == ([3], "party", 1)
    assert event.event_day.isoformat() == "2025-05-08"
    assert event.event_day_falls_on.value == "Week"
    contact = params.contact_search()
    assert (contact.ids, contact.query, contact.limit) == ([1, 2], "marky", 5)


def test_update_by_id_ignores_search_fields():
    from backend.toi.schemas.notes import NoteSearchParams, UpdateNoteRequest

    request = UpdateNoteRequest(id=4, query="ignored", note_updates={"content": "x"})
    params = request.to_search_params(NoteSearchParams, "note_updates")
    assert (params.ids, params.query, params.limit) == ([4], None, 1)

    request = UpdateNoteRequest(query="milk", note_updates={"content": "x"})
    params = request.to_search_params(NoteSearchParams, "note_updates")
    assert (params.ids, params.query, params.limit) == (None, "milk", 1)
