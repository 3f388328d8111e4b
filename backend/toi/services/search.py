"""
Three-stage semantic search shared by every searchable entity.

1. SQL predicates (dates, scopes, parent constraints).
2. Vector stage: embed the query, drop rows farther than the distance
   threshold, order by cosine distance. Skipped when ordering by creation
   time. Explicit ids are OR'd in so hand-picked rows always survive.
3. Rerank stage: ask the reranker to score the survivors and keep the ones
   above the similarity threshold; tags can add an edit-distance gate.

Connections are only held while SQL runs; model calls happen between
sessions.
"""
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pgvector.sqlalchemy import Vector
from rapidfuzz.distance import DamerauLevenshtein
from sqlalchemy import and_, literal, or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from ..database import cosine_distance
from ..schemas.common import OrderBy, SearchParams
from ..state import ToiState
from .embedding_prompt import EmbeddingPromptTemplate

logger = logging.getLogger(__name__)

EDIT_DISTANCE_THRESHOLD = 0.80


def _no_filters(params: Any) -> list[ColumnElement]:
    return []


@dataclass(frozen=True)
class SearchableEntity:
    name: str
    model: type
    prompt: EmbeddingPromptTemplate
    # Canonical text projection; this is what gets embedded and reranked.
    project: Callable[[Any], str]
    filters: Callable[[Any], list[ColumnElement]] = field(default=_no_filters)


def edit_similarity(a: str, b: str) -> float:
    return DamerauLevenshtein.normalized_similarity(a.strip().lower(), b.strip().lower())


def fetch_rows(db: Session, model: type, ids: Sequence[int]) -> list[Any]:
    """Load rows for ``ids`` keeping the order of ``ids``."""
    if not ids:
        return []
    rows = db.scalars(select(model).where(model.id.in_(list(ids)))).all()
    by_id = {row.id: row for row in rows}
    return [by_id[i] for i in ids if i in by_id]


def _created_filters(model: type, params: SearchParams) -> list[ColumnElement]:
    filters = []
    if params.created_from is not None:
        filters.append(model.created_at >= params.created_from)
    if params.created_to is not None:
        filters.append(model.created_at <= params.created_to)
    return filters


async def search_ids(
    state: ToiState,
    entity: SearchableEntity,
    params: SearchParams,
    *,
    scope: Iterable[ColumnElement] = (),
) -> list[int]:
    """Run the search pipeline and return matching ids, best first.

    ``scope`` holds conditions every result must satisfy, including rows
    selected through ``params.ids`` (used to keep children inside a parent).
    """
    model = entity.model
    filters = entity.filters(params) + _created_filters(model, params)

    order_by = [model.id.asc()]
    if params.order_by == OrderBy.oldest:
        order_by = [model.created_at.asc(), model.id.asc()]
    elif params.order_by == OrderBy.newest:
        order_by = [model.created_at.desc(), model.id.asc()]
    elif params.query:
        query_embedding = await state.model_client.embed(entity.prompt.apply(params.query))
        distance = cosine_distance(model.embedding, literal(query_embedding, Vector()))
        threshold = params.distance_threshold
        if threshold is None:
            threshold = state.server.distance_threshold
        filters.append(distance <= threshold)
        order_by = [distance.asc(), model.id.asc()]

    conditions = list(scope)
    if params.ids:
        selected = model.id.in_(params.ids)
        conditions.append(or_(and_(*filters), selected) if filters else selected)
    else:
        conditions.extend(filters)

    stmt = select(model.id)
    if conditions:
        stmt = stmt.where(*conditions)
    stmt = stmt.order_by(*order_by)
    if params.limit is not None:
        stmt = stmt.limit(params.limit)

    with state.session_factory() as db:
        ids = list(db.scalars(stmt))
    if not ids:
        return []

    use_edit_distance = bool(getattr(params, "use_edit_distance_filter", False))
    # Creation-time ordering ignores the query entirely.
    if params.order_by is not None or not params.query:
        return ids
    if not (params.use_reranking_filter or use_edit_distance):
        return ids

    with state.session_factory() as db:
        documents = {row.id: entity.project(row) for row in fetch_rows(db, model, ids)}
    ids = [i for i in ids if i in documents]

    if params.use_reranking_filter and ids:
        results = await state.model_client.rerank(params.query, [documents[i] for i in ids])
        threshold = params.similarity_threshold
        if threshold is None:
            threshold = state.server.similarity_threshold
        kept = [r for r in results if r.relevance_score >= threshold]
        kept.sort(key=lambda r: (-r.relevance_score, ids[r.index]))
        ids = list(dict.fromkeys(ids[r.index] for r in kept))

    if use_edit_distance:
        ids = [i for i in ids if edit_similarity(params.query, documents[i]) >= EDIT_DISTANCE_THRESHOLD]

    logger.debug("search entity=%s query=%r ids=%s", entity.name, params.query, ids)
    return ids
