import logging

from ..models.tag import Tag
from ..schemas.tags import NewTagRequest, TagSearchParams, UpdateTagRequest
from ..state import ToiState
from ..utils.error_handlers import ConflictError, NotFoundError
from .entities import TAGS, add_entity, update_entity
from .search import search_ids

logger = logging.getLogger(__name__)


async def find_similar_tags(state: ToiState, name: str, *, exclude_id: int | None = None) -> list[int]:
    """Ids of existing tags that read as the same tag as ``name``."""
    params = TagSearchParams(query=name, use_reranking_filter=True, use_edit_distance_filter=True)
    scope = (Tag.id != exclude_id,) if exclude_id is not None else ()
    return await search_ids(state, TAGS, params, scope=scope)


async def add_tag(state: ToiState, request: NewTagRequest) -> Tag:
    if await find_similar_tags(state, request.name):
        logger.info("tag conflict name=%r", request.name)
        raise ConflictError("tag already exists")
    return await add_entity(state, TAGS, {"name": request.name})


async def update_tag(state: ToiState, request: UpdateTagRequest) -> Tag:
    targets = await search_ids(state, TAGS, request.to_search_params(TagSearchParams, "tag_updates"))
    if not targets:
        raise NotFoundError("tag not found")
    target = targets[0]
    new_name = request.tag_updates.name
    if new_name is not None and await find_similar_tags(state, new_name, exclude_id=target):
        raise ConflictError("tag already exists")
    return await update_entity(state, TAGS, TagSearchParams(ids=[target], limit=1), request.tag_updates)
