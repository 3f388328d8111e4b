from fastapi import APIRouter, Depends

from ..schemas.tags import NewTagRequest, TagOut, TagSearchParams, UpdateTagRequest
from ..services.entities import TAGS, delete_entities, get_entities
from ..services.tags import add_tag, update_tag
from ..state import ToiState, get_state

router = APIRouter(prefix="/tags", tags=["Tags"])


@router.post("", status_code=201, response_model=TagOut)
async def add(request: NewTagRequest, state: ToiState = Depends(get_state)):
    """Add a tag. Fails with 409 if a tag with a near-identical name already exists."""
    return TagOut.model_validate(await add_tag(state, request))


@router.put("", response_model=TagOut)
async def update(request: UpdateTagRequest, state: ToiState = Depends(get_state)):
    return TagOut.model_validate(await update_tag(state, request))


@router.post("/search", response_model=list[TagOut])
async def search_tags(params: TagSearchParams, state: ToiState = Depends(get_state)):
    return [TagOut.model_validate(row) for row in await get_entities(state, TAGS, params)]


@router.post("/delete", response_model=list[TagOut])
async def delete_tags(params: TagSearchParams, state: ToiState = Depends(get_state)):
    """Delete tags; they are also removed from every recipe using them."""
    return [TagOut.model_validate(row) for row in await delete_entities(state, TAGS, params)]
