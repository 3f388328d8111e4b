from fastapi import APIRouter, Depends

from ..schemas.places import NewPlaceRequest, PlaceOut, PlaceSearchParams, UpdatePlaceRequest
from ..services.entities import PLACES, add_entity, delete_entities, get_entities, update_entity
from ..state import ToiState, get_state

router = APIRouter(prefix="/places", tags=["Places"])


@router.post("", status_code=201, response_model=PlaceOut)
async def add_place(request: NewPlaceRequest, state: ToiState = Depends(get_state)):
    return PlaceOut.model_validate(await add_entity(state, PLACES, request.model_dump()))


@router.put("", response_model=PlaceOut)
async def update_place(request: UpdatePlaceRequest, state: ToiState = Depends(get_state)):
    params = request.to_search_params(PlaceSearchParams, "place_updates")
    return PlaceOut.model_validate(await update_entity(state, PLACES, params, request.place_updates))


@router.post("/search", response_model=list[PlaceOut])
async def search_places(params: PlaceSearchParams, state: ToiState = Depends(get_state)):
    """Search saved places such as restaurants, shops and addresses."""
    return [PlaceOut.model_validate(row) for row in await get_entities(state, PLACES, params)]


@router.post("/delete", response_model=list[PlaceOut])
async def delete_places(params: PlaceSearchParams, state: ToiState = Depends(get_state)):
    return [PlaceOut.model_validate(row) for row in await delete_entities(state, PLACES, params)]
