from fastapi import APIRouter, Depends

from ..schemas.notes import NewNoteRequest, NoteOut, NoteSearchParams, UpdateNoteRequest
from ..services.entities import NOTES, add_entity, delete_entities, get_entities, update_entity
from ..state import ToiState, get_state

router = APIRouter(prefix="/notes", tags=["Notes"])


@router.post("", status_code=201, response_model=NoteOut)
async def add_note(request: NewNoteRequest, state: ToiState = Depends(get_state)):
    """Add and return a note."""
    return NoteOut.model_validate(await add_entity(state, NOTES, request.model_dump()))


@router.put("", response_model=NoteOut)
async def update_note(request: UpdateNoteRequest, state: ToiState = Depends(get_state)):
    """Update the single note that best matches the search fields."""
    params = request.to_search_params(NoteSearchParams, "note_updates")
    return NoteOut.model_validate(await update_entity(state, NOTES, params, request.note_updates))


@router.post("/search", response_model=list[NoteOut])
async def search_notes(params: NoteSearchParams, state: ToiState = Depends(get_state)):
    """Search for notes."""
    return [NoteOut.model_validate(row) for row in await get_entities(state, NOTES, params)]


@router.post("/delete", response_model=list[NoteOut])
async def delete_notes(params: NoteSearchParams, state: ToiState = Depends(get_state)):
    """Delete notes matching the search and return them."""
    return [NoteOut.model_validate(row) for row in await delete_entities(state, NOTES, params)]
