from fastapi import APIRouter, Depends

from ..schemas.contacts import ContactOut, ContactSearchParams, NewContactRequest, UpdateContactRequest
from ..services.entities import CONTACTS, add_entity, delete_entities, get_entities, update_entity
from ..state import ToiState, get_state

router = APIRouter(prefix="/contacts", tags=["Contacts"])


@router.post("", status_code=201, response_model=ContactOut)
async def add_contact(request: NewContactRequest, state: ToiState = Depends(get_state)):
    return ContactOut.model_validate(await add_entity(state, CONTACTS, request.model_dump()))


@router.put("", response_model=ContactOut)
async def update_contact(request: UpdateContactRequest, state: ToiState = Depends(get_state)):
    """Update the contact with `id`, or else the one that best matches the search fields."""
    params = request.to_search_params(ContactSearchParams, "contact_updates")
    return ContactOut.model_validate(await update_entity(state, CONTACTS, params, request.contact_updates))


@router.post("/search", response_model=list[ContactOut])
async def search_contacts(params: ContactSearchParams, state: ToiState = Depends(get_state)):
    """Search contacts by name and details, or by birthday."""
    return [ContactOut.model_validate(row) for row in await get_entities(state, CONTACTS, params)]


@router.post("/delete", response_model=list[ContactOut])
async def delete_contacts(params: ContactSearchParams, state: ToiState = Depends(get_state)):
    return [ContactOut.model_validate(row) for row in await delete_entities(state, CONTACTS, params)]
