from fastapi import APIRouter, Depends

from ..schemas.todos import NewTodoRequest, TodoOut, TodoSearchParams, UpdateTodoRequest
from ..services.entities import TODOS, add_entity, delete_entities, get_entities, update_entity
from ..state import ToiState, get_state

router = APIRouter(prefix="/todos", tags=["Todos"])


@router.post("", status_code=201, response_model=TodoOut)
async def add_todo(request: NewTodoRequest, state: ToiState = Depends(get_state)):
    """Add a todo. Leave `due_at` empty for todos without a deadline."""
    return TodoOut.model_validate(await add_entity(state, TODOS, request.model_dump()))


@router.put("", response_model=TodoOut)
async def update_todo(request: UpdateTodoRequest, state: ToiState = Depends(get_state)):
    """Update a todo, e.g. set `completed_at` to mark it done."""
    params = request.to_search_params(TodoSearchParams, "todo_updates")
    return TodoOut.model_validate(await update_entity(state, TODOS, params, request.todo_updates))


@router.post("/search", response_model=list[TodoOut])
async def search_todos(params: TodoSearchParams, state: ToiState = Depends(get_state)):
    """Search todos. `incomplete` and `never_due` narrow by status."""
    return [TodoOut.model_validate(row) for row in await get_entities(state, TODOS, params)]


@router.post("/delete", response_model=list[TodoOut])
async def delete_todos(params: TodoSearchParams, state: ToiState = Depends(get_state)):
    return [TodoOut.model_validate(row) for row in await delete_entities(state, TODOS, params)]
