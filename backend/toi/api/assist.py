import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..schemas.assist import GenerationRequest
from ..services.assistant import assist as run_assistant
from ..state import ToiState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assist", tags=["Assistant"])


@router.post("")
async def assist(request: GenerationRequest, state: ToiState = Depends(get_state)):
    """Run one assistant turn and stream the reply as server-sent events."""
    stream = await run_assistant(state, request.messages)
    return StreamingResponse(stream, media_type="text/event-stream")
