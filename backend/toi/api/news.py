from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from ..schemas.news import Headline, NewsSearchParams
from ..services import news as news_service
from ..state import ToiState, get_state

router = APIRouter(prefix="/news", tags=["News"])


@router.get("", response_model=list[Headline])
async def get_news(params: Annotated[NewsSearchParams, Query()], state: ToiState = Depends(get_state)):
    """Latest headlines, each with a short link that stays valid for a day."""
    return await news_service.get_headlines(state, params)


@router.get("/{alias}", status_code=302, response_class=RedirectResponse)
def follow_alias(alias: str, state: ToiState = Depends(get_state)):
    return RedirectResponse(news_service.resolve_alias(state.session_factory, alias), status_code=302)
