from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ..schemas.weather import Forecast, WeatherQueryParams
from ..services.weather import get_forecast
from ..state import ToiState, get_state

router = APIRouter(prefix="/weather", tags=["Weather"])


@router.get("", response_model=Forecast)
async def weather(params: Annotated[WeatherQueryParams, Query()], state: ToiState = Depends(get_state)):
    """Forecast for a US location."""
    return await get_forecast(state.web_client, params.query)
