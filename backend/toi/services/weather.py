import logging
from typing import Any

import httpx

from ..schemas.weather import Forecast, ForecastPeriod
from ..utils.error_handlers import NotFoundError, UpstreamConnectionError, UpstreamParseError

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://nominatim.openstreetmap.org/search"
WEATHER_API_URL = "https://api.weather.gov"


async def _get_json(client: httpx.AsyncClient, url: str, params: dict[str, Any] | None = None) -> Any:
    try:
        r = await client.get(url, params=params)
    except httpx.RequestError as e:
        raise UpstreamConnectionError(f"request to {url} failed: {type(e).__name__}") from e
    if r.status_code == 404:
        raise NotFoundError("no forecast available for that location")
    if r.status_code >= 400:
        raise UpstreamConnectionError(f"{url} responded with HTTP {r.status_code}")
    try:
        return r.json()
    except ValueError as e:
        raise UpstreamParseError(f"{url} returned invalid JSON") from e


async def get_forecast(client: httpx.AsyncClient, query: str) -> Forecast:
    """Geocode ``query`` with Nominatim, then ask weather.gov for its forecast."""
    places = await _get_json(client, GEOCODE_URL, {"q": query, "format": "jsonv2", "limit": 1})
    if not places:
        raise NotFoundError("location not found")
    try:
        place = places[0]
        latitude = float(place["lat"])
        longitude = float(place["lon"])
        location = place.get("display_name") or query
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise UpstreamParseError("unexpected geocoding response") from e

    points = await _get_json(client, f"{WEATHER_API_URL}/points/{latitude:.4f},{longitude:.4f}")
    try:
        forecast_url = points["properties"]["forecast"]
    except (KeyError, TypeError) as e:
        raise UpstreamParseError("weather points response is missing the forecast URL") from e

    forecast = await _get_json(client, forecast_url)
    try:
        periods = [
            ForecastPeriod(
                name=p.get("name") or "",
                start_time=p["startTime"],
                end_time=p["endTime"],
                temperature=p.get("temperature"),
                temperature_unit=p.get("temperatureUnit"),
                wind_speed=p.get("windSpeed"),
                wind_direction=p.get("windDirection"),
                short_forecast=p.get("shortForecast"),
                detailed_forecast=p.get("detailedForecast"),
            )
            for p in forecast["properties"]["periods"]
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise UpstreamParseError("unexpected forecast response") from e
    logger.info("weather forecast location=%r periods=%s", location, len(periods))
    return Forecast(location=location, latitude=latitude, longitude=longitude, periods=periods)
