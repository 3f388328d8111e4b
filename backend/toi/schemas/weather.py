from pydantic import BaseModel, Field


class WeatherQueryParams(BaseModel):
    query: str = Field(min_length=1, description="Place to get the forecast for, e.g. 'Austin, TX'")


class ForecastPeriod(BaseModel):
    name: str
    start_time: str
    end_time: str
    temperature: float | None = None
    temperature_unit: str | None = None
    wind_speed: str | None = None
    wind_direction: str | None = None
    short_forecast: str | None = None
    detailed_forecast: str | None = None


class Forecast(BaseModel):
    location: str
    latitude: float
    longitude: float
    periods: list[ForecastPeriod]
