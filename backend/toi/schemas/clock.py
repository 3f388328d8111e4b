from pydantic import BaseModel, Field

from .common import UtcDatetime


class DatetimeShiftRequest(BaseModel):
    datetime: UtcDatetime | None = Field(default=None, description="Datetime to shift; defaults to now")
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0


class DatetimeOut(BaseModel):
    datetime: UtcDatetime


class WeekdayOut(BaseModel):
    datetime: UtcDatetime
    weekday: str
