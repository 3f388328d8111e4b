from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Query

from ..schemas.clock import DatetimeOut, DatetimeShiftRequest, WeekdayOut
from ..utils.dates import as_utc
from ..utils.error_handlers import ValidationError

router = APIRouter(prefix="/datetime", tags=["Datetime"])


@router.get("/now", response_model=DatetimeOut)
def now():
    """Current date and time in UTC."""
    return DatetimeOut(datetime=datetime.now(timezone.utc))


@router.post("/shift", response_model=DatetimeOut)
def shift(request: DatetimeShiftRequest):
    """Add (or, with negative values, subtract) a duration to a datetime."""
    start = request.datetime or datetime.now(timezone.utc)
    try:
        delta = timedelta(
            weeks=request.weeks,
            days=request.days,
            hours=request.hours,
            minutes=request.minutes,
            seconds=request.seconds,
        )
        return DatetimeOut(datetime=start + delta)
    except OverflowError:
        raise ValidationError("duration overflow") from None


@router.get("/weekday", response_model=WeekdayOut)
def weekday(value: datetime | None = Query(default=None, alias="datetime")):
    """Day of the week for a datetime (defaults to now)."""
    moment = as_utc(value) or datetime.now(timezone.utc)
    return WeekdayOut(datetime=moment, weekday=moment.strftime("%A"))
