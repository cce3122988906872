from datetime import date, timedelta
from typing import Dict, Iterable


def split_days_by_year(
    start: date,
    end: date,
    holidays: Iterable[date] = (),
    half_day: bool = False,
) -> Dict[int, float]:
    """
    Working days of a leave, grouped by calendar year.

    Weekends and holidays are not counted. A half-day leave only counts as 0.5
    when it covers a single working day. Years with no working day are omitted.
    """
    if end < start:
        raise ValueError("end date must be on or after start date")

    holiday_set = set(holidays)
    per_year: Dict[int, float] = {}
    working_days = 0
    day = start
    while day <= end:
        if day.weekday() < 5 and day not in holiday_set:
            per_year[day.year] = per_year.get(day.year, 0.0) + 1.0
            working_days += 1
        day += timedelta(days=1)

    if half_day and working_days == 1:
        per_year = {year: 0.5 for year in per_year}
    return per_year
