"""
Heuristic departure-date resolution

Only month names are understood and they always resolve to the 15th of the
month; day numbers in the user's text are ignored. Anything else defaults to
30 days from today.
"""
from datetime import date, datetime, timedelta
from typing import Optional

import pytz

DEFAULT_LEAD_DAYS = 30
DAY_OF_MONTH = 15

MONTH_NUMBERS = {
    "january": 1, "february": 2, "march": 3, "april": 4,
    "may": 5, "june": 6, "july": 7, "august": 8,
    "september": 9, "october": 10, "november": 11, "december": 12,
}


def today_in(timezone_name: str) -> date:
    """Current calendar date in the given Olson timezone"""
    return datetime.now(pytz.timezone(timezone_name)).date()


def normalize_departure_date(raw_date_text: Optional[str], today: Optional[date] = None) -> date:
    """Turn loosely captured date text into a concrete future departure date"""
    today = today or date.today()
    if not raw_date_text:
        return today + timedelta(days=DEFAULT_LEAD_DAYS)

    lowered = raw_date_text.lower()
    for month_name, month_number in MONTH_NUMBERS.items():
        if month_name in lowered:
            candidate = date(today.year, month_number, DAY_OF_MONTH)
            # Roll over when this year's occurrence is not in the future
            if candidate <= today:
                candidate = date(today.year + 1, month_number, DAY_OF_MONTH)
            return candidate

    return today + timedelta(days=DEFAULT_LEAD_DAYS)
