from datetime import date, datetime
from typing import Optional, Union


def parse_trip_date(value: Union[str, date, None]) -> Optional[date]:
    """Accepts ``YYYY-MM-DD`` or ``DD/MM/YYYY``; anything unparseable becomes None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = str(value).strip()
    if not raw:
        return None

    if "/" in raw:
        parts = raw.split("/")
        if len(parts) != 3 or not all(parts):
            return None
        day, month, year = parts
        try:
            return date(int(year), int(month), int(day))
        except ValueError:
            return None

    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        return None
