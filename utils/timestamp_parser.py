from datetime import date, datetime
from typing import Optional

DEFAULT_TIME = "00:00:00"


def parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    """Parse a Google Forms timestamp 'DD/MM/YYYY HH:mm:ss' into a datetime.

    The date is always day/month/year. The time part is optional and defaults
    to midnight; 'HH:mm' is accepted as well. Anything malformed returns None
    so a single bad row never aborts a batch.
    """
    if not text or not isinstance(text, str):
        return None

    parts = text.strip().split(" ", 1)
    date_part = parts[0]
    time_part = parts[1].strip() if len(parts) > 1 and parts[1].strip() else DEFAULT_TIME

    date_fields = date_part.split("/")
    if len(date_fields) != 3 or not all(date_fields):
        return None

    time_fields = time_part.split(":")
    if len(time_fields) == 2:
        time_fields.append("00")
    if len(time_fields) != 3:
        return None

    try:
        day, month, year = (int(f) for f in date_fields)
        hour, minute, second = (int(f) for f in time_fields)
        return datetime(year, month, day, hour, minute, second)
    except (ValueError, TypeError):
        return None


def day_key(instant: datetime) -> date:
    return instant.date()


def parse_iso_date(value) -> date:
    """Accept a date or a 'YYYY-MM-DD' string, as sent by the date pickers."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
