from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def to_date(value) -> date:
    """Calendar day of a datetime, date or ISO-8601 string.

    Raises ValueError / TypeError when the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text).date()
    raise TypeError(f"Unsupported date value: {value!r}")

