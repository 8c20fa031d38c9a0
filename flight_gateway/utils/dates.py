from datetime import date, datetime, timedelta
import pytz


def get_current_datetime(tz: str = "UTC") -> datetime:
    """Current datetime in the given IANA timezone."""
    return datetime.now(pytz.timezone(tz))


def days_from_today(days: int, tz: str = "UTC") -> date:
    """Calendar date ``days`` after today, where "today" is taken in ``tz``."""
    return (get_current_datetime(tz) + timedelta(days=days)).date()
