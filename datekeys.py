from datetime import datetime, date
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from config import CALENDAR_TZ

# Invalid input gives this instead of a key
INVALID_DATE_KEY = None


def local_zone(name: str | None = None):
    """
    Local calendar zone. None means the system zone
    (datetime.astimezone() with no argument).
    """
    name = CALENDAR_TZ if name is None else name
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def _to_local(dt: datetime, tz) -> datetime:
    # naive datetimes are already local wall-clock time
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(tz) if tz is not None else dt.astimezone()


def to_date_key(instant, tz=None) -> str | None:
    """
    Turn a date / datetime / ISO string / POSIX timestamp into 'YYYY-MM-DD'
    for the local calendar day. Never goes through UTC.
    Returns INVALID_DATE_KEY when the input isn't a usable date.
    """
    if tz is None:
        tz = local_zone()

    if isinstance(instant, bool) or instant is None:
        return INVALID_DATE_KEY

    try:
        if isinstance(instant, str):
            instant = datetime.fromisoformat(instant.strip())
        elif isinstance(instant, (int, float)):
            instant = datetime.fromtimestamp(instant, tz)
    except (ValueError, OverflowError, OSError):
        return INVALID_DATE_KEY

    if isinstance(instant, datetime):
        try:
            instant = _to_local(instant, tz)
        except (ValueError, OverflowError, OSError):
            return INVALID_DATE_KEY
    elif not isinstance(instant, date):
        return INVALID_DATE_KEY

    return f"{instant.year:04d}-{instant.month:02d}-{instant.day:02d}"


def today_key(tz=None) -> str:
    if tz is None:
        tz = local_zone()
    now = datetime.now(tz) if tz is not None else datetime.now()
    return to_date_key(now, tz)


def parse_date_key(key) -> date | None:
    """Only accepts the canonical form, '2025-1-5' is rejected."""
    if not isinstance(key, str) or len(key) != 10:
        return None
    try:
        d = date.fromisoformat(key)
    except ValueError:
        return None
    return d if to_date_key(d) == key else None
