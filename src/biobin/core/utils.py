from datetime import date, datetime, timezone, tzinfo
from functools import lru_cache
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DISPLAY_FORMAT = "%B %d, %Y, %H:%M:%S %Z"


@lru_cache(maxsize=32)
def get_zone(name: str) -> tzinfo:
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"unknown timezone {name!r}") from e


def parse_timestamp(value: Any, tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """Parse a backend timestamp into an aware datetime.

    Accepts ISO 8601 with either 'T' or a space between date and time and an
    optional trailing 'Z'. Naive values are taken to be in ``tz``. Anything
    that cannot be parsed yields None.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    text = text.replace(" ", "T", 1)
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def format_date(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def format_display_timestamp(value: Any, display_tz: tzinfo, source_tz: tzinfo = timezone.utc) -> str:
    """Render a timestamp for the tables, e.g. 'July 01, 2024, 19:00:00 JST'.

    Unparseable values are shown as they came from the backend.
    """
    parsed = parse_timestamp(value, source_tz)
    if parsed is None:
        return "" if value is None else str(value)
    return parsed.astimezone(display_tz).strftime(DISPLAY_FORMAT)
