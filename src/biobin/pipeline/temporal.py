from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.schemas import ReadingRecord, TimeWindow


def filter_records(records: Iterable[ReadingRecord], window: Optional[TimeWindow],
                   tz: tzinfo = timezone.utc) -> List[ReadingRecord]:
    """Keep the records whose timestamp falls inside ``window`` (inclusive).

    Without a window this is a pass-through copy; deriving a default window
    is up to the caller. Records with an unparseable timestamp never pass a
    real window.
    """
    if window is None:
        return list(records)
    lower, upper = window.lower_bound(tz), window.upper_bound(tz)
    out = []
    for r in records:
        ts = r.parsed_time(tz)
        if ts is not None and lower <= ts <= upper:
            out.append(r)
    return out


def derive_default_window(records: Iterable[ReadingRecord], tz: tzinfo = timezone.utc) -> Optional[TimeWindow]:
    """Window spanning the earliest to the latest parseable timestamp.

    Returns None when no record has a usable timestamp.
    """
    earliest = latest = None
    for r in records:
        ts = r.parsed_time(tz)
        if ts is None:
            continue
        if earliest is None or ts < earliest:
            earliest = ts
        if latest is None or ts > latest:
            latest = ts
    if earliest is None:
        return None
    return TimeWindow(start=earliest.astimezone(tz).date(), end=latest.astimezone(tz).date())


# relative ranges offered next to the date window, counted back from now
RANGE_PRESETS: Dict[str, Optional[timedelta]] = {
    "all": None,
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
}


def range_cutoff(preset: str, now: datetime) -> Optional[datetime]:
    if preset not in RANGE_PRESETS:
        raise ValueError(f"unknown time range {preset!r}, expected one of {list(RANGE_PRESETS)}")
    span = RANGE_PRESETS[preset]
    return None if span is None else now - span


def select_records(records: Iterable[ReadingRecord], robot_id: Optional[str] = None,
                   sensor_id: Optional[str] = None, since: Optional[datetime] = None,
                   tz: tzinfo = timezone.utc) -> List[ReadingRecord]:
    """Narrow to one robot and/or one sensor. None means all.

    With ``since`` only records at or after that instant are kept, which
    also drops records whose timestamp does not parse.
    """
    out = []
    for r in records:
        if robot_id is not None and r.robot_id != robot_id:
            continue
        if sensor_id is not None and r.sensor_id != sensor_id:
            continue
        if since is not None:
            ts = r.parsed_time(tz)
            if ts is None or ts < since:
                continue
        out.append(r)
    return out


def unit_options(records: Sequence[ReadingRecord]) -> List[str]:
    return list(dict.fromkeys(r.robot_id for r in records))


def sensor_options(records: Sequence[ReadingRecord], robot_id: Optional[str] = None) -> List[str]:
    return list(dict.fromkeys(r.sensor_id for r in select_records(records, robot_id=robot_id)))
