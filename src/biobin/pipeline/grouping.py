import logging
from datetime import timezone, tzinfo
from typing import Dict, Iterable, List

from ..core.schemas import ReadingRecord

logger = logging.getLogger(__name__)


def group_by_sensor(records: Iterable[ReadingRecord], tz: tzinfo = timezone.utc) -> Dict[str, List[ReadingRecord]]:
    """Partition records by sensor id, each partition in ascending time order.

    Keys are in the order sensors are first seen. The sort is stable, so
    readings with equal timestamps keep their input order. Records without a
    parseable timestamp have no place on a time axis and are left out.
    """
    keyed: Dict[str, list] = {}
    dropped = 0
    for position, r in enumerate(records):
        ts = r.parsed_time(tz)
        if ts is None:
            dropped += 1
            continue
        keyed.setdefault(r.sensor_id, []).append((ts, position, r))

    if dropped:
        logger.debug("Left %d readings with unusable timestamps out of the grouping", dropped)

    return {
        sensor_id: [r for _, _, r in sorted(items, key=lambda item: (item[0], item[1]))]
        for sensor_id, items in keyed.items()
    }
