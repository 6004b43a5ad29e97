import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Union

import requests
from pydantic import ValidationError

from ..core.errors import MalformedDataError, ResponseError, TransportError
from ..core.schemas import ReadingRecord
from ..core.utils import format_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RangeQuery:
    start: date
    end: date
    mode: str = "range"

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError("range query start must not be after end")


@dataclass(frozen=True)
class LatestQuery:
    mode: str = "latest"


@dataclass(frozen=True)
class LimitQuery:
    n: int
    mode: str = "limit"

    def __post_init__(self):
        if isinstance(self.n, bool) or not isinstance(self.n, int) or self.n < 1:
            raise ValueError(f"row limit must be a positive integer, got {self.n!r}")


Query = Union[RangeQuery, LatestQuery, LimitQuery]


class IngestionGateway:
    """Read-only client for the readings backend.

    Every call is a single request/response: no caching, no retries. The
    blocking HTTP call runs in a worker thread so callers on the event loop
    only suspend at the network boundary.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def request_for(self, query: Query) -> tuple[str, dict[str, Any]]:
        if isinstance(query, RangeQuery):
            return "/getGraphData", {"startDate": format_date(query.start), "endDate": format_date(query.end)}
        if isinstance(query, LatestQuery):
            return "/getLatestSensorData", {}
        if isinstance(query, LimitQuery):
            return "/getSensorData", {"limit": query.n}
        raise TypeError(f"unsupported query {query!r}")

    async def fetch(self, query: Query) -> List[ReadingRecord]:
        return await asyncio.to_thread(self.fetch_sync, query)

    def fetch_sync(self, query: Query) -> List[ReadingRecord]:
        path, params = self.request_for(query)
        url = self.base_url + path
        started = time.perf_counter()
        try:
            resp = self.session.get(
                url,
                params=params or None,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise TransportError(f"request to {url} timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise TransportError(f"could not reach {url}: {e}") from e

        logger.debug("GET %s params=%s -> %s in %.3fs", url, params, resp.status_code, time.perf_counter() - started)

        if not resp.ok:
            raise ResponseError(resp.status_code, resp.reason or "", resp.text or "")

        try:
            body = resp.json()
        except ValueError as e:
            raise MalformedDataError(f"response from {path} is not JSON") from e

        return self.parse_records(body, source=path)

    def parse_records(self, body: Any, source: str = "") -> List[ReadingRecord]:
        if not isinstance(body, list):
            raise MalformedDataError(f"response from {source} is not a list of readings")

        records: List[ReadingRecord] = []
        skipped = 0
        for item in body:
            try:
                records.append(ReadingRecord.model_validate(item))
            except ValidationError as e:
                # skip bad row, keep the batch
                skipped += 1
                logger.warning("Dropping invalid reading from %s: %s", source, e.errors(include_url=False))
        if skipped:
            logger.info("Accepted %d of %d readings from %s", len(records), len(body), source)
        return records
