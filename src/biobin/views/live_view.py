import logging
from datetime import timezone, tzinfo
from typing import List

from ..control.refresh import RefreshController
from ..core.schemas import LiveSnapshot, ReadingRecord, ViewStatus
from ..ingest.gateway import IngestionGateway, LatestQuery
from ..pipeline.assemble import LastCallMemo, build_table_view

DEFAULT_POLL_SECONDS = 5.0


class LiveView:
    """Latest reading per sensor, re-ingested on a fixed period."""

    kind = "live"

    def __init__(self, name: str, gateway: IngestionGateway, poll_seconds: float = DEFAULT_POLL_SECONDS,
                 display_tz: tzinfo = timezone.utc, source_tz: tzinfo = timezone.utc):
        self.name = name
        self.gateway = gateway
        self.poll_seconds = poll_seconds
        self.display_tz = display_tz
        self.source_tz = source_tz
        self.records: List[ReadingRecord] = []
        self.controller: RefreshController[List[ReadingRecord]] = RefreshController(
            name, gateway.fetch, self._apply)
        self.logger = logging.getLogger(f"biobin.views.{name}")
        self._table = LastCallMemo(build_table_view)

    @property
    def status(self) -> ViewStatus:
        return self.controller.status

    def start(self):
        self.logger.info("Polling latest readings every %.1fs", self.poll_seconds)
        self.controller.start_polling(self.poll_seconds, LatestQuery())

    def refresh(self):
        return self.controller.trigger(LatestQuery())

    def close(self):
        self.controller.close()

    def _apply(self, records: List[ReadingRecord]):
        self.records = records

    def snapshot(self) -> LiveSnapshot:
        table = self._table(self.records, self.display_tz, self.source_tz)
        return LiveSnapshot(
            status=self.controller.status,
            error=self.controller.error,
            updated_at=self.controller.updated_at,
            rows=table.rows,
        )
