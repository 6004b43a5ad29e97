import logging
from datetime import timezone, tzinfo
from typing import List, Sequence

from ..control.pagination import DEFAULT_LIMIT, LIMIT_OPTIONS, LimitController
from ..control.refresh import RefreshController
from ..core.schemas import ReadingRecord, ReadingsSnapshot, ViewStatus
from ..ingest.gateway import IngestionGateway, LimitQuery
from ..pipeline.assemble import LastCallMemo, build_table_view


class ReadingsView:
    """Tabular history capped by a user-selected row limit.

    Ingests once on start and again only when the limit changes.
    """

    kind = "readings"

    def __init__(self, name: str, gateway: IngestionGateway, limit: int = DEFAULT_LIMIT,
                 limit_options: Sequence[int] = LIMIT_OPTIONS,
                 display_tz: tzinfo = timezone.utc, source_tz: tzinfo = timezone.utc):
        self.name = name
        self.gateway = gateway
        self.display_tz = display_tz
        self.source_tz = source_tz
        self.records: List[ReadingRecord] = []
        self.limits = LimitController(self._on_limit_change, limit_options, initial=limit)
        self.controller: RefreshController[List[ReadingRecord]] = RefreshController(
            name, gateway.fetch, self._apply)
        self.logger = logging.getLogger(f"biobin.views.{name}")
        self._table = LastCallMemo(build_table_view)

    @property
    def status(self) -> ViewStatus:
        return self.controller.status

    @property
    def limit(self) -> int:
        return self.limits.limit

    def start(self):
        self.refresh()

    def refresh(self):
        return self.controller.trigger(LimitQuery(self.limits.limit))

    def set_limit(self, limit: int) -> bool:
        return self.limits.select(limit)

    def close(self):
        self.controller.close()

    def _on_limit_change(self, limit: int):
        self.logger.info("Row limit changed to %d", limit)
        self.controller.trigger(LimitQuery(limit))

    def _apply(self, records: List[ReadingRecord]):
        if len(records) > self.limits.limit:
            self.logger.debug("Backend returned %d rows for limit %d", len(records), self.limits.limit)
        self.records = records

    def snapshot(self) -> ReadingsSnapshot:
        table = self._table(self.records, self.display_tz, self.source_tz)
        return ReadingsSnapshot(
            status=self.controller.status,
            error=self.controller.error,
            limit=self.limits.limit,
            limit_options=list(self.limits.options),
            rows=table.rows,
        )
