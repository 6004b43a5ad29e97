import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable, List, Optional, Sequence, Tuple

from ..control.refresh import RefreshController
from ..core.schemas import GraphSnapshot, Metric, ReadingRecord, TimeWindow, ViewStatus
from ..ingest.gateway import IngestionGateway, LimitQuery, RangeQuery
from ..pipeline.assemble import LastCallMemo, build_chart_view
from ..pipeline.charts import DEFAULT_INTERVAL, DEFAULT_PALETTE, INTERVALS
from ..pipeline.temporal import (
    RANGE_PRESETS,
    derive_default_window,
    range_cutoff,
    select_records,
    sensor_options,
    unit_options,
)

GraphResult = Tuple[Optional[TimeWindow], List[ReadingRecord]]


class GraphView:
    """Temperature and humidity history charts over a date window.

    Ingests once on start and again whenever the window changes. Until the
    user picks a window, one is derived from the most recent readings; a
    window picked by the user is never replaced by a derived one. Interval,
    robot/sensor selection, the relative time range and the metric toggles
    only change how the held records are drawn.
    """

    kind = "graph"

    def __init__(self, name: str, gateway: IngestionGateway, interval: str = DEFAULT_INTERVAL,
                 bootstrap_limit: int = 500, palette: Sequence[str] = DEFAULT_PALETTE,
                 tz: tzinfo = timezone.utc, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        if interval not in INTERVALS:
            raise ValueError(f"unknown interval {interval!r}")
        self.name = name
        self.gateway = gateway
        self.interval = interval
        self.bootstrap_limit = bootstrap_limit
        self.palette = tuple(palette)
        self.tz = tz
        self.window: Optional[TimeWindow] = None
        self.window_from_user = False
        self.robot_id: Optional[str] = None
        self.sensor_id: Optional[str] = None
        self.time_range = "all"
        self.show_temperature = True
        self.show_humidity = True
        self.clock = clock
        self.records: List[ReadingRecord] = []
        self.controller: RefreshController[GraphResult] = RefreshController(name, self._fetch, self._apply)
        self.logger = logging.getLogger(f"biobin.views.{name}")
        self._select = LastCallMemo(select_records)
        self._charts = LastCallMemo(build_chart_view)

    @property
    def status(self) -> ViewStatus:
        return self.controller.status

    def start(self):
        self.refresh()

    def refresh(self):
        return self.controller.trigger(self.window)

    def close(self):
        self.controller.close()

    def set_window(self, window: TimeWindow):
        """User-chosen window; re-ingests if it differs from the current one."""
        if window == self.window and self.window_from_user:
            return None
        self.window = window
        self.window_from_user = True
        self.logger.info("Window set to %s..%s", window.start, window.end)
        return self.controller.trigger(window)

    def set_interval(self, interval: str):
        if interval not in INTERVALS:
            raise ValueError(f"unknown interval {interval!r}, expected one of {sorted(INTERVALS)}")
        self.interval = interval

    def set_selection(self, robot_id: Optional[str] = None, sensor_id: Optional[str] = None,
                      time_range: str = "all", show_temperature: bool = True, show_humidity: bool = True):
        if time_range not in RANGE_PRESETS:
            raise ValueError(f"unknown time range {time_range!r}, expected one of {list(RANGE_PRESETS)}")
        self.robot_id = robot_id or None
        self.sensor_id = sensor_id or None
        self.time_range = time_range
        self.show_temperature = show_temperature
        self.show_humidity = show_humidity

    @property
    def metrics(self) -> Tuple[Metric, ...]:
        shown = {Metric.temperature: self.show_temperature, Metric.humidity: self.show_humidity}
        return tuple(m for m in Metric if shown[m])

    async def _fetch(self, window: Optional[TimeWindow]) -> GraphResult:
        if window is None:
            recent = await self.gateway.fetch(LimitQuery(self.bootstrap_limit))
            window = derive_default_window(recent, self.tz)
            if window is None:
                self.logger.info("No usable timestamps in the %d most recent readings", len(recent))
                return None, recent
            self.logger.debug("Derived default window %s..%s", window.start, window.end)
        records = await self.gateway.fetch(RangeQuery(window.start, window.end))
        return window, records

    def _apply(self, result: GraphResult):
        window, records = result
        if not self.window_from_user:
            self.window = window
        self.records = records

    def snapshot(self) -> GraphSnapshot:
        since = range_cutoff(self.time_range, self.clock())
        selected = self._select(self.records, self.robot_id, self.sensor_id, since, self.tz)
        view = self._charts(selected, self.window, self.interval, self.palette, self.tz, self.metrics)
        return GraphSnapshot(
            status=self.controller.status,
            error=self.controller.error,
            notice=view.notice.message if view.notice else None,
            window=view.window,
            interval=self.interval,
            robot_id=self.robot_id,
            sensor_id=self.sensor_id,
            time_range=self.time_range,
            time_ranges=list(RANGE_PRESETS),
            show_temperature=self.show_temperature,
            show_humidity=self.show_humidity,
            robots=unit_options(self.records),
            sensors=sensor_options(self.records, self.robot_id),
            record_count=view.record_count,
            charts=view.charts,
        )
