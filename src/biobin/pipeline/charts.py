"""
Chart series for the history graphs.

Series colours come from a fixed palette indexed by the order in which each
sensor was first seen, so the same input always produces the same colours.
With more sensors than palette entries the colours repeat.
"""
from datetime import timezone, tzinfo
from typing import Dict, List, Mapping, Sequence

from ..core.schemas import (
    AxisBucketing,
    ChartPoint,
    ChartSeries,
    ChartSpec,
    Metric,
    ReadingRecord,
    YAxis,
)

DEFAULT_PALETTE: tuple[str, ...] = (
    "#4CAF50", "#2196F3", "#FFC107", "#E91E63",
    "#9C27B0", "#00BCD4", "#FF5722", "#607D8B",
)

# appended to a series colour for its translucent fill
FILL_ALPHA = "40"

METRIC_AXES: Dict[Metric, YAxis] = {
    Metric.temperature: YAxis(title="Temperature (°C)", unit="°C", min=0),
    Metric.humidity: YAxis(title="Humidity (%)", unit="%", min=0, max=100),
}

CHART_TITLES: Dict[Metric, str] = {
    Metric.temperature: "Temperature Over Time (°C)",
    Metric.humidity: "Humidity Over Time (%)",
}

DISPLAY_FORMATS: Dict[str, str] = {
    "millisecond": "MMM d, HH:mm:ss.SSS",
    "second": "MMM d, HH:mm:ss",
    "minute": "MMM d, HH:mm",
    "hour": "MMM d, HH:mm",
    "day": "MMM d",
    "week": "MMM d",
    "month": "MMMM yyyy",
    "quarter": "[Q]Q yyyy",
    "year": "yyyy",
}

DEFAULT_INTERVAL = "5m"

INTERVALS: Dict[str, tuple[str, int]] = {
    "5m": ("minute", 5),
    "15m": ("minute", 15),
    "1h": ("hour", 1),
    "6h": ("hour", 6),
    "1d": ("day", 1),
}


def bucketing_for(interval: str) -> AxisBucketing:
    """Time axis settings for a named interval; unknown names raise KeyError."""
    unit, step = INTERVALS[interval]
    return AxisBucketing(unit=unit, step=step, display_formats=dict(DISPLAY_FORMATS))


def series_label(sensor_id: str, metric: Metric) -> str:
    return f"{sensor_id} - {METRIC_AXES[metric].title}"


def build_series(grouped: Mapping[str, Sequence[ReadingRecord]], metric: Metric,
                 palette: Sequence[str] = DEFAULT_PALETTE,
                 tz: tzinfo = timezone.utc) -> List[ChartSeries]:
    if not palette:
        raise ValueError("palette must not be empty")
    metric = Metric(metric)

    out: List[ChartSeries] = []
    for index, (sensor_id, records) in enumerate(grouped.items()):
        color = palette[index % len(palette)]
        points = []
        for r in records:
            value = getattr(r, metric.value)
            ts = r.parsed_time(tz)
            if value is None or ts is None:
                continue
            points.append(ChartPoint(time=ts, value=value))
        # the colour slot is used even when the sensor has nothing for this metric
        if not points:
            continue
        out.append(ChartSeries(
            sensor_id=sensor_id,
            metric=metric,
            label=series_label(sensor_id, metric),
            color=color,
            background_color=color + FILL_ALPHA,
            points=points,
        ))
    return out


def build_chart(grouped: Mapping[str, Sequence[ReadingRecord]], metric: Metric, bucketing: AxisBucketing,
                palette: Sequence[str] = DEFAULT_PALETTE, tz: tzinfo = timezone.utc) -> ChartSpec:
    metric = Metric(metric)
    return ChartSpec(
        metric=metric,
        title=CHART_TITLES[metric],
        y_axis=METRIC_AXES[metric],
        bucketing=bucketing,
        series=build_series(grouped, metric, palette=palette, tz=tz),
    )
