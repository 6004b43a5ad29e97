from datetime import date, datetime, timezone, tzinfo
from enum import Enum
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .utils import parse_timestamp


def _wire(*names: str) -> dict:
    # first name is what we send back out, all of them are accepted on input
    return {
        "validation_alias": AliasChoices(*names),
        "serialization_alias": names[0],
    }


class ReadingRecord(BaseModel):
    """One timestamped observation from a sensor on a robot."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: Optional[int] = None
    robot_id: str = Field(..., min_length=1, **_wire("robotId", "robotid", "robot_id"))
    sensor_id: str = Field(..., min_length=1, **_wire("sensorId", "sensorid", "sensor_id"))
    timestamp: str = Field("", description="Backend timestamp, parsed lazily")
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    control_mode: Optional[str] = Field(None, **_wire("controlMode", "controlmode", "control_mode"))
    motor_interval: Optional[float] = Field(None, **_wire("motorInterval", "motorinterval", "motor_interval"))
    power_consumption: Optional[float] = Field(
        None, **_wire("powerConsumption", "powerconsumption", "power_consumption"))
    compost_phase: Optional[str] = Field(None, **_wire("compostPhase", "compostphase", "compost_phase"))

    @field_validator("temperature", "humidity", "motor_interval", "power_consumption", mode="before")
    @classmethod
    def _blank_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("timestamp", mode="before")
    @classmethod
    def _timestamp_as_text(cls, v):
        # numbers and nulls still make a record, they just never parse
        if v is None:
            return ""
        if not isinstance(v, str):
            return str(v)
        return v

    def parsed_time(self, tz: tzinfo = timezone.utc) -> Optional[datetime]:
        return parse_timestamp(self.timestamp, tz)


class TimeWindow(BaseModel):
    """Inclusive date range, start@00:00:00 through end@23:59:59."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    start: date = Field(..., **_wire("startDate", "start"))
    end: date = Field(..., **_wire("endDate", "end"))

    @model_validator(mode="after")
    def _ordered(self):
        if self.start > self.end:
            raise ValueError("start date must not be after end date")
        return self

    def lower_bound(self, tz: tzinfo = timezone.utc) -> datetime:
        return datetime(self.start.year, self.start.month, self.start.day, tzinfo=tz)

    def upper_bound(self, tz: tzinfo = timezone.utc) -> datetime:
        return datetime(self.end.year, self.end.month, self.end.day, 23, 59, 59, 999999, tzinfo=tz)


class Metric(str, Enum):
    temperature = "temperature"
    humidity = "humidity"


class ChartPoint(BaseModel):
    time: datetime
    value: float


class ChartSeries(BaseModel):
    sensor_id: str = Field(..., serialization_alias="sensorId")
    metric: Metric
    label: str
    color: str
    background_color: str = Field(..., serialization_alias="backgroundColor")
    points: List[ChartPoint]


class AxisBucketing(BaseModel):
    unit: str = Field(..., pattern="^(minute|hour|day)$")
    step: int = Field(..., ge=1)
    display_formats: Dict[str, str] = Field(..., serialization_alias="displayFormats")
    tooltip_format: str = Field("MMM d,yyyy HH:mm:ss", serialization_alias="tooltipFormat")


class YAxis(BaseModel):
    title: str
    unit: str
    min: Optional[float] = None
    max: Optional[float] = None


class ChartSpec(BaseModel):
    metric: Metric
    title: str
    y_axis: YAxis = Field(..., serialization_alias="yAxis")
    bucketing: AxisBucketing
    series: List[ChartSeries]


class TableRow(ReadingRecord):
    display_time: str = Field(..., serialization_alias="displayTime")


class ViewStatus(str, Enum):
    idle = "idle"
    loading = "loading"
    ready = "ready"
    failed = "failed"


class ViewInfo(BaseModel):
    name: str
    kind: str
    status: ViewStatus
    error: Optional[str] = None


class LiveSnapshot(BaseModel):
    status: ViewStatus
    error: Optional[str] = None
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")
    rows: List[TableRow] = Field(default_factory=list)


class GraphSnapshot(BaseModel):
    status: ViewStatus
    error: Optional[str] = None
    notice: Optional[str] = None
    window: Optional[TimeWindow] = None
    interval: str
    robot_id: Optional[str] = Field(None, serialization_alias="robotId")
    sensor_id: Optional[str] = Field(None, serialization_alias="sensorId")
    time_range: str = Field("all", serialization_alias="timeRange")
    time_ranges: List[str] = Field(default_factory=list, serialization_alias="timeRanges")
    show_temperature: bool = Field(True, serialization_alias="showTemperature")
    show_humidity: bool = Field(True, serialization_alias="showHumidity")
    robots: List[str] = Field(default_factory=list)
    sensors: List[str] = Field(default_factory=list)
    record_count: int = Field(0, serialization_alias="recordCount")
    charts: List[ChartSpec] = Field(default_factory=list)


class ReadingsSnapshot(BaseModel):
    status: ViewStatus
    error: Optional[str] = None
    limit: int
    limit_options: List[int] = Field(..., serialization_alias="limitOptions")
    rows: List[TableRow] = Field(default_factory=list)
