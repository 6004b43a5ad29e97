from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import AliasChoices, BaseModel, Field

from ..core.schemas import GraphSnapshot, LiveSnapshot, ReadingsSnapshot, TimeWindow, ViewInfo
from ..core.view_manager import manager
from ..views.graph_view import GraphView
from ..views.live_view import LiveView
from ..views.readings_view import ReadingsView

router = APIRouter(prefix='/views', tags=['views'])


class IntervalChange(BaseModel):
    interval: str


class SelectionChange(BaseModel):
    robot_id: Optional[str] = Field(None, validation_alias=AliasChoices('robotId', 'robot_id'))
    sensor_id: Optional[str] = Field(None, validation_alias=AliasChoices('sensorId', 'sensor_id'))
    time_range: str = Field('all', validation_alias=AliasChoices('timeRange', 'time_range'))
    show_temperature: bool = Field(True, validation_alias=AliasChoices('showTemperature', 'show_temperature'))
    show_humidity: bool = Field(True, validation_alias=AliasChoices('showHumidity', 'show_humidity'))


class LimitChange(BaseModel):
    limit: int


def _view(name: str, cls):
    view = manager.get(name)
    if not isinstance(view, cls):
        raise HTTPException(status_code=404, detail=f'view {name} not found')
    return view


@router.get('', response_model=list[ViewInfo])
async def list_views():
    return manager.list()


@router.get('/live', response_model=LiveSnapshot)
async def live():
    return _view('live', LiveView).snapshot()


@router.get('/graph', response_model=GraphSnapshot)
async def graph():
    return _view('graph', GraphView).snapshot()


@router.post('/graph/window', response_model=GraphSnapshot)
async def set_graph_window(window: TimeWindow):
    view = _view('graph', GraphView)
    view.set_window(window)
    return view.snapshot()


@router.post('/graph/interval', response_model=GraphSnapshot)
async def set_graph_interval(change: IntervalChange):
    view = _view('graph', GraphView)
    try:
        view.set_interval(change.interval)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return view.snapshot()


@router.post('/graph/selection', response_model=GraphSnapshot)
async def set_graph_selection(change: SelectionChange):
    view = _view('graph', GraphView)
    try:
        view.set_selection(change.robot_id, change.sensor_id, change.time_range,
                           change.show_temperature, change.show_humidity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return view.snapshot()


@router.get('/readings', response_model=ReadingsSnapshot)
async def readings():
    return _view('readings', ReadingsView).snapshot()


@router.get('/readings/limits')
async def readings_limits():
    view = _view('readings', ReadingsView)
    return {'limit': view.limit, 'options': list(view.limits.options)}


@router.post('/readings/limit', response_model=ReadingsSnapshot)
async def set_readings_limit(change: LimitChange):
    view = _view('readings', ReadingsView)
    try:
        view.set_limit(change.limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return view.snapshot()
