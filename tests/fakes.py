import asyncio
from typing import Any, Callable, List, Optional, Tuple

from biobin.core.schemas import ReadingRecord


def record(sensor: str, ts: str, temp: Optional[float] = 20.0, hum: Optional[float] = 50.0,
           robot: str = "Rpi__1", **extra) -> ReadingRecord:
    return ReadingRecord(robot_id=robot, sensor_id=sensor, timestamp=ts,
                         temperature=temp, humidity=hum, **extra)


class FakeGateway:
    """Stands in for IngestionGateway; ``respond(query)`` returns (delay, result or exception)."""

    def __init__(self, respond: Callable[[Any], Tuple[float, Any]]):
        self.respond = respond
        self.calls: List[Any] = []

    async def fetch(self, query):
        self.calls.append(query)
        delay, result = self.respond(query)
        await asyncio.sleep(delay)
        if isinstance(result, Exception):
            raise result
        return result


class FakeResponse:
    def __init__(self, status: int = 200, body: Any = None, text: str = "", reason: str = "OK",
                 invalid_json: bool = False):
        self.status_code = status
        self.reason = reason
        self.text = text
        self._body = body
        self._invalid_json = invalid_json

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body


class FakeSession:
    def __init__(self, response: Optional[FakeResponse] = None, exc: Optional[Exception] = None):
        self.response = response
        self.exc = exc
        self.calls: List[dict] = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response
