import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

from ..core.errors import IngestionError
from ..core.schemas import ViewStatus

T = TypeVar("T")

UNEXPECTED_ERROR = "Unexpected error while loading sensor data."


class RefreshController(Generic[T]):
    """Decides when a view re-ingests and which result wins.

    ``trigger(*args)`` calls ``fetch(*args)``, so the query parameters are
    bound at the moment of the trigger. Every trigger gets a sequence number
    and only the result of the latest issued request is applied; an older
    request still running is cancelled and anything it produces later is
    dropped. Ingestion failures become ``failed`` state with a message and
    leave previously applied data alone.
    """

    def __init__(self, name: str, fetch: Callable[..., Awaitable[T]], apply: Callable[[T], None]):
        self.name = name
        self.fetch = fetch
        self.apply = apply
        self.status: ViewStatus = ViewStatus.idle
        self.error: Optional[str] = None
        self.last_error: Optional[BaseException] = None
        self.updated_at: Optional[datetime] = None
        self.logger = logging.getLogger(f"biobin.control.refresh.{name}")
        self._seq = 0
        self._task: Optional[asyncio.Task] = None
        self._poller: Optional[asyncio.Task] = None
        self._closed = False
        self._listeners: List[Callable[["RefreshController[T]"], None]] = []

    @property
    def sequence(self) -> int:
        return self._seq

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def polling(self) -> bool:
        return self._poller is not None and not self._poller.done()

    def subscribe(self, callback: Callable[["RefreshController[T]"], None]):
        self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[["RefreshController[T]"], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def trigger(self, *args: Any) -> asyncio.Task:
        """Start a new request, superseding the one in flight (if any)."""
        if self._closed:
            raise RuntimeError(f"refresh controller {self.name!r} is closed")
        self._seq += 1
        seq = self._seq
        if self.in_flight:
            self.logger.debug("Request #%d supersedes #%d", seq, seq - 1)
            self._task.cancel()
        self._set_status(ViewStatus.loading)
        self._task = asyncio.get_running_loop().create_task(
            self._run(seq, args), name=f"{self.name}-refresh-{seq}")
        return self._task

    def start_polling(self, period: float, *args: Any) -> asyncio.Task:
        """Trigger now, then again ``period`` seconds after each poll settles."""
        if period <= 0:
            raise ValueError("polling period must be positive")
        if self._closed:
            raise RuntimeError(f"refresh controller {self.name!r} is closed")
        if not self.polling:
            self._poller = asyncio.get_running_loop().create_task(
                self._poll(period, args), name=f"{self.name}-poller")
        return self._poller

    def stop_polling(self):
        if self._poller is not None:
            self._poller.cancel()
            self._poller = None

    async def wait(self):
        """Wait until the latest request (including any that replace it) settles."""
        while self.in_flight:
            await asyncio.wait({self._task})

    def close(self):
        """Stop the timer and drop the request in flight. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self.stop_polling()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.logger.debug("Closed after %d request(s)", self._seq)

    def _is_current(self, seq: int) -> bool:
        return not self._closed and seq == self._seq

    async def _poll(self, period: float, args: tuple):
        # a tick never supersedes the request it would replace; the next
        # period starts once that request has settled
        while not self._closed:
            if not self.in_flight:
                self.trigger(*args)
            await self.wait()
            await asyncio.sleep(period)

    async def _run(self, seq: int, args: tuple):
        try:
            result = await self.fetch(*args)
        except asyncio.CancelledError:
            self.logger.debug("Request #%d cancelled", seq)
            raise
        except IngestionError as e:
            if self._is_current(seq):
                self.logger.warning("Refresh #%d of %s failed: %s", seq, self.name, e)
                self._fail(e, e.user_message())
            else:
                self.logger.debug("Discarding failure of stale request #%d: %s", seq, e)
            return
        except Exception as e:
            if self._is_current(seq):
                self.logger.exception("Unexpected error in refresh #%d of %s", seq, self.name)
                self._fail(e, UNEXPECTED_ERROR)
            return

        if not self._is_current(seq):
            self.logger.debug("Discarding result of stale request #%d (latest is #%d)", seq, self._seq)
            return

        try:
            self.apply(result)
        except Exception as e:
            self.logger.exception("Could not apply result of refresh #%d of %s", seq, self.name)
            self._fail(e, UNEXPECTED_ERROR)
            return

        self.error = None
        self.last_error = None
        self.updated_at = datetime.now(timezone.utc)
        self._set_status(ViewStatus.ready)

    def _fail(self, exc: BaseException, message: str):
        self.error = message
        self.last_error = exc
        self._set_status(ViewStatus.failed)

    def _set_status(self, status: ViewStatus):
        self.status = status
        for cb in list(self._listeners):
            try:
                cb(self)
            except Exception:
                self.logger.exception("Listener of %s failed", self.name)
