import asyncio
from abc import ABC, abstractmethod
from typing import AsyncIterable, Callable, Optional, Tuple

from loguru import logger

LocationCallback = Callable[..., None]


class LocationSource(ABC):
    """Producer of target coordinates.

    The registered callback receives ``(latitude, longitude)`` on the event
    loop until the source is exhausted or released. No callback fires after
    ``release()`` returns.
    """

    def __init__(self) -> None:
        self._callback: Optional[LocationCallback] = None
        self._exhausted = asyncio.Event()
        self.emitted = 0
        self.last_error: Optional[Exception] = None

    def request_location_updates(self, callback: LocationCallback) -> None:
        self._callback = callback
        self._start()

    def release(self) -> None:
        self._callback = None
        self._stop()
        self._exhausted.set()

    @property
    def exhausted(self) -> bool:
        return self._exhausted.is_set()

    async def wait_until_exhausted(self) -> None:
        await self._exhausted.wait()

    def _emit(self, *sample: float) -> None:
        if self._callback is None:
            return
        self.emitted += 1
        self._callback(*sample)

    def _finish(self) -> None:
        logger.info(f"Location source exhausted after {self.emitted} updates")
        self._callback = None
        self._exhausted.set()

    @abstractmethod
    def _start(self) -> None: ...

    @abstractmethod
    def _stop(self) -> None: ...


class FakeLocationProvider(LocationSource):
    """Simulated target walking north-east from a start point on a timer."""

    def __init__(
        self,
        start_latitude: float = 47.3977419,
        start_longitude: float = 8.5455938,
        step_deg: float = 0.00001,
        interval: float = 1.0,
        count: int = 75,
    ) -> None:
        super().__init__()
        self.latitude = start_latitude
        self.longitude = start_longitude
        self.step_deg = step_deg
        self.interval = interval
        self.count = count
        self._handle: Optional[asyncio.TimerHandle] = None

    def _start(self) -> None:
        self._schedule()

    def _stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.interval, self._tick)

    def _tick(self) -> None:
        self._handle = None
        if self._callback is None:
            return

        try:
            self._emit(self.latitude, self.longitude)
        except Exception as e:
            self.last_error = e
            logger.error(f"Location update handler failed: {e}")
            self._finish()
            return

        if self.emitted >= self.count:
            self._finish()
            return

        self.latitude += self.step_deg
        self.longitude += self.step_deg
        self._schedule()


class IterableLocationSource(LocationSource):
    """Feeds samples from an async iterable, e.g. a companion sensor stream."""

    def __init__(self, samples: AsyncIterable[Tuple[float, ...]]) -> None:
        super().__init__()
        self.samples = samples
        self._task: Optional[asyncio.Task] = None

    def _start(self) -> None:
        self._task = asyncio.create_task(self._consume())

    def _stop(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _consume(self) -> None:
        try:
            async for sample in self.samples:
                if self._callback is None:
                    return
                self._emit(*sample)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.last_error = e
            logger.error(f"Location source failed: {e}")
        self._finish()
