import asyncio
from datetime import datetime
from typing import Optional

from loguru import logger

from followme.core.drone_controller import MavsdkController
from followme.core.target_location_cache import TargetLocationCache
from followme.enums.flight_mode import FlightMode
from followme.models.flight_mode_record import FlightModeRecord


class FlightModeObserver:
    def __init__(self, drone: MavsdkController, cache: TargetLocationCache) -> None:
        self.drone = drone
        self.cache = cache
        self.record_count = 0
        self.last_record: Optional[FlightModeRecord] = None
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        """Subscribe to flight mode changes for the rest of the session."""
        if self._task is not None:
            return

        self._task = self.drone.subscribe_flight_mode(self.on_flight_mode)

    async def stop(self) -> None:
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    def on_flight_mode(self, flight_mode: FlightMode) -> None:
        record = FlightModeRecord(
            timestamp=datetime.now().timestamp(),
            flight_mode=flight_mode,
            last_target_location=self.cache.get(),
        )
        self.last_record = record
        self.record_count += 1

        target = record.last_target_location
        if target is None:
            logger.info(f"[FlightMode: {flight_mode.value}] No target location yet")
        else:
            logger.info(
                f"[FlightMode: {flight_mode.value}] Target is at: "
                f"{target.latitude_deg}, {target.longitude_deg} degrees"
            )
