import asyncio
from typing import Callable, Optional

from loguru import logger

from followme.core.drone_controller import MavsdkController
from followme.enums.results import ConnectionResult


class ReadinessGate:
    def __init__(
        self,
        drone: MavsdkController,
        poll_interval: float = 1.0,
        timeout: Optional[float] = None,
    ) -> None:
        self.drone = drone
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.poll_count = 0

    async def wait_until_ready(
        self, on_link_up: Optional[Callable[[], None]] = None
    ) -> ConnectionResult:
        """Poll link and health at a constant interval until both hold.

        ``on_link_up`` fires once, on the first poll that sees the link up.
        Returns TIMEOUT if a maximum wait is configured and exceeded.
        """
        loop = asyncio.get_running_loop()
        deadline = None if self.timeout is None else loop.time() + self.timeout
        link_up = False

        while True:
            self.poll_count += 1

            try:
                if await self._query(self.drone.is_connected, deadline):
                    if not link_up:
                        link_up = True
                        logger.info("Vehicle connected")
                        if on_link_up:
                            on_link_up()

                    if await self._query(self.drone.health_all_ok, deadline):
                        logger.info("Vehicle is ready")
                        return ConnectionResult.SUCCESS

                    logger.info("Waiting for vehicle to be ready")
                else:
                    logger.info("Waiting for vehicle to connect via heartbeat")
            except asyncio.TimeoutError:
                return self._timed_out()

            if deadline is not None and loop.time() >= deadline:
                return self._timed_out()

            await asyncio.sleep(self.poll_interval)

    async def _query(self, predicate, deadline: Optional[float]) -> bool:
        """Await a vehicle predicate, bounded by what is left of the deadline."""
        if deadline is None:
            return await predicate()

        remaining = max(deadline - asyncio.get_running_loop().time(), 0.0)
        return await asyncio.wait_for(predicate(), remaining)

    def _timed_out(self) -> ConnectionResult:
        logger.warning(f"Vehicle not ready after {self.timeout}s")
        return ConnectionResult.TIMEOUT
