import asyncio
from typing import Optional, Set

from loguru import logger
from pydantic import ValidationError

from followme.core.drone_controller import MavsdkController
from followme.core.target_location_cache import TargetLocationCache
from followme.enums.results import FollowMeResult
from followme.models.session_outcome import PipelineStats
from followme.models.target_location import TargetLocation


class LocationUpdatePipeline:
    """Validates location samples, caches them and forwards them to the vehicle.

    Forwarding is fire-and-forget: the set-target command is issued before
    ``on_location`` returns, its result is accounted for later in
    ``on_command_result``. Invalid samples and failed forwards are counted,
    never raised.
    """

    def __init__(self, cache: TargetLocationCache, drone: MavsdkController) -> None:
        self.cache = cache
        self.drone = drone
        self.stats = PipelineStats()
        self.last_error: Optional[Exception] = None
        self._running = False
        self._pending: Set[asyncio.Future] = set()

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def on_location(
        self,
        latitude: float,
        longitude: float,
        absolute_altitude_m: float = 0.0,
        velocity_x_m_s: float = 0.0,
        velocity_y_m_s: float = 0.0,
        velocity_z_m_s: float = 0.0,
    ) -> None:
        if not self._running:
            logger.debug(f"Pipeline stopped, ignoring sample {latitude}, {longitude}")
            return

        try:
            target = TargetLocation(
                latitude_deg=latitude,
                longitude_deg=longitude,
                absolute_altitude_m=absolute_altitude_m,
                velocity_x_m_s=velocity_x_m_s,
                velocity_y_m_s=velocity_y_m_s,
                velocity_z_m_s=velocity_z_m_s,
            )
        except ValidationError:
            self.stats.dropped += 1
            logger.debug(f"Dropped invalid sample {latitude}, {longitude}")
            return

        self.stats.accepted += 1
        self.cache.update(target)

        future = asyncio.ensure_future(self.drone.set_target_location(target))
        self._pending.add(future)
        future.add_done_callback(self._forward_done)

    def _forward_done(self, future: asyncio.Future) -> None:
        self._pending.discard(future)

        if future.cancelled():
            self.on_command_result(FollowMeResult.UNKNOWN)
            return

        error = future.exception()
        if error is not None:
            self.last_error = error
            self.on_command_result(FollowMeResult.UNKNOWN)
            return

        self.on_command_result(future.result())

    def on_command_result(self, result: FollowMeResult) -> None:
        self.stats.forwarded += 1
        if not result.is_success:
            self.stats.forwarding_failures += 1
            self.stats.last_forwarding_failure = result.description
            logger.warning(f"Target location update failed: {result.description}")

    async def drain(self) -> None:
        """Wait for every forwarded command still in flight."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
