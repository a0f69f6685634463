import asyncio
from typing import Callable, Optional

from loguru import logger
from mavsdk import System as MavSystem
from mavsdk.action import ActionError
from mavsdk.follow_me import FollowMeError
from mavsdk.follow_me import TargetLocation as MavTargetLocation
from pydantic import ValidationError

from followme.enums.flight_mode import FlightMode
from followme.enums.results import ActionResult, ConnectionResult, FollowMeResult
from followme.models.target_location import TargetLocation


class MavsdkController:
    """Vehicle link backed by MAVSDK.

    SDK errors never leave this class: every command returns the matching
    result enum so callers decide what a failure means.
    """

    def __init__(self, system: Optional[MavSystem] = None) -> None:
        self.system: MavSystem = system if system is not None else MavSystem()

    async def connect(self, endpoint: str) -> ConnectionResult:
        """Request the link; completion is observed through is_connected()."""
        try:
            await self.system.connect(system_address=endpoint)
        except ValueError as e:
            logger.error(f"Invalid connection url {endpoint}: {e}")
            return ConnectionResult.CONNECTION_URL_INVALID
        except OSError as e:
            logger.error(f"Socket error connecting to {endpoint}: {e}")
            return ConnectionResult.SOCKET_ERROR
        except Exception as e:
            logger.error(f"Connection to {endpoint} failed: {e}")
            return ConnectionResult.CONNECTION_ERROR

        return ConnectionResult.SUCCESS

    async def is_connected(self) -> bool:
        state = await self.system.core.connection_state().__anext__()
        return state.is_connected

    async def health_all_ok(self) -> bool:
        return await self.system.telemetry.health_all_ok().__anext__()

    def subscribe_flight_mode(
        self, callback: Callable[[FlightMode], None]
    ) -> asyncio.Task:
        return asyncio.create_task(self._stream_flight_mode(callback))

    async def _stream_flight_mode(self, callback: Callable[[FlightMode], None]):
        try:
            async for flight_mode in self.system.telemetry.flight_mode():
                callback(FlightMode.from_name(flight_mode.name))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Flight mode stream ended: {e}")

    async def arm(self) -> ActionResult:
        return await self._action(self.system.action.arm)

    async def takeoff(self) -> ActionResult:
        return await self._action(self.system.action.takeoff)

    async def land(self) -> ActionResult:
        return await self._action(self.system.action.land)

    async def start_follow_me(self) -> FollowMeResult:
        return await self._follow_me(self.system.follow_me.start)

    async def stop_follow_me(self) -> FollowMeResult:
        return await self._follow_me(self.system.follow_me.stop)

    async def set_target_location(self, location: TargetLocation) -> FollowMeResult:
        target = MavTargetLocation(
            location.latitude_deg,
            location.longitude_deg,
            location.absolute_altitude_m,
            location.velocity_x_m_s,
            location.velocity_y_m_s,
            location.velocity_z_m_s,
        )
        return await self._follow_me(self.system.follow_me.set_target_location, target)

    async def get_last_location(self) -> Optional[TargetLocation]:
        try:
            raw = await self.system.follow_me.get_last_location()
        except FollowMeError as e:
            logger.warning(f"Could not read last target location: {e}")
            return None

        try:
            return TargetLocation(
                latitude_deg=raw.latitude_deg,
                longitude_deg=raw.longitude_deg,
                absolute_altitude_m=raw.absolute_altitude_m,
                velocity_x_m_s=raw.velocity_x_m_s,
                velocity_y_m_s=raw.velocity_y_m_s,
                velocity_z_m_s=raw.velocity_z_m_s,
            )
        except ValidationError:
            # the vehicle reports NaN until a target has been set
            return None

    async def _action(self, command) -> ActionResult:
        try:
            await command()
        except ActionError as e:
            return ActionResult.from_name(e._result.result.name)
        return ActionResult.SUCCESS

    async def _follow_me(self, command, *args) -> FollowMeResult:
        try:
            await command(*args)
        except FollowMeError as e:
            return FollowMeResult.from_name(e._result.result.name)
        return FollowMeResult.SUCCESS
