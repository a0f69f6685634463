import asyncio
from typing import List, Optional

from loguru import logger

from followme.core.drone_controller import MavsdkController
from followme.core.readiness_gate import ReadinessGate
from followme.core.state_machine import StateMachine
from followme.enums.results import ActionResult, FollowMeResult
from followme.enums.session_state import SessionState
from followme.exceptions.session_exceptions import CommandFailure, ConnectivityFailure


class MissionSequencer:
    """Advances the session through connect, arm, takeoff, follow and land.

    Every step before Follow-Me is fail-fast: a failed result raises and the
    state is left where it was. The stopping sequence is best-effort and
    always issues land once the vehicle has left the ground.
    """

    def __init__(
        self,
        drone: MavsdkController,
        gate: ReadinessGate,
        state: StateMachine,
        endpoint: str,
        takeoff_settle_time: float = 5.0,
        land_grace_period: float = 5.0,
    ) -> None:
        self.drone = drone
        self.gate = gate
        self.state = state
        self.endpoint = endpoint
        self.takeoff_settle_time = takeoff_settle_time
        self.land_grace_period = land_grace_period
        self.stop_result: Optional[FollowMeResult] = None
        self.land_result: Optional[ActionResult] = None

    async def prepare(self) -> None:
        """Connect to the vehicle and wait until it is ready for commands."""
        logger.info(f"Connecting to vehicle at {self.endpoint}")
        result = await self.drone.connect(self.endpoint)
        if not result.is_success:
            raise ConnectivityFailure("Connection failed", result)

        result = await self.gate.wait_until_ready(
            on_link_up=lambda: self.state.trigger("connect")
        )
        if not result.is_success:
            raise ConnectivityFailure("Vehicle not ready", result)

        self.state.trigger("ready")

    async def arm(self) -> None:
        result = await self.drone.arm()
        if not result.is_success:
            raise CommandFailure("Arming failed", result)

        self.state.trigger("arm")
        logger.info("Armed")

    async def takeoff(self) -> None:
        result = await self.drone.takeoff()
        if not result.is_success:
            raise CommandFailure("Takeoff failed", result)

        self.state.trigger("takeoff")
        logger.info("In air...")
        await asyncio.sleep(self.takeoff_settle_time)

    async def start_following(self) -> None:
        result = await self.drone.start_follow_me()
        if not result.is_success:
            raise CommandFailure("Failed to start FollowMe mode", result)

        self.state.trigger("follow")
        logger.info("FollowMe started")

    async def stop_and_land(self) -> List[str]:
        """Stop Follow-Me (if it was started) and land; returns failures seen."""
        failures: List[str] = []
        was_following = self.state.get_state() == SessionState.FOLLOWING
        self.state.trigger("stop")

        if was_following:
            try:
                self.stop_result = await self.drone.stop_follow_me()
                stop_error = self.stop_result.description
            except Exception as e:
                self.stop_result = FollowMeResult.UNKNOWN
                stop_error = str(e)

            if not self.stop_result.is_success:
                failure = f"Failed to stop FollowMe mode: {stop_error}"
                logger.warning(failure)
                failures.append(failure)

        # land is issued whatever happened to the stop command
        try:
            self.land_result = await self.drone.land()
            land_error = self.land_result.description
        except Exception as e:
            self.land_result = ActionResult.UNKNOWN
            land_error = str(e)

        if not self.land_result.is_success:
            failure = f"Landing failed: {land_error}"
            logger.error(failure)
            failures.append(failure)
        else:
            logger.info("Landing")

        # relies on auto-disarm, keep watching telemetry for a while
        await asyncio.sleep(self.land_grace_period)
        self.state.trigger("land")
        logger.info("Finished...")

        return failures
