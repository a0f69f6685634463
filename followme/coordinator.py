import asyncio
import signal
from typing import List, Optional

from loguru import logger

from followme.core.flight_mode_observer import FlightModeObserver
from followme.core.location_pipeline import LocationUpdatePipeline
from followme.core.mission_sequencer import MissionSequencer
from followme.core.state_machine import StateMachine
from followme.enums.session_state import SessionState
from followme.exceptions.session_exceptions import SessionAbortException
from followme.models.session_outcome import SessionOutcome
from followme.models.target_location import TargetLocation
from followme.sources.location_source import LocationSource

_CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SessionCoordinator:
    def __init__(
        self,
        sequencer: MissionSequencer,
        state: StateMachine,
        pipeline: LocationUpdatePipeline,
        observer: FlightModeObserver,
        source: LocationSource,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.sequencer = sequencer
        self.state = state
        self.pipeline = pipeline
        self.observer = observer
        self.source = source
        self.loop = loop
        self.cancelled = False
        self.vehicle_target: Optional[TargetLocation] = None
        self._cancel_event = asyncio.Event()
        self._started = False

    def cancel(self) -> None:
        """Request the session to end; safe to call from a signal handler."""
        if self.cancelled:
            return

        logger.info("Cancellation requested")
        self.cancelled = True
        self._cancel_event.set()

    def install_signal_handlers(self) -> None:
        for sig in _CANCEL_SIGNALS:
            self.loop.add_signal_handler(sig, self.cancel)

    def remove_signal_handlers(self) -> None:
        for sig in _CANCEL_SIGNALS:
            self.loop.remove_signal_handler(sig)

    async def run(self) -> SessionOutcome:
        """Run one session from connection to landing."""
        if self._started:
            raise RuntimeError("Session already ran")
        self._started = True

        failure: Optional[SessionAbortException] = None
        error: Optional[Exception] = None
        following = False
        stopping_failures: List[str] = []
        try:
            try:
                following = await self._launch()
            except SessionAbortException as e:
                failure = e
                logger.error(f"{e.reason}: {e.result.description}")
            except Exception as e:
                error = e
                logger.error(f"Unexpected error during launch: {e}")

            if following:
                try:
                    await self._follow()
                except Exception as e:
                    error = e
                    logger.error(f"Unexpected error while following: {e}")

            # once Follow-Me is active the vehicle is always brought down
            if self.state.get_state() == SessionState.FOLLOWING or (
                failure is None and error is None and self.state.is_airborne()
            ):
                stopping_failures = await self._shutdown()
            elif failure is None and error is None:
                logger.warning(
                    f"Session cancelled in state {self.state.get_state().name}, not airborne"
                )
        finally:
            await self.observer.stop()

        return self._outcome(failure, error, stopping_failures)

    async def _launch(self) -> bool:
        """Drive the vehicle up to Follow-Me unless cancelled first.

        Waiting for the vehicle is interrupted by cancellation; a command
        already sent runs to completion and cancellation is honored before
        the next one.
        """
        if not await self._prepare():
            return False

        self.observer.start()
        for step in (
            self.sequencer.arm,
            self.sequencer.takeoff,
            self.sequencer.start_following,
        ):
            if self.cancelled:
                return False
            await step()

        return True

    async def _prepare(self) -> bool:
        prepare = asyncio.create_task(self.sequencer.prepare())
        cancel_wait = asyncio.create_task(self._cancel_event.wait())

        done, _ = await asyncio.wait(
            {prepare, cancel_wait}, return_when=asyncio.FIRST_COMPLETED
        )

        if prepare in done:
            cancel_wait.cancel()
            prepare.result()
            return True

        prepare.cancel()
        try:
            await prepare
        except asyncio.CancelledError:
            pass
        return False

    async def _follow(self) -> None:
        """Stream target locations until the source ends or cancel is requested."""
        self.pipeline.start()
        self.source.request_location_updates(self.pipeline.on_location)
        logger.info("Following target")

        exhausted = asyncio.create_task(self.source.wait_until_exhausted())
        cancel_wait = asyncio.create_task(self._cancel_event.wait())
        _, pending = await asyncio.wait(
            {exhausted, cancel_wait}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()

    async def _shutdown(self) -> List[str]:
        """Release the source, flush forwards, then stop Follow-Me and land."""
        try:
            self.source.release()
            self.pipeline.stop()
            await self.pipeline.drain()
            self.vehicle_target = await self.sequencer.drone.get_last_location()
        except Exception as e:
            logger.error(f"Releasing location updates failed: {e}")

        stats = self.pipeline.stats
        logger.debug(f"Target locations accepted: {stats.accepted}")
        logger.debug(f"Target locations dropped: {stats.dropped}")
        logger.debug(f"Forwarding failures: {stats.forwarding_failures}")
        if stats.last_forwarding_failure:
            logger.warning(
                f"Last forwarding failure: {stats.last_forwarding_failure}"
            )
        if self.vehicle_target is not None:
            logger.debug(
                f"Vehicle last target: {self.vehicle_target.latitude_deg}, "
                f"{self.vehicle_target.longitude_deg} degrees"
            )

        return await self.sequencer.stop_and_land()

    def _outcome(
        self,
        failure: Optional[SessionAbortException],
        error: Optional[Exception],
        stopping_failures: List[str],
    ) -> SessionOutcome:
        outcome = SessionOutcome(
            final_state=self.state.get_state(),
            success=False,
            cancelled=self.cancelled,
            stopping_failures=stopping_failures,
            pipeline=self.pipeline.stats.model_copy(),
            flight_mode_records=self.observer.record_count,
            last_target_location=self.pipeline.cache.get(),
            vehicle_target_location=self.vehicle_target,
        )

        land_result = self.sequencer.land_result
        if failure is not None:
            outcome.failure_reason = f"{failure.reason}: {failure.result.description}"
            outcome.failure_result = failure.result.name
        elif error is not None:
            outcome.failure_reason = f"Unexpected error: {error}"
        elif land_result is None:
            outcome.failure_reason = "Session cancelled before takeoff"
        elif not land_result.is_success:
            outcome.failure_reason = f"Landing failed: {land_result.description}"
            outcome.failure_result = land_result.name
        else:
            outcome.success = True

        return outcome
