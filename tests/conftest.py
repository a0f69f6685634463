import asyncio
from unittest.mock import AsyncMock

import pytest

from followme.core.flight_mode_observer import FlightModeObserver
from followme.core.location_pipeline import LocationUpdatePipeline
from followme.core.mission_sequencer import MissionSequencer
from followme.core.readiness_gate import ReadinessGate
from followme.core.state_machine import StateMachine
from followme.core.target_location_cache import TargetLocationCache
from followme.enums.results import ActionResult, ConnectionResult, FollowMeResult


class FakeDrone:
    """Stands in for MavsdkController and records every command it receives."""

    def __init__(self):
        self.results = {
            "connect": ConnectionResult.SUCCESS,
            "arm": ActionResult.SUCCESS,
            "takeoff": ActionResult.SUCCESS,
            "land": ActionResult.SUCCESS,
            "start_follow_me": FollowMeResult.SUCCESS,
            "stop_follow_me": FollowMeResult.SUCCESS,
            "set_target_location": FollowMeResult.SUCCESS,
        }
        self.command_log = []
        for name in self.results:
            setattr(self, name, AsyncMock(side_effect=self._command(name)))

        self.is_connected = AsyncMock(return_value=True)
        self.health_all_ok = AsyncMock(return_value=True)
        self.get_last_location = AsyncMock(return_value=None)
        self.flight_mode_callback = None

    def _command(self, name):
        async def run(*args):
            self.command_log.append(name)
            return self.results[name]

        return run

    def subscribe_flight_mode(self, callback):
        self.flight_mode_callback = callback
        return asyncio.create_task(asyncio.sleep(3600))

    def vehicle_commands(self):
        return [name for name in self.command_log if name != "set_target_location"]


@pytest.fixture
def drone():
    return FakeDrone()


@pytest.fixture
def cache():
    return TargetLocationCache()


@pytest.fixture
def state():
    return StateMachine()


@pytest.fixture
def gate(drone):
    return ReadinessGate(drone, poll_interval=0.01)


@pytest.fixture
def sequencer(drone, gate, state):
    return MissionSequencer(
        drone,
        gate,
        state,
        endpoint="udpin://0.0.0.0:14540",
        takeoff_settle_time=0,
        land_grace_period=0,
    )


@pytest.fixture
def pipeline(cache, drone):
    return LocationUpdatePipeline(cache, drone)


@pytest.fixture
def observer(drone, cache):
    return FlightModeObserver(drone, cache)
