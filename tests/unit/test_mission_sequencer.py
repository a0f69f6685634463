import pytest
from loguru import logger

from followme.enums.results import ActionResult, ConnectionResult, FollowMeResult
from followme.enums.session_state import SessionState
from followme.exceptions.session_exceptions import CommandFailure, ConnectivityFailure


async def _fly_to_following(sequencer):
    await sequencer.prepare()
    await sequencer.arm()
    await sequencer.takeoff()
    await sequencer.start_following()


@pytest.mark.asyncio
async def test_full_sequence(sequencer, drone, state):
    await _fly_to_following(sequencer)
    assert state.get_state() == SessionState.FOLLOWING

    failures = await sequencer.stop_and_land()

    assert failures == []
    assert state.get_state() == SessionState.LANDED
    assert drone.vehicle_commands() == [
        "connect",
        "arm",
        "takeoff",
        "start_follow_me",
        "stop_follow_me",
        "land",
    ]
    drone.connect.assert_awaited_once_with("udpin://0.0.0.0:14540")


@pytest.mark.asyncio
async def test_prepare_enters_connected_then_ready(sequencer, drone, state):
    seen = []
    drone.health_all_ok.side_effect = lambda: seen.append(state.get_state()) or len(seen) > 1

    await sequencer.prepare()

    assert seen == [SessionState.CONNECTED, SessionState.CONNECTED]
    assert state.get_state() == SessionState.READY_FOR_ACTION


@pytest.mark.asyncio
async def test_connection_failure(sequencer, drone, state):
    drone.results["connect"] = ConnectionResult.CONNECTION_URL_INVALID

    with pytest.raises(ConnectivityFailure) as ctx:
        await sequencer.prepare()

    assert ctx.value.result == ConnectionResult.CONNECTION_URL_INVALID
    assert state.get_state() == SessionState.DISCONNECTED
    drone.is_connected.assert_not_awaited()


@pytest.mark.asyncio
async def test_readiness_timeout(sequencer, drone, gate, state):
    gate.timeout = 0.03
    drone.health_all_ok.return_value = False

    with pytest.raises(ConnectivityFailure) as ctx:
        await sequencer.prepare()

    assert ctx.value.result == ConnectionResult.TIMEOUT
    assert state.get_state() == SessionState.CONNECTED


@pytest.mark.asyncio
async def test_arm_failure_blocks_takeoff(sequencer, drone, state):
    drone.results["arm"] = ActionResult.COMMAND_DENIED
    await sequencer.prepare()

    with pytest.raises(CommandFailure) as ctx:
        await sequencer.arm()

    assert ctx.value.reason == "Arming failed"
    assert state.get_state() == SessionState.READY_FOR_ACTION
    drone.takeoff.assert_not_called()


@pytest.mark.asyncio
async def test_takeoff_denied_stays_armed(sequencer, drone, state):
    drone.results["takeoff"] = ActionResult.COMMAND_DENIED
    await sequencer.prepare()
    await sequencer.arm()

    with pytest.raises(CommandFailure) as ctx:
        await sequencer.takeoff()

    assert ctx.value.result == ActionResult.COMMAND_DENIED
    assert state.get_state() == SessionState.ARMED
    drone.start_follow_me.assert_not_called()


@pytest.mark.asyncio
async def test_follow_me_start_failure(sequencer, drone, state):
    drone.results["start_follow_me"] = FollowMeResult.NO_SYSTEM
    await sequencer.prepare()
    await sequencer.arm()
    await sequencer.takeoff()

    with pytest.raises(CommandFailure) as ctx:
        await sequencer.start_following()

    assert str(ctx.value) == "Failed to start FollowMe mode: No system connected"
    assert state.get_state() == SessionState.AIRBORNE


@pytest.mark.asyncio
async def test_stop_failure_still_lands(sequencer, drone, state):
    drone.results["stop_follow_me"] = FollowMeResult.COMMAND_DENIED
    await _fly_to_following(sequencer)

    failures = await sequencer.stop_and_land()

    assert drone.vehicle_commands()[-2:] == ["stop_follow_me", "land"]
    assert drone.stop_follow_me.await_count == 1
    assert drone.land.await_count == 1
    assert len(failures) == 1
    assert state.get_state() == SessionState.LANDED


@pytest.mark.asyncio
async def test_land_failure_recorded(sequencer, drone, state):
    drone.results["land"] = ActionResult.TIMEOUT
    await _fly_to_following(sequencer)

    failures = await sequencer.stop_and_land()

    assert failures == ["Landing failed: Timeout"]
    assert sequencer.land_result == ActionResult.TIMEOUT
    assert state.get_state() == SessionState.LANDED


@pytest.mark.asyncio
async def test_stop_from_airborne_skips_follow_me_stop(sequencer, drone, state):
    await sequencer.prepare()
    await sequencer.arm()
    await sequencer.takeoff()

    await sequencer.stop_and_land()

    drone.stop_follow_me.assert_not_called()
    drone.land.assert_awaited_once()
    assert state.get_state() == SessionState.LANDED


@pytest.mark.asyncio
async def test_stop_raising_still_lands(sequencer, drone, state):
    drone.stop_follow_me.side_effect = RuntimeError("grpc channel closed")
    await _fly_to_following(sequencer)

    failures = await sequencer.stop_and_land()

    drone.land.assert_awaited_once()
    assert failures == ["Failed to stop FollowMe mode: grpc channel closed"]
    assert sequencer.stop_result == FollowMeResult.UNKNOWN
    assert state.get_state() == SessionState.LANDED


@pytest.mark.asyncio
async def test_land_raising_is_recorded(sequencer, drone, state):
    drone.land.side_effect = RuntimeError("grpc channel closed")
    await _fly_to_following(sequencer)

    failures = await sequencer.stop_and_land()

    assert failures == ["Landing failed: grpc channel closed"]
    assert sequencer.land_result == ActionResult.UNKNOWN
    assert state.get_state() == SessionState.LANDED


@pytest.mark.asyncio
async def test_connect_attempt_logged_before_connecting(sequencer, drone):
    messages = []
    sink = logger.add(lambda message: messages.append(message.record["message"]))
    logged_at_connect = []

    async def connect(endpoint):
        logged_at_connect.extend(messages)
        return ConnectionResult.CONNECTION_URL_INVALID

    drone.connect.side_effect = connect
    try:
        with pytest.raises(ConnectivityFailure):
            await sequencer.prepare()
    finally:
        logger.remove(sink)

    assert "Connecting to vehicle at udpin://0.0.0.0:14540" in logged_at_connect
