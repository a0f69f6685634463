from dependency_injector import containers, providers

from followme.config import Config
from followme.coordinator import SessionCoordinator
from followme.core.drone_controller import MavsdkController
from followme.core.flight_mode_observer import FlightModeObserver
from followme.core.location_pipeline import LocationUpdatePipeline
from followme.core.mission_sequencer import MissionSequencer
from followme.core.readiness_gate import ReadinessGate
from followme.core.state_machine import StateMachine
from followme.core.target_location_cache import TargetLocationCache
from followme.sources.location_source import FakeLocationProvider


class ApplicationContainer(containers.DeclarativeContainer):
    event_loop = providers.Dependency()
    config_path = providers.Dependency()

    config = providers.Singleton(Config, config_file=config_path)

    drone = providers.Singleton(MavsdkController)

    state_machine = providers.Singleton(StateMachine)

    target_cache = providers.Singleton(TargetLocationCache)

    readiness_gate = providers.Singleton(
        ReadinessGate,
        drone=drone,
        poll_interval=config.provided.readiness_poll_interval,
        timeout=config.provided.readiness_timeout,
    )

    sequencer = providers.Singleton(
        MissionSequencer,
        drone=drone,
        gate=readiness_gate,
        state=state_machine,
        endpoint=config.provided.endpoint,
        takeoff_settle_time=config.provided.takeoff_settle_time,
        land_grace_period=config.provided.land_grace_period,
    )

    pipeline = providers.Singleton(
        LocationUpdatePipeline,
        cache=target_cache,
        drone=drone,
    )

    observer = providers.Singleton(
        FlightModeObserver,
        drone=drone,
        cache=target_cache,
    )

    location_source = providers.Singleton(
        FakeLocationProvider,
        start_latitude=config.provided.fake_location_start_lat,
        start_longitude=config.provided.fake_location_start_lon,
        step_deg=config.provided.fake_location_step_deg,
        interval=config.provided.fake_location_interval,
        count=config.provided.fake_location_count,
    )

    coordinator = providers.Singleton(
        SessionCoordinator,
        sequencer=sequencer,
        state=state_machine,
        pipeline=pipeline,
        observer=observer,
        source=location_source,
        loop=event_loop,
    )
