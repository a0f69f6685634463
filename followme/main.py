import argparse
import asyncio
import sys
from typing import Optional

from loguru import logger

from followme.config import Config
from followme.containers import ApplicationContainer
from followme.coordinator import SessionCoordinator
from followme.exceptions.config_exceptions import ConfigException
from followme.models.session_outcome import SessionOutcome


def run_session(config_path: Optional[str] = None) -> SessionOutcome:
    """Run one Follow-Me session, blocking until it lands or is cancelled."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    try:
        container = ApplicationContainer(event_loop=loop, config_path=config_path)
        config: Config = container.config()
        if config.verbose:
            logger.remove()
            logger.add(sys.stdout, level="DEBUG")

        coordinator: SessionCoordinator = container.coordinator()
        coordinator.install_signal_handlers()
        try:
            return loop.run_until_complete(coordinator.run())
        finally:
            coordinator.remove_signal_handlers()
    finally:
        loop.close()


def main(config_path: Optional[str] = None) -> int:
    try:
        outcome = run_session(config_path)
    except ConfigException as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1

    for failure in outcome.stopping_failures:
        logger.warning(failure)

    if not outcome.success:
        logger.error(f"Session failed in state {outcome.final_state.name}: {outcome.failure_reason}")
        return 1

    logger.info(
        f"Session finished in state {outcome.final_state.name}, "
        f"{outcome.pipeline.accepted} target locations forwarded"
    )
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "config",
        help="The .config.env configuration file",
        type=str,
        default=None,
        nargs="?",
    )
    args = parser.parse_args()

    env_file: Optional[str] = args.config

    sys.exit(main(env_file))
