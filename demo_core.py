#!/usr/bin/env python3
"""
Create 2 Driver Core Demo - Simple example application.

Drives the simulated robot around a square, then drops the sensor
stream to show the watchdog bringing it back.
"""

import asyncio
import logging
import math
import sys

from core.sinks import LoggingOdometrySink
from core.supervisor import Supervisor
from core.transport import MockRobotLink
from core.types import OdometryConfig, SupervisorConfig, WheelKinematicsConfig
from input import MockInput


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stdout
)

logger = logging.getLogger(__name__)


async def run_demo():
    """Run a simple demo with mock components"""

    logger.info("=" * 60)
    logger.info("Create 2 Driver Core Demo")
    logger.info("=" * 60)

    kinematics = WheelKinematicsConfig()
    supervisor_config = SupervisorConfig(cycle_hz=50.0)

    link = MockRobotLink(kinematics=kinematics)
    intents = MockInput()
    intents.load_script("square", cycle_hz=supervisor_config.cycle_hz)
    sink = LoggingOdometrySink(log_interval=1.0)

    supervisor = Supervisor(
        link=link,
        intents=intents,
        sink=sink,
        kinematics=kinematics,
        odometry_config=OdometryConfig(max_update_hz=100.0),
        config=supervisor_config,
    )

    logger.info("Starting supervisor...")
    supervisor_task = asyncio.create_task(supervisor.run())

    logger.info("Driving a 0.5 m square...")
    while not intents.exhausted:
        await asyncio.sleep(0.2)

    pose = supervisor.pose
    logger.info(
        f"Square done: x={pose.x:+.3f} y={pose.y:+.3f} "
        f"theta={math.degrees(pose.theta):.1f} deg (ideal: back at the origin)"
    )

    logger.info("Dropping the sensor stream; expect a re-init within 5 s")
    link.drop_stream()
    reinit_before = supervisor.reinit_count
    while supervisor.reinit_count == reinit_before:
        await asyncio.sleep(0.2)
    logger.info(f"Re-initialized, stream running again: {link.is_streaming}")

    logger.info(f"Watchdog stops issued: {supervisor.watchdog_stop_count}")
    logger.info(f"Display shows: {link.display!r}")

    supervisor.stop()
    await supervisor_task

    logger.info(f"Robot mode after shutdown: {link.mode.name}")
    logger.info("=" * 60)
    logger.info("Demo finished successfully!")
    logger.info("=" * 60)


def main():
    """Main entry point"""
    try:
        asyncio.run(run_demo())
    except KeyboardInterrupt:
        logger.info("\nDemo interrupted by user")
    except Exception as e:
        logger.error(f"Demo failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
