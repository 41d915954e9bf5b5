#!/usr/bin/env python3
"""
create2-driver Launcher - Easy start for the robot driver

Usage:
    python launch.py --mock                  # Simulated robot, scripted drive
    python launch.py --mock --script spin    # Pick a different script
    python launch.py --mock --gamepad        # Simulated robot, gamepad teleop
    python launch.py --demo                  # Run core demo
"""

import argparse
import asyncio
import logging
import signal
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure logging"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )


def launch_driver(env_file: str = None, use_gamepad: bool = False, script: str = "forward") -> None:
    """Launch the driver core against the simulated robot"""
    from create2_config import get_config
    from core.sinks import LoggingOdometrySink
    from core.supervisor import Supervisor
    from core.transport import MockRobotLink

    config = get_config(env_file=env_file)
    is_valid, errors = config.validate()
    if not is_valid:
        print("ERROR: Invalid configuration:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)

    kinematics = config.kinematics()
    supervisor_config = config.supervisor_config()

    from input import create_intent_provider

    try:
        intents = create_intent_provider(use_gamepad, script, cycle_hz=supervisor_config.cycle_hz)
    except ImportError:
        print("\nERROR: pygame not installed")
        print("Install with: pip install 'create2-driver[gamepad]'")
        sys.exit(1)
    if use_gamepad:
        print("Hold A button as deadman switch, use left stick to drive")

    print("Using MOCK robot link (no actual hardware)")
    link = MockRobotLink(kinematics=kinematics)

    supervisor = Supervisor(
        link=link,
        intents=intents,
        sink=LoggingOdometrySink(),
        kinematics=kinematics,
        odometry_config=config.odometry_config(),
        translator_config=config.translator_config(),
        config=supervisor_config,
    )

    async def run():
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, supervisor.stop)
            except NotImplementedError:
                # Windows event loops have no signal handlers; Ctrl+C still raises
                pass
        await supervisor.run()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print("\nShutting down...")
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


def launch_demo() -> None:
    """Launch core architecture demo"""
    print("Starting core architecture demo...")
    from demo_core import main
    main()


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="create2-driver - Differential drive robot driver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python launch.py --mock                 Scripted drive on the simulator
  python launch.py --mock --gamepad       Teleop the simulator with a gamepad
  python launch.py --demo                 Run core demo
        """
    )

    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use the simulated robot link (no hardware needed)"
    )
    parser.add_argument(
        "--gamepad",
        action="store_true",
        help="Use gamepad teleop (requires pygame)"
    )
    parser.add_argument(
        "--script",
        default="forward",
        choices=["forward", "spin", "square", "client_lost"],
        help="Scripted drive to play when not using a gamepad"
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Run core architecture demo"
    )
    parser.add_argument(
        "--env-file",
        help="Path to .env file"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level"
    )

    args = parser.parse_args()

    setup_logging(args.log_level)

    if args.demo:
        launch_demo()
    elif args.mock:
        launch_driver(env_file=args.env_file, use_gamepad=args.gamepad, script=args.script)
    else:
        # The serial transport is provided by the robot integration, not this package
        print("ERROR: No hardware transport bundled")
        print("Use --mock for the simulated robot, or --demo")
        sys.exit(1)


if __name__ == "__main__":
    main()
