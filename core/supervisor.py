"""
Supervisor - Event dispatch, watchdog actions and lifecycle.

The Supervisor is the single driver instance. It:
- Runs the fixed-rate cycle (spin the link, poll intents, check watchdog)
- Feeds sensor frames through the decoder and odometry integrator
- Feeds drive intents through the mapper, elevating PASSIVE to SAFE first
- Re-initializes the robot when the sensor stream goes quiet
- Stops the wheels when drive intents go quiet
- Leaves the robot in a non-driving state on shutdown

Everything runs on one asyncio task; handlers never run concurrently.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from .display import BLANK_DISPLAY, battery_display_text, battery_percent, display_text
from .encoder import EncoderDecoder
from .interfaces import IntentProvider, OdometrySink, RobotLink
from .mapper import DriveMapper
from .modes import parse_mode_token
from .odometry import OdometryIntegrator
from .types import (
    BodyVelocityEstimate,
    DriveIntent,
    EncoderSample,
    LivenessState,
    ModeCommand,
    OdometryConfig,
    Pose2D,
    RobotMode,
    SupervisorConfig,
    TranslatorConfig,
    WheelKinematicsConfig,
    WheelSpeedCommand,
)
from .watchdog import LivenessWatchdog


logger = logging.getLogger(__name__)


class Supervisor:
    """
    Main control loop and safety supervisor for one robot.
    """

    def __init__(
        self,
        link: RobotLink,
        intents: IntentProvider,
        sink: OdometrySink,
        kinematics: WheelKinematicsConfig,
        odometry_config: Optional[OdometryConfig] = None,
        translator_config: Optional[TranslatorConfig] = None,
        config: Optional[SupervisorConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize supervisor.

        Args:
            link: Robot transport capabilities
            intents: Source of drive intents and mode tokens
            sink: Consumer of pose/velocity updates
            kinematics: Wheel geometry
            odometry_config: Update-rate floor and velocity strategy
            translator_config: Optional software speed cap
            config: Cycle rate, timeouts, display banner, debug trace
            clock: Monotonic time source (injectable for simulated time)
            log: Logger to use instead of the module logger
        """
        self.link = link
        self.intents = intents
        self.sink = sink
        self.config = config or SupervisorConfig()
        self._clock = clock
        self._log = log or logger

        self.decoder = EncoderDecoder()
        self.odometry = OdometryIntegrator(kinematics, odometry_config, clock)
        self.mapper = DriveMapper(kinematics, translator_config)
        self.watchdog = LivenessWatchdog(
            sensor_timeout=self.config.sensor_timeout,
            command_timeout=self.config.command_timeout,
            now=clock(),
        )

        self._robot_mode = RobotMode.OFF
        self._battery_percent: Optional[int] = None
        self._running = False
        self._shut_down = False

        self._reinit_count = 0
        self._watchdog_stop_count = 0

    async def start(self) -> None:
        """Start the intent provider and bring the robot up"""
        await self.intents.start()
        await self._reinitialize()

    async def run(self) -> None:
        """
        Main control loop - runs until stop() is called.

        shutdown() always runs before this returns.
        """
        self._log.info("Supervisor starting")
        self._running = True

        try:
            await self.start()

            while self._running:
                cycle_start = self._clock()
                try:
                    await self.cycle()
                except Exception as e:
                    self._log.error(f"Error in supervisor cycle: {e}", exc_info=True)
                    await self._enter_failsafe()

                elapsed = self._clock() - cycle_start
                await asyncio.sleep(max(0.0, self.config.loop_interval - elapsed))

        finally:
            self._log.info("Supervisor stopping")
            await self.shutdown()

    def stop(self) -> None:
        """Ask run() to finish after the current cycle"""
        self._running = False

    async def cycle(self) -> None:
        """
        Single iteration of the fixed-rate loop.

        The watchdog is evaluated even when a handler raises; the error
        still propagates to the caller afterwards.
        """
        try:
            await self.link.spin_once()

            intent = await self.intents.read_drive_intent()
            if intent is not None:
                await self.handle_drive_intent(intent)

            token = await self.intents.read_mode_token()
            if token is not None:
                await self.handle_mode_token(token)
        finally:
            await self._check_watchdog()

    async def _check_watchdog(self) -> None:
        verdict = self.watchdog.check(self._clock())
        if verdict.reinitialize:
            await self._reinitialize()
        if verdict.stop:
            self._watchdog_stop_count += 1
            await self._send(self.mapper.stop())

    async def handle_sensor_sample(self, sample: EncoderSample) -> None:
        """
        Process one sensor frame: odometry, liveness, display.

        Args:
            sample: Frame delivered by the link
        """
        now = self._clock()
        self.watchdog.note_sensor_update(now)
        self._robot_mode = sample.robot_mode

        left_delta, right_delta = self.decoder.decode(sample)
        velocity = self.odometry.update(left_delta, right_delta, now)
        pose = self.odometry.pose

        if self.config.debug_trace:
            self._trace(sample, left_delta, right_delta, pose)

        await self.sink.publish(pose, velocity, now)
        await self._update_battery_display(sample)

    async def handle_drive_intent(self, intent: DriveIntent) -> bool:
        """
        Translate and send a drive intent.

        Args:
            intent: Newest intent from the provider

        Returns:
            True if the link accepted the command
        """
        command = self.mapper.translate(intent)
        sent = await self._send(command)

        # Only a command that reached the link counts as a live client
        if sent:
            self.watchdog.note_drive_intent(self._clock())
        return sent

    async def handle_mode_token(self, token: str) -> bool:
        """
        Forward a mode token to the link.

        Returns:
            True if the token was recognized
        """
        command = parse_mode_token(token)
        if command is None:
            return False

        self._log.info(f"Mode command: {command.value}")
        await self.link.request_mode(command)
        return True

    async def shutdown(self) -> None:
        """
        Leave the robot stopped and out of a driving mode.

        Safe to call more than once.
        """
        if self._shut_down:
            return
        self._shut_down = True
        self._running = False

        # Each step runs even if an earlier one failed
        if self.link.is_open:
            await self._teardown_step("stop wheels", self.link.send_wheel_speeds(WheelSpeedCommand.stop()))
            await self._teardown_step("blank display", self.link.set_display_text(BLANK_DISPLAY))
            await self._teardown_step("leave OI", self.link.request_mode(ModeCommand.STOP))
            await self._teardown_step("close link", self.link.close())

        await self._teardown_step("stop intents", self.intents.stop())

    async def _teardown_step(self, name: str, step: Awaitable[Any]) -> None:
        try:
            await step
        except Exception as e:
            self._log.error(f"Error during shutdown ({name}): {e}", exc_info=True)

    async def _enter_failsafe(self) -> None:
        """Stop the wheels after a failed cycle"""
        try:
            if self.link.is_open:
                self._log.warning("Cycle failed, sending stop")
                await self.link.send_wheel_speeds(WheelSpeedCommand.stop())
        except Exception as e:
            self._log.error(f"Failsafe stop failed: {e}", exc_info=True)

    async def _reinitialize(self) -> None:
        """Full bring-up: start OI, SAFE mode, sensor stream, display"""
        self._log.info("Initializing robot")
        self._reinit_count += 1

        await self.link.request_mode(ModeCommand.START)
        await self.link.request_mode(ModeCommand.SAFE)

        # A restarted stream must seed the counters again
        self.decoder.reset()
        self.odometry.reset()
        await self.link.subscribe_sensor_stream(self.handle_sensor_sample)

        await self.link.set_display_text(display_text(self.config.display_banner))
        self._battery_percent = None

        self.watchdog.note_sensor_update(self._clock())

    async def _send(self, command: WheelSpeedCommand) -> bool:
        """Send wheel speeds, elevating the mode first if needed"""
        if self.mapper.needs_mode_elevation(command, self._robot_mode):
            self._log.info("Robot is passive, requesting SAFE mode before driving")
            await self.link.request_mode(ModeCommand.SAFE)

        sent = await self.link.send_wheel_speeds(command)
        if not sent:
            self._log.warning(f"Failed to send wheel speeds L={command.left_mm_s} R={command.right_mm_s}")
        return sent

    async def _update_battery_display(self, sample: EncoderSample) -> None:
        percent = battery_percent(sample.battery_charge_mah, sample.battery_capacity_mah)
        if percent is None or percent == self._battery_percent:
            return
        self._battery_percent = percent
        await self.link.set_display_text(battery_display_text(percent))

    def _trace(self, sample: EncoderSample, left_delta: int, right_delta: int, pose: Pose2D) -> None:
        self._log.debug(
            f"Mode={sample.robot_mode.name} V={sample.voltage_mv} mV I={sample.current_ma} mA "
            f"T={sample.temperature_c} degC Charge={sample.battery_charge_mah}/"
            f"{sample.battery_capacity_mah} mAh"
        )
        self._log.debug(
            f"Encoders L={sample.left_count} R={sample.right_count} "
            f"dL={left_delta} dR={right_delta}"
        )
        self._log.debug(f"Pose ({pose.x:.4f}, {pose.y:.4f}, {pose.theta:.4f})")

    # Public properties for monitoring

    @property
    def pose(self) -> Pose2D:
        """Copy of the current pose"""
        return self.odometry.pose

    @property
    def velocity(self) -> BodyVelocityEstimate:
        return self.odometry.velocity

    @property
    def robot_mode(self) -> RobotMode:
        """Mode reported by the last sensor frame"""
        return self._robot_mode

    @property
    def liveness(self) -> LivenessState:
        return self.watchdog.state

    @property
    def reinit_count(self) -> int:
        """Initializations run so far, including the first one"""
        return self._reinit_count

    @property
    def watchdog_stop_count(self) -> int:
        """Stops issued because drive intents went quiet"""
        return self._watchdog_stop_count

    @property
    def is_running(self) -> bool:
        return self._running
