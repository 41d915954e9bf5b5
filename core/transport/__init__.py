"""
Mock Transport - Simulated Create 2 for testing without hardware.

Implements the RobotLink protocol in-process: OI modes, the 500 mm/s wheel
speed clamp, wrapping 16-bit encoder counters driven by the commanded wheel
speeds, a slowly draining battery and the digit display.
"""

import logging
import math
import time
from typing import Callable, List, Optional

from core.display import BLANK_DISPLAY, display_text
from core.interfaces import SensorCallback
from core.types import (
    DEVICE_MAX_WHEEL_SPEED_MM_S,
    EncoderSample,
    ModeCommand,
    RobotMode,
    WheelKinematicsConfig,
    WheelSpeedCommand,
)


logger = logging.getLogger(__name__)

DRIVING_MODES = (RobotMode.SAFE, RobotMode.FULL)


def wrap_int16(value: float) -> int:
    """Raw 16-bit counter reading for an unwrapped count"""
    return ((math.floor(value) + 32768) % 65536) - 32768


class MockRobotLink:
    """
    Mock robot link for testing.

    Records everything the driver sends and streams simulated sensor
    frames from spin_once().
    """

    def __init__(
        self,
        kinematics: Optional[WheelKinematicsConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        frame_interval: float = 0.015,
        start_counts: tuple[int, int] = (0, 0),
        battery_capacity_mah: int = 2696,
        battery_charge_mah: int = 2400,
    ) -> None:
        """
        Initialize mock link.

        Args:
            kinematics: Geometry used to turn wheel speed into counts
            clock: Time source for the simulation
            frame_interval: Seconds between streamed sensor frames
            start_counts: Initial raw left/right counters
            battery_capacity_mah: Reported battery capacity
            battery_charge_mah: Initial battery charge
        """
        self._kinematics = kinematics or WheelKinematicsConfig()
        self._clock = clock
        self._frame_interval = frame_interval

        self._open = True
        self._mode = RobotMode.OFF
        self._callback: Optional[SensorCallback] = None
        self._streaming = False
        self._last_sim_time: Optional[float] = None
        self._last_frame_time: Optional[float] = None

        self._left_counts = float(start_counts[0])
        self._right_counts = float(start_counts[1])
        self._wheel_speeds = WheelSpeedCommand.stop()

        self._battery_capacity = battery_capacity_mah
        self._battery_charge = float(battery_charge_mah)
        self._current_ma = 0

        self._display = BLANK_DISPLAY

        # Recorded traffic (for testing)
        self.commands: List[WheelSpeedCommand] = []
        self.mode_requests: List[ModeCommand] = []
        self.display_history: List[str] = []
        self.subscribe_count = 0
        self.frame_count = 0

    async def send_wheel_speeds(self, command: WheelSpeedCommand) -> bool:
        """Record command; wheels only move in SAFE or FULL"""
        if not self._open:
            logger.warning("[MOCK] Cannot send wheel speeds - link closed")
            return False

        self.commands.append(command)
        clamped = command.clamped(DEVICE_MAX_WHEEL_SPEED_MM_S)

        if self._mode in DRIVING_MODES:
            self._wheel_speeds = clamped
        else:
            logger.debug(f"[MOCK] Ignoring drive in {self._mode.name} mode")
            self._wheel_speeds = WheelSpeedCommand.stop()

        logger.debug(
            f"[MOCK] Drive #{len(self.commands)}: "
            f"L={clamped.left_mm_s:+4d} R={clamped.right_mm_s:+4d} mm/s"
        )
        return True

    async def request_mode(self, command: ModeCommand) -> None:
        """Apply an OI mode transition"""
        self.mode_requests.append(command)
        if not self._open:
            logger.warning(f"[MOCK] Ignoring {command.value} - link closed")
            return

        if command == ModeCommand.START:
            self._set_mode(RobotMode.PASSIVE)
        elif command in (ModeCommand.SAFE, ModeCommand.FULL):
            if self._mode == RobotMode.OFF:
                logger.warning(f"[MOCK] {command.value} ignored, OI not started")
                return
            self._set_mode(RobotMode.SAFE if command == ModeCommand.SAFE else RobotMode.FULL)
        elif command == ModeCommand.RESET:
            self._set_mode(RobotMode.OFF)
            self._streaming = False
            self._left_counts = 0.0
            self._right_counts = 0.0
        else:
            # stop, powerdown, exit all leave the OI
            self._set_mode(RobotMode.OFF)
            self._streaming = False

    async def subscribe_sensor_stream(self, callback: SensorCallback) -> None:
        """Route frames to callback and (re)start streaming"""
        self._callback = callback
        self._streaming = self._open
        self._last_frame_time = None
        self.subscribe_count += 1
        logger.info("[MOCK] Sensor stream started")

    async def set_display_text(self, text: str) -> None:
        self._display = display_text(text)
        self.display_history.append(self._display)

    async def spin_once(self) -> None:
        """Advance the simulation and stream a frame when one is due"""
        now = self._clock()
        self._advance(now)

        if not (self._open and self._streaming and self._callback is not None):
            return
        if self._last_frame_time is not None and now - self._last_frame_time < self._frame_interval:
            return

        self._last_frame_time = now
        self.frame_count += 1
        await self._callback(self._build_sample(now))

    async def close(self) -> None:
        logger.info("[MOCK] Closing link")
        self._open = False
        self._streaming = False
        self._wheel_speeds = WheelSpeedCommand.stop()

    def drop_stream(self) -> None:
        """Simulate the robot silently ceasing to stream"""
        logger.info("[MOCK] Sensor stream dropped")
        self._streaming = False

    def _set_mode(self, mode: RobotMode) -> None:
        if mode != self._mode:
            logger.info(f"[MOCK] Mode {self._mode.name} -> {mode.name}")
        self._mode = mode
        if mode not in DRIVING_MODES:
            self._wheel_speeds = WheelSpeedCommand.stop()

    def _advance(self, now: float) -> None:
        """Integrate wheel travel and battery drain up to now"""
        if self._last_sim_time is None:
            self._last_sim_time = now
            return

        dt = max(0.0, now - self._last_sim_time)
        self._last_sim_time = now

        mm_per_count = self._kinematics.mm_per_count
        self._left_counts += self._wheel_speeds.left_mm_s * dt / mm_per_count
        self._right_counts += self._wheel_speeds.right_mm_s * dt / mm_per_count

        # Rough draw: idle electronics plus motors
        load = abs(self._wheel_speeds.left_mm_s) + abs(self._wheel_speeds.right_mm_s)
        self._current_ma = -(150 + int(load * 1.5))
        self._battery_charge = max(0.0, self._battery_charge + self._current_ma * dt / 3600.0)

    def _build_sample(self, now: float) -> EncoderSample:
        return EncoderSample(
            left_count=wrap_int16(self._left_counts),
            right_count=wrap_int16(self._right_counts),
            robot_mode=self._mode,
            timestamp=now,
            voltage_mv=14800,
            current_ma=self._current_ma,
            temperature_c=28,
            battery_charge_mah=int(self._battery_charge),
            battery_capacity_mah=self._battery_capacity,
        )

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def mode(self) -> RobotMode:
        """Current simulated OI mode"""
        return self._mode

    @property
    def wheel_speeds(self) -> WheelSpeedCommand:
        """Speeds the simulated wheels are actually turning at"""
        return self._wheel_speeds

    @property
    def display(self) -> str:
        return self._display

    @property
    def is_streaming(self) -> bool:
        return self._streaming

    @property
    def last_command(self) -> Optional[WheelSpeedCommand]:
        """Get last command sent (for testing)"""
        return self.commands[-1] if self.commands else None

    @property
    def command_count(self) -> int:
        """Get total commands sent (for testing)"""
        return len(self.commands)
