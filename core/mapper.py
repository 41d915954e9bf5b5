"""
DriveMapper - Transforms drive intents into per-wheel speed commands.

Differential drive kinematics:
- linear velocity adds equally to both wheels
- angular velocity adds to the right wheel and subtracts from the left,
  scaled by half the axle distance (positive turns left)

The mapper does not clamp to the hardware ceiling; the transport does.
An optional software cap scales both wheels together so the commanded
curvature is kept.
"""

import logging
import math
from typing import Optional

from .types import (
    DEVICE_MAX_WHEEL_SPEED_MM_S,
    DriveIntent,
    RobotMode,
    TranslatorConfig,
    WheelKinematicsConfig,
    WheelSpeedCommand,
)


logger = logging.getLogger(__name__)


class DriveMapper:
    """
    Converts DriveIntent into WheelSpeedCommand.
    """

    def __init__(self, kinematics: WheelKinematicsConfig, config: Optional[TranslatorConfig] = None) -> None:
        """
        Initialize mapper.

        Args:
            kinematics: Wheel geometry and mounting direction
            config: Optional software speed cap
        """
        self.kinematics = kinematics
        self.config = config or TranslatorConfig()
        self._last_command: Optional[WheelSpeedCommand] = None

    @property
    def last_command(self) -> Optional[WheelSpeedCommand]:
        return self._last_command

    def translate(self, intent: DriveIntent) -> WheelSpeedCommand:
        """
        Convert a velocity intent to wheel speeds.

        Args:
            intent: Desired linear (m/s) and angular (rad/s) velocity

        Returns:
            Wheel speeds in whole mm/s
        """
        left, right = self._differential_drive(intent.linear_velocity, intent.angular_velocity)

        if self.kinematics.backwards:
            # Rotated 180 degrees: wheels swap sides and spin the other way
            left, right = -right, -left

        if self.config.speed_cap_mm_s is not None:
            left, right = self._apply_cap(left, right, self.config.speed_cap_mm_s)

        command = WheelSpeedCommand(left_mm_s=self._to_mm_s(left), right_mm_s=self._to_mm_s(right))

        if max(abs(command.left_mm_s), abs(command.right_mm_s)) > DEVICE_MAX_WHEEL_SPEED_MM_S:
            logger.debug(
                f"Command L={command.left_mm_s} R={command.right_mm_s} exceeds "
                f"{DEVICE_MAX_WHEEL_SPEED_MM_S} mm/s, transport will clamp"
            )

        self._last_command = command
        return command

    def stop(self) -> WheelSpeedCommand:
        """Zero-velocity command through the normal translation path"""
        return self.translate(DriveIntent.halt())

    def reset(self) -> None:
        """Forget the last emitted command"""
        self._last_command = None

    @staticmethod
    def needs_mode_elevation(command: WheelSpeedCommand, mode: RobotMode) -> bool:
        """
        Check whether the robot must be switched to SAFE before sending.

        Drive commands are ignored in PASSIVE mode.
        """
        return mode == RobotMode.PASSIVE and not command.is_stop

    def _differential_drive(self, linear: float, angular: float) -> tuple[float, float]:
        """
        Wheel speeds in mm/s for a body velocity.

        Args:
            linear: Forward speed (m/s)
            angular: Yaw rate (rad/s)

        Returns:
            (left, right) in mm/s
        """
        half_axle_mm = self.kinematics.axle_distance_mm / 2.0
        left = linear * 1000.0 - half_axle_mm * angular
        right = linear * 1000.0 + half_axle_mm * angular
        return left, right

    @staticmethod
    def _apply_cap(left: float, right: float, cap: float) -> tuple[float, float]:
        """Scale both wheels so neither exceeds cap"""
        peak = max(abs(left), abs(right))
        if peak <= cap:
            return left, right
        scale = cap / peak
        return left * scale, right * scale

    @staticmethod
    def _to_mm_s(value: float) -> int:
        """
        Whole mm/s, truncated toward zero.

        Rounding to 6 decimals first keeps float noise such as
        289.99999999999997 from dropping a unit.
        """
        return math.trunc(round(value, 6))
