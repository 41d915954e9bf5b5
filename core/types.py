"""
Core data types for the Create 2 driver.

All the data structures that flow through the system, fully typed.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional
import math
import time


INT16_MIN = -32768
INT16_MAX = 32767

# Create 2 wheel speed register limit (mm/s)
DEVICE_MAX_WHEEL_SPEED_MM_S = 500


class RobotMode(IntEnum):
    """Open Interface mode reported by the sensor stream"""
    OFF = 0       # OI not started
    PASSIVE = 1   # Sensors only, actuators ignore drive commands
    SAFE = 2      # Driving allowed, cliff/wheel-drop safety active
    FULL = 3      # Driving allowed, no safety features


class ModeCommand(Enum):
    """Mode-control calls understood by the transport"""
    START = "start"
    STOP = "stop"
    RESET = "reset"
    POWERDOWN = "powerdown"
    SAFE = "safe"
    FULL = "full"
    EXIT = "exit"


class VelocityStrategy(Enum):
    """How the odometry integrator derives its velocity estimate"""
    WORLD_FRAME = "world_frame"   # Finite difference of the world-frame pose
    BODY_FRAME = "body_frame"     # Center arc length and wrapped heading change


@dataclass(frozen=True)
class EncoderSample:
    """
    One sensor frame from the streaming collaborator.

    Counters are the raw 16-bit wrapping values; the telemetry fields are
    whatever else the stream carried and may be missing.
    """
    left_count: int                          # Raw left encoder counter (int16)
    right_count: int                         # Raw right encoder counter (int16)
    robot_mode: RobotMode = RobotMode.OFF
    timestamp: float = field(default_factory=time.monotonic)
    voltage_mv: Optional[int] = None
    current_ma: Optional[int] = None
    temperature_c: Optional[int] = None
    battery_charge_mah: Optional[int] = None
    battery_capacity_mah: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate ranges"""
        assert INT16_MIN <= self.left_count <= INT16_MAX, f"left_count out of range: {self.left_count}"
        assert INT16_MIN <= self.right_count <= INT16_MAX, f"right_count out of range: {self.right_count}"


@dataclass
class Pose2D:
    """Planar pose in the odometry frame (meters, radians in [0, 2*pi))"""
    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0

    def copy(self) -> "Pose2D":
        return Pose2D(self.x, self.y, self.theta)


@dataclass(frozen=True)
class BodyVelocityEstimate:
    """Velocity estimate from one integration step (m/s, rad/s)"""
    vx: float = 0.0
    vy: float = 0.0
    omega: float = 0.0

    @classmethod
    def zero(cls) -> "BodyVelocityEstimate":
        return cls(0.0, 0.0, 0.0)

    @property
    def is_zero(self) -> bool:
        return self.vx == 0.0 and self.vy == 0.0 and self.omega == 0.0


@dataclass(frozen=True)
class DriveIntent:
    """
    Desired body velocity from the command-intent collaborator.

    Only the most recent intent matters; there is no queueing.
    """
    linear_velocity: float       # Forward speed (m/s)
    angular_velocity: float      # Yaw rate (rad/s), positive turns left
    timestamp: float = field(default_factory=time.monotonic)

    def __post_init__(self) -> None:
        """Validate ranges"""
        assert math.isfinite(self.linear_velocity), f"linear_velocity not finite: {self.linear_velocity}"
        assert math.isfinite(self.angular_velocity), f"angular_velocity not finite: {self.angular_velocity}"

    @classmethod
    def halt(cls) -> "DriveIntent":
        """Create a zero-velocity intent"""
        return cls(linear_velocity=0.0, angular_velocity=0.0)


@dataclass(frozen=True)
class WheelSpeedCommand:
    """
    Per-wheel speed command for the transport.

    This is the output of the DriveMapper and input to the RobotLink.
    """
    left_mm_s: int
    right_mm_s: int

    @property
    def is_stop(self) -> bool:
        """Check if this is a stop command"""
        return self.left_mm_s == 0 and self.right_mm_s == 0

    @classmethod
    def stop(cls) -> "WheelSpeedCommand":
        """Create a stop command"""
        return cls(left_mm_s=0, right_mm_s=0)

    def clamped(self, limit: int = DEVICE_MAX_WHEEL_SPEED_MM_S) -> "WheelSpeedCommand":
        """Return a copy with both wheels limited to [-limit, limit]"""
        return WheelSpeedCommand(
            left_mm_s=max(-limit, min(limit, self.left_mm_s)),
            right_mm_s=max(-limit, min(limit, self.right_mm_s)),
        )


@dataclass
class LivenessState:
    """Timestamps the watchdog compares against the cycle clock"""
    last_sensor_update_time: float
    last_command_time: float


@dataclass(frozen=True)
class WheelKinematicsConfig:
    """Wheel geometry, loaded once at startup"""
    wheel_diameter_mm: float = 72.0
    counts_per_revolution: float = 508.8
    axle_distance_mm: float = 235.0
    backwards: bool = False            # Robot mounted/driven in reverse

    def __post_init__(self) -> None:
        for name in ("wheel_diameter_mm", "counts_per_revolution", "axle_distance_mm"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")

    @property
    def axle_distance_m(self) -> float:
        return self.axle_distance_mm / 1000.0

    @property
    def mm_per_count(self) -> float:
        """Wheel travel per encoder count"""
        return math.pi * self.wheel_diameter_mm / self.counts_per_revolution


@dataclass(frozen=True)
class OdometryConfig:
    """Configuration for the OdometryIntegrator"""
    max_update_hz: float = 100.0       # Fastest sensor rate we expect
    velocity_strategy: VelocityStrategy = VelocityStrategy.WORLD_FRAME

    def __post_init__(self) -> None:
        if self.max_update_hz <= 0:
            raise ValueError(f"max_update_hz must be > 0, got {self.max_update_hz}")

    @property
    def min_dt(self) -> float:
        """Smallest elapsed time used as a velocity divisor"""
        return 1.0 / self.max_update_hz


@dataclass(frozen=True)
class TranslatorConfig:
    """Configuration for the DriveMapper"""
    # Optional software cap (mm/s). Both wheels are scaled by the same factor
    # when either exceeds it. None leaves clamping to the transport.
    speed_cap_mm_s: Optional[int] = None

    def __post_init__(self) -> None:
        if self.speed_cap_mm_s is not None and self.speed_cap_mm_s <= 0:
            raise ValueError(f"speed_cap_mm_s must be > 0, got {self.speed_cap_mm_s}")


@dataclass(frozen=True)
class SupervisorConfig:
    """Configuration for the Supervisor"""
    cycle_hz: float = 100.0            # Watchdog cycle rate
    sensor_timeout: float = 5.0        # Max time without sensor data before re-init
    command_timeout: float = 1.0       # Max time without a drive intent before stop
    display_banner: str = "ABCD"       # Shown on the digit LEDs after init
    debug_trace: bool = False          # Log every sensor frame at DEBUG

    def __post_init__(self) -> None:
        if self.cycle_hz <= 0:
            raise ValueError(f"cycle_hz must be > 0, got {self.cycle_hz}")
        if self.sensor_timeout <= 0 or self.command_timeout <= 0:
            raise ValueError("timeouts must be > 0")

    @property
    def loop_interval(self) -> float:
        return 1.0 / self.cycle_hz
