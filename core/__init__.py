"""
create2-driver Core - Typed, testable differential-drive robot driver.

This package contains the core logic for driving a Create 2 robot:
- Types: Data classes for sensor frames, pose, intents, wheel commands
- Interfaces: Protocols for pluggable components (link, intents, sink)
- Encoder / Odometry: Dead reckoning from wrapping wheel counters
- Mapper: Transforms drive intents into wheel speed commands
- Watchdog / Supervisor: Liveness timers, re-init, lifecycle
"""

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
    VelocityStrategy,
    WheelKinematicsConfig,
    WheelSpeedCommand,
)
from .interfaces import (
    IntentProvider,
    OdometrySink,
    RobotLink,
)

__all__ = [
    "BodyVelocityEstimate",
    "DriveIntent",
    "EncoderSample",
    "LivenessState",
    "ModeCommand",
    "OdometryConfig",
    "Pose2D",
    "RobotMode",
    "SupervisorConfig",
    "TranslatorConfig",
    "VelocityStrategy",
    "WheelKinematicsConfig",
    "WheelSpeedCommand",
    "IntentProvider",
    "OdometrySink",
    "RobotLink",
]
