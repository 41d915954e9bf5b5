"""
Core interfaces (protocols) for pluggable components.

These define the capabilities the driver core needs from the outside
world. The core holds references to implementations of these protocols
instead of inheriting from a hardware class.
"""

from typing import Any, Awaitable, Callable, Optional, Protocol

from .types import (
    BodyVelocityEstimate,
    DriveIntent,
    EncoderSample,
    ModeCommand,
    Pose2D,
    WheelSpeedCommand,
)


SensorCallback = Callable[[EncoderSample], Awaitable[Any]]


class RobotLink(Protocol):
    """
    Interface for the robot transport (serial session, simulator, etc.).

    The transport owns the wire protocol and is the clamp authority for
    wheel speeds.
    """

    async def send_wheel_speeds(self, command: WheelSpeedCommand) -> bool:
        """
        Send per-wheel speeds to the robot.

        Args:
            command: Left/right wheel speeds in mm/s

        Returns:
            True if the command was written
        """
        ...

    async def request_mode(self, command: ModeCommand) -> None:
        """
        Issue a mode-control call (start, safe, full, stop, ...).

        Args:
            command: Mode-control call to perform
        """
        ...

    async def subscribe_sensor_stream(self, callback: SensorCallback) -> None:
        """
        (Re)start sensor streaming and route every frame to callback.

        Replaces any previous subscription.
        """
        ...

    async def set_display_text(self, text: str) -> None:
        """Show up to four ASCII characters on the digit LEDs"""
        ...

    async def spin_once(self) -> None:
        """
        Process pending incoming data without blocking.

        Decoded sensor frames are delivered to the subscribed callback
        from inside this call.
        """
        ...

    async def close(self) -> None:
        """Release the session"""
        ...

    @property
    def is_open(self) -> bool:
        """True while the session is usable"""
        ...


class IntentProvider(Protocol):
    """
    Interface for drive-intent sources (middleware bridge, gamepad, script).
    """

    async def start(self) -> None:
        """Initialize and start the provider"""
        ...

    async def stop(self) -> None:
        """Stop and cleanup the provider"""
        ...

    async def read_drive_intent(self) -> Optional[DriveIntent]:
        """
        Return the newest intent received since the last call.

        Must not block. Returns None if nothing new arrived; older
        intents that were superseded are dropped (latest wins).
        """
        ...

    async def read_mode_token(self) -> Optional[str]:
        """Return a pending mode-command token, or None"""
        ...


class OdometrySink(Protocol):
    """Interface for the transform/localization consumer"""

    async def publish(self, pose: Pose2D, velocity: BodyVelocityEstimate, stamp: float) -> None:
        """
        Receive one odometry update.

        Args:
            pose: Snapshot of the current pose
            velocity: Velocity estimate of the same step
            stamp: Clock time of the update
        """
        ...
