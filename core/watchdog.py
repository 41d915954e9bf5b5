"""
Liveness watchdog.

Evaluated once per fixed-rate cycle, never per message. Two independent
timers:

- sensor: no sensor frame for sensor_timeout -> re-initialize the robot
- command: no drive intent for command_timeout -> emit a stop

When a timer fires its timestamp is moved to now, so each action happens
at most once per timeout window instead of on every cycle.
"""

import logging
from dataclasses import dataclass

from .types import LivenessState


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatchdogVerdict:
    """What the supervisor has to do this cycle"""
    reinitialize: bool = False
    stop: bool = False

    @property
    def is_quiet(self) -> bool:
        return not (self.reinitialize or self.stop)


class LivenessWatchdog:
    """
    Two-timer liveness state machine.
    """

    def __init__(self, sensor_timeout: float = 5.0, command_timeout: float = 1.0, now: float = 0.0) -> None:
        """
        Initialize watchdog.

        Args:
            sensor_timeout: Seconds without sensor data before re-init
            command_timeout: Seconds without a drive intent before stop
            now: Start time of both windows
        """
        if sensor_timeout <= 0 or command_timeout <= 0:
            raise ValueError("watchdog timeouts must be > 0")
        self.sensor_timeout = sensor_timeout
        self.command_timeout = command_timeout
        self._state = LivenessState(last_sensor_update_time=now, last_command_time=now)

    @property
    def state(self) -> LivenessState:
        """Copy of the liveness timestamps"""
        return LivenessState(
            last_sensor_update_time=self._state.last_sensor_update_time,
            last_command_time=self._state.last_command_time,
        )

    def note_sensor_update(self, now: float) -> None:
        self._state.last_sensor_update_time = now

    def note_drive_intent(self, now: float) -> None:
        self._state.last_command_time = now

    def reset(self, now: float) -> None:
        """Restart both windows at now"""
        self._state.last_sensor_update_time = now
        self._state.last_command_time = now

    def check(self, now: float) -> WatchdogVerdict:
        """
        Evaluate both timers.

        Args:
            now: Current cycle time

        Returns:
            Verdict with the actions due this cycle
        """
        reinitialize = False
        stop = False

        if now - self._state.last_sensor_update_time > self.sensor_timeout:
            logger.warning(
                f"No sensor data for {now - self._state.last_sensor_update_time:.2f}s, "
                f"re-initializing"
            )
            self._state.last_sensor_update_time = now
            reinitialize = True

        if now - self._state.last_command_time > self.command_timeout:
            logger.info(
                f"No drive intent for {now - self._state.last_command_time:.2f}s, stopping"
            )
            self._state.last_command_time = now
            stop = True

        return WatchdogVerdict(reinitialize=reinitialize, stop=stop)
