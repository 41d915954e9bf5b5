"""
Odometry sinks.

The real consumer (transform broadcaster, localization) lives outside the
core. LoggingOdometrySink is what the launcher uses when nothing else is
attached: it keeps the latest update and logs a throttled summary.
"""

import logging
import math
from typing import Optional

from .types import BodyVelocityEstimate, Pose2D


logger = logging.getLogger(__name__)


class LoggingOdometrySink:
    """
    Logs pose updates, at most once per log_interval seconds.
    """

    def __init__(self, log_interval: float = 1.0) -> None:
        self._log_interval = log_interval
        self._last_log_stamp: Optional[float] = None
        self._update_count = 0

        self.last_pose: Optional[Pose2D] = None
        self.last_velocity: Optional[BodyVelocityEstimate] = None
        self.last_stamp: Optional[float] = None

    async def publish(self, pose: Pose2D, velocity: BodyVelocityEstimate, stamp: float) -> None:
        """Store the update and log it if the interval has passed"""
        self.last_pose = pose
        self.last_velocity = velocity
        self.last_stamp = stamp
        self._update_count += 1

        if self._last_log_stamp is None or stamp - self._last_log_stamp >= self._log_interval:
            self._last_log_stamp = stamp
            logger.info(
                f"Odom: x={pose.x:+.3f} m y={pose.y:+.3f} m "
                f"theta={math.degrees(pose.theta):6.1f} deg | "
                f"vx={velocity.vx:+.3f} vy={velocity.vy:+.3f} omega={velocity.omega:+.3f}"
            )

    @property
    def update_count(self) -> int:
        """Total updates received"""
        return self._update_count
