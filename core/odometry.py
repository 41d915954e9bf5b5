"""
Odometry - Dead reckoning from wheel encoder deltas.

Integrates per-frame wheel travel into a planar pose with first-order
(Euler) integration: position moves along the heading held *before* the
step, then the heading is advanced.

Velocity is a secant estimate over the time since the previous frame.
Two strategies are available:

- WORLD_FRAME: finite difference of x, y and theta in the odometry frame
  (default)
- BODY_FRAME: center arc length over dt for vx, vy = 0, and the shortest
  signed heading change over dt for omega
"""

import logging
import math
import time
from typing import Callable, Optional

from .types import (
    BodyVelocityEstimate,
    OdometryConfig,
    Pose2D,
    VelocityStrategy,
    WheelKinematicsConfig,
)


logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi


def wrap_angle(theta: float) -> float:
    """Fold an angle into [0, 2*pi)"""
    theta = math.fmod(theta, TWO_PI)
    if theta < 0.0:
        theta += TWO_PI
    # A tiny negative input lands exactly on 2*pi after the add
    if theta >= TWO_PI:
        theta -= TWO_PI
    return theta


def shortest_angle(delta: float) -> float:
    """Signed angle in (-pi, pi] equivalent to delta"""
    return math.atan2(math.sin(delta), math.cos(delta))


class OdometryIntegrator:
    """
    Owns the running pose and turns encoder deltas into pose updates.

    The pose is only mutated by update() and reset(); everyone else gets
    copies.
    """

    def __init__(
        self,
        kinematics: WheelKinematicsConfig,
        config: Optional[OdometryConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize integrator.

        Args:
            kinematics: Wheel geometry
            config: Update-rate floor and velocity strategy
            clock: Time source used when update() gets no timestamp
        """
        self.kinematics = kinematics
        self.config = config or OdometryConfig()
        self._clock = clock

        self._pose = Pose2D()
        self._last_time: Optional[float] = None
        self._last_velocity = BodyVelocityEstimate.zero()

    @property
    def pose(self) -> Pose2D:
        """Copy of the current pose"""
        return self._pose.copy()

    @property
    def velocity(self) -> BodyVelocityEstimate:
        """Velocity estimate of the last step"""
        return self._last_velocity

    @property
    def has_previous(self) -> bool:
        return self._last_time is not None

    @property
    def last_time(self) -> Optional[float]:
        return self._last_time

    def reset(self, pose: Optional[Pose2D] = None) -> None:
        """
        Re-seed the integrator.

        Args:
            pose: Pose to restart from (keeps the current pose if None)
        """
        if pose is not None:
            self._pose = Pose2D(pose.x, pose.y, wrap_angle(pose.theta))
        self._last_time = None
        self._last_velocity = BodyVelocityEstimate.zero()

    def update(self, left_delta: int, right_delta: int, now: Optional[float] = None) -> BodyVelocityEstimate:
        """
        Apply one frame of wheel travel.

        Args:
            left_delta: Corrected left encoder delta (counts)
            right_delta: Corrected right encoder delta (counts)
            now: Time of the frame (defaults to the clock)

        Returns:
            Velocity estimate for this step
        """
        if now is None:
            now = self._clock()

        if self._last_time is None:
            # Cold start: only remember when we were, nothing to integrate yet
            self._last_time = now
            self._last_velocity = BodyVelocityEstimate.zero()
            return self._last_velocity

        dt = max(now - self._last_time, self.config.min_dt)
        self._last_time = now

        if self.kinematics.backwards:
            left_delta, right_delta = -right_delta, -left_delta

        mm_per_count = self.kinematics.mm_per_count
        d_left = mm_per_count * left_delta
        d_right = mm_per_count * right_delta
        d_center = (d_left + d_right) / 2.0
        d_theta = (d_right - d_left) / self.kinematics.axle_distance_mm

        pose = self._pose
        x_prev, y_prev, theta_prev = pose.x, pose.y, pose.theta

        pose.x += d_center * math.cos(theta_prev) / 1000.0
        pose.y += d_center * math.sin(theta_prev) / 1000.0
        pose.theta = wrap_angle(theta_prev + d_theta)

        if self.config.velocity_strategy is VelocityStrategy.BODY_FRAME:
            velocity = BodyVelocityEstimate(
                vx=d_center / 1000.0 / dt,
                vy=0.0,
                omega=shortest_angle(pose.theta - theta_prev) / dt,
            )
        else:
            velocity = BodyVelocityEstimate(
                vx=(pose.x - x_prev) / dt,
                vy=(pose.y - y_prev) / dt,
                omega=(pose.theta - theta_prev) / dt,
            )

        self._last_velocity = velocity
        return velocity
