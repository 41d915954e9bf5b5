"""Tests for the odometry integrator"""

import math

import pytest

from core.odometry import OdometryIntegrator, shortest_angle, wrap_angle
from core.types import OdometryConfig, Pose2D, VelocityStrategy, WheelKinematicsConfig


TWO_PI = 2.0 * math.pi
MM_PER_COUNT = math.pi * 72.0 / 508.8


@pytest.fixture
def kinematics():
    """Create 2 geometry"""
    return WheelKinematicsConfig(wheel_diameter_mm=72.0, counts_per_revolution=508.8, axle_distance_mm=235.0)


@pytest.fixture
def integrator(kinematics):
    """Integrator already seeded at t=0"""
    odom = OdometryIntegrator(kinematics, OdometryConfig(max_update_hz=100.0))
    odom.update(0, 0, now=0.0)
    return odom


def test_wrap_angle():
    """Test folding into [0, 2*pi)"""
    assert wrap_angle(0.0) == 0.0
    assert wrap_angle(TWO_PI) == pytest.approx(0.0)
    assert wrap_angle(-math.pi / 2) == pytest.approx(3 * math.pi / 2)
    assert wrap_angle(7 * math.pi) == pytest.approx(math.pi)
    assert wrap_angle(-9 * math.pi / 2) == pytest.approx(3 * math.pi / 2)


def test_wrap_angle_tiny_negative():
    """Test a tiny negative angle does not land on 2*pi"""
    theta = wrap_angle(-1e-18)
    assert 0.0 <= theta < TWO_PI


def test_shortest_angle():
    """Test signed shortest rotation"""
    assert shortest_angle(0.1) == pytest.approx(0.1)
    assert shortest_angle(TWO_PI - 0.1) == pytest.approx(-0.1)


def test_first_update_seeds_only(kinematics):
    """Test the first call never moves the pose"""
    odom = OdometryIntegrator(kinematics)
    velocity = odom.update(5000, -5000, now=3.0)

    assert odom.pose == Pose2D(0.0, 0.0, 0.0)
    assert velocity.is_zero
    assert odom.has_previous is True
    assert odom.last_time == 3.0


def test_straight_scenario(integrator):
    """Test 100 counts on both wheels from the origin"""
    integrator.update(100, 100, now=0.1)
    pose = integrator.pose

    expected_mm = math.pi * 72.0 * 100 / 508.8
    assert expected_mm == pytest.approx(44.46, abs=0.01)
    assert pose.x == pytest.approx(expected_mm / 1000.0)
    assert pose.y == 0.0
    assert pose.theta == 0.0


def test_zero_deltas_change_nothing(integrator):
    """Test zero travel keeps the pose and reports zero velocity"""
    integrator.update(100, 40, now=0.1)
    before = integrator.pose

    velocity = integrator.update(0, 0, now=0.2)

    assert integrator.pose == before
    assert velocity.is_zero


def test_turn_in_place(integrator):
    """Test opposite wheel travel only changes heading (left turn positive)"""
    integrator.update(-100, 100, now=0.1)
    pose = integrator.pose

    assert pose.x == pytest.approx(0.0)
    assert pose.y == pytest.approx(0.0)
    assert pose.theta == pytest.approx(2 * 100 * MM_PER_COUNT / 235.0)


def test_right_turn_wraps_below_zero(integrator):
    """Test a right turn from heading zero wraps to just under 2*pi"""
    integrator.update(100, -100, now=0.1)
    theta = integrator.pose.theta

    assert theta == pytest.approx(TWO_PI - 2 * 100 * MM_PER_COUNT / 235.0)
    assert theta < TWO_PI


def test_position_uses_heading_before_step(integrator):
    """Test Euler integration moves along the pre-update heading"""
    integrator.update(0, 100, now=0.1)
    pose = integrator.pose

    assert pose.x == pytest.approx(100 * MM_PER_COUNT / 2 / 1000.0)
    assert pose.y == 0.0
    assert pose.theta > 0.0


def test_heading_rotates_motion(kinematics):
    """Test travel follows the current heading"""
    odom = OdometryIntegrator(kinematics)
    odom.reset(Pose2D(1.0, 2.0, math.pi / 2))
    odom.update(0, 0, now=0.0)
    odom.update(100, 100, now=0.1)
    pose = odom.pose

    assert pose.x == pytest.approx(1.0)
    assert pose.y == pytest.approx(2.0 + 100 * MM_PER_COUNT / 1000.0)
    assert pose.theta == pytest.approx(math.pi / 2)


@pytest.mark.parametrize("step", [(-1000, 1000), (1000, -1000), (2500, -300), (-7000, 4000)])
def test_theta_stays_in_range(integrator, step):
    """Test heading stays in [0, 2*pi) over many full rotations"""
    now = 0.0
    for _ in range(300):
        now += 0.015
        integrator.update(*step, now=now)
        theta = integrator.pose.theta
        assert 0.0 <= theta < TWO_PI


def test_world_frame_velocity(integrator):
    """Test secant velocity of the world-frame pose"""
    integrator.update(100, 100, now=0.1)
    velocity = integrator.velocity

    assert velocity.vx == pytest.approx(100 * MM_PER_COUNT / 1000.0 / 0.1)
    assert velocity.vy == 0.0
    assert velocity.omega == 0.0


def test_dt_floor_prevents_blowup(integrator):
    """Test back-to-back and backwards-in-time updates use the dt floor"""
    integrator.update(10, 10, now=0.5)
    same_time = integrator.update(10, 10, now=0.5)
    backwards = integrator.update(10, 10, now=0.4)

    expected = 10 * MM_PER_COUNT / 1000.0 / 0.01
    for velocity in (same_time, backwards):
        assert math.isfinite(velocity.vx)
        assert velocity.vx == pytest.approx(expected)


def test_world_frame_omega_across_wrap(kinematics):
    """Test world-frame omega is the raw theta difference, jump included"""
    odom = OdometryIntegrator(kinematics, OdometryConfig(velocity_strategy=VelocityStrategy.WORLD_FRAME))
    odom.reset(Pose2D(0.0, 0.0, TWO_PI - 0.01))
    odom.update(0, 0, now=0.0)

    velocity = odom.update(-100, 100, now=0.1)
    theta = odom.pose.theta

    assert theta < 1.0
    assert velocity.omega == pytest.approx((theta - (TWO_PI - 0.01)) / 0.1)
    assert velocity.omega < 0.0


def test_body_frame_velocity(kinematics):
    """Test body-frame strategy reports forward speed and the short turn"""
    odom = OdometryIntegrator(kinematics, OdometryConfig(velocity_strategy=VelocityStrategy.BODY_FRAME))
    odom.reset(Pose2D(0.0, 0.0, TWO_PI - 0.01))
    odom.update(0, 0, now=0.0)

    velocity = odom.update(-100, 100, now=0.1)
    turn = 2 * 100 * MM_PER_COUNT / 235.0
    assert velocity.omega == pytest.approx(turn / 0.1)
    assert velocity.vx == pytest.approx(0.0)
    assert velocity.vy == 0.0

    velocity = odom.update(100, 100, now=0.2)
    assert velocity.vx == pytest.approx(100 * MM_PER_COUNT / 1000.0 / 0.1)


def test_body_frame_vs_world_frame_heading(kinematics):
    """Test the strategies disagree when the robot faces +y"""
    world = OdometryIntegrator(kinematics)
    body = OdometryIntegrator(kinematics, OdometryConfig(velocity_strategy=VelocityStrategy.BODY_FRAME))
    for odom in (world, body):
        odom.reset(Pose2D(0.0, 0.0, math.pi / 2))
        odom.update(0, 0, now=0.0)

    w = world.update(100, 100, now=0.1)
    b = body.update(100, 100, now=0.1)

    assert w.vx == pytest.approx(0.0, abs=1e-12)
    assert w.vy == pytest.approx(b.vx)
    assert b.vy == 0.0


def test_backwards_mounting(kinematics):
    """Test reversed mounting mirrors the wheel deltas"""
    reversed_kinematics = WheelKinematicsConfig(backwards=True)
    odom = OdometryIntegrator(reversed_kinematics)
    odom.update(0, 0, now=0.0)

    odom.update(100, 100, now=0.1)
    assert odom.pose.x == pytest.approx(-100 * MM_PER_COUNT / 1000.0)

    odom.update(-50, 50, now=0.2)
    # Left/right swap and negate: still a left turn in the reversed frame
    assert 0.0 < odom.pose.theta < math.pi


def test_reset_reseeds(integrator):
    """Test reset keeps the pose but requires a new seed"""
    integrator.update(100, 100, now=0.1)
    x = integrator.pose.x

    integrator.reset()
    assert integrator.has_previous is False

    velocity = integrator.update(500, 500, now=0.2)
    assert velocity.is_zero
    assert integrator.pose.x == x
