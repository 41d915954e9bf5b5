"""Tests for the simulated robot link"""

import asyncio

import pytest

from core.transport import MockRobotLink, wrap_int16
from core.types import ModeCommand, RobotMode, WheelKinematicsConfig, WheelSpeedCommand


class StepClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def link(clock):
    return MockRobotLink(clock=clock)


def test_wrap_int16():
    """Test unwrapped counts fold into the signed 16-bit range"""
    assert wrap_int16(0) == 0
    assert wrap_int16(32767) == 32767
    assert wrap_int16(32768) == -32768
    assert wrap_int16(-32769) == 32767
    assert wrap_int16(65536 + 5) == 5
    assert wrap_int16(-0.5) == -1


def test_mode_transitions(link):
    """Test OI mode handling"""
    async def scenario():
        await link.request_mode(ModeCommand.SAFE)
        assert link.mode == RobotMode.OFF  # OI not started

        await link.request_mode(ModeCommand.START)
        assert link.mode == RobotMode.PASSIVE

        await link.request_mode(ModeCommand.FULL)
        assert link.mode == RobotMode.FULL

        await link.request_mode(ModeCommand.SAFE)
        assert link.mode == RobotMode.SAFE

        await link.request_mode(ModeCommand.POWERDOWN)
        assert link.mode == RobotMode.OFF

    asyncio.run(scenario())
    assert link.mode_requests[0] == ModeCommand.SAFE
    assert len(link.mode_requests) == 5


def test_wheels_only_move_in_driving_modes(link):
    """Test drive commands are recorded but ignored outside SAFE/FULL"""
    async def scenario():
        await link.request_mode(ModeCommand.START)
        await link.send_wheel_speeds(WheelSpeedCommand(100, 100))
        assert link.wheel_speeds.is_stop

        await link.request_mode(ModeCommand.SAFE)
        await link.send_wheel_speeds(WheelSpeedCommand(100, 100))
        assert link.wheel_speeds == WheelSpeedCommand(100, 100)

        await link.request_mode(ModeCommand.START)
        assert link.wheel_speeds.is_stop

    asyncio.run(scenario())
    assert link.command_count == 2


def test_speed_clamped_to_device_ceiling(link):
    """Test the transport clamps to +/-500 mm/s"""
    async def scenario():
        await link.request_mode(ModeCommand.START)
        await link.request_mode(ModeCommand.FULL)
        await link.send_wheel_speeds(WheelSpeedCommand(900, -700))

    asyncio.run(scenario())
    assert link.last_command == WheelSpeedCommand(900, -700)
    assert link.wheel_speeds == WheelSpeedCommand(500, -500)


def test_streams_frames_at_interval(link, clock):
    """Test frames are delivered from spin_once at the frame interval"""
    samples = []

    async def on_sample(sample):
        samples.append(sample)

    async def scenario():
        await link.request_mode(ModeCommand.START)
        await link.subscribe_sensor_stream(on_sample)
        for i in range(10):
            clock.now = i * 0.01
            await link.spin_once()

    asyncio.run(scenario())

    assert link.subscribe_count == 1
    assert link.frame_count == len(samples) == 5
    assert samples[0].robot_mode == RobotMode.PASSIVE
    assert samples[0].battery_capacity_mah == 2696


def test_counts_follow_wheel_speed(clock):
    """Test encoder counts advance with commanded speed"""
    link = MockRobotLink(clock=clock, frame_interval=0.0)
    samples = []

    async def on_sample(sample):
        samples.append(sample)

    async def scenario():
        await link.request_mode(ModeCommand.START)
        await link.request_mode(ModeCommand.SAFE)
        await link.subscribe_sensor_stream(on_sample)
        await link.spin_once()
        await link.send_wheel_speeds(WheelSpeedCommand(-100, 100))
        clock.now = 1.0
        await link.spin_once()

    asyncio.run(scenario())

    counts = 100.0 / WheelKinematicsConfig().mm_per_count
    assert samples[-1].right_count == int(counts)
    assert samples[-1].left_count == -int(counts) - 1
    assert samples[-1].current_ma < 0


def test_drop_stream_and_resubscribe(link, clock):
    """Test a dropped stream stays silent until subscribed again"""
    samples = []

    async def on_sample(sample):
        samples.append(sample)

    async def scenario():
        await link.subscribe_sensor_stream(on_sample)
        await link.spin_once()
        link.drop_stream()
        clock.now = 1.0
        await link.spin_once()
        assert len(samples) == 1

        await link.subscribe_sensor_stream(on_sample)
        await link.spin_once()

    asyncio.run(scenario())
    assert len(samples) == 2
    assert link.is_streaming


def test_reset_zeroes_counters(clock):
    """Test RESET stops streaming and restarts counters from zero"""
    link = MockRobotLink(clock=clock, frame_interval=0.0, start_counts=(500, -500))
    samples = []

    async def on_sample(sample):
        samples.append(sample)

    async def scenario():
        await link.request_mode(ModeCommand.START)
        await link.subscribe_sensor_stream(on_sample)
        await link.request_mode(ModeCommand.RESET)
        assert link.is_streaming is False

        await link.request_mode(ModeCommand.START)
        await link.subscribe_sensor_stream(on_sample)
        await link.spin_once()

    asyncio.run(scenario())
    assert (samples[-1].left_count, samples[-1].right_count) == (0, 0)


def test_display_text(link):
    """Test display text is normalized to four characters"""
    asyncio.run(link.set_display_text("HELLO"))
    asyncio.run(link.set_display_text("ok"))

    assert link.display_history == ["HELL", "ok  "]
    assert link.display == "ok  "


def test_closed_link_rejects_commands(link):
    """Test a closed link refuses drive commands"""
    async def scenario():
        await link.close()
        return await link.send_wheel_speeds(WheelSpeedCommand(100, 100))

    assert asyncio.run(scenario()) is False
    assert link.is_open is False
    assert link.command_count == 0
