"""Tests for .env configuration loading"""

import os

import pytest

from create2_config import Create2Config, get_config
from core.types import VelocityStrategy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate os.environ so .env loading does not leak between tests"""
    monkeypatch.setattr(os, "environ", {
        key: value for key, value in os.environ.items() if not key.startswith("CREATE2_")
    })


@pytest.fixture
def env_file(tmp_path):
    def write(text):
        path = tmp_path / ".env"
        path.write_text(text)
        return str(path)
    return write


def test_defaults(tmp_path):
    """Test defaults when no .env exists"""
    config = Create2Config(str(tmp_path / "missing.env"))

    assert config.loaded is False
    assert config.speed_cap_mm_s is None
    assert config.velocity_strategy is VelocityStrategy.WORLD_FRAME

    kinematics = config.kinematics()
    assert kinematics.wheel_diameter_mm == 72.0
    assert kinematics.counts_per_revolution == 508.8
    assert kinematics.axle_distance_mm == 235.0
    assert kinematics.backwards is False

    supervisor = config.supervisor_config()
    assert supervisor.cycle_hz == 100.0
    assert supervisor.sensor_timeout == 5.0
    assert supervisor.command_timeout == 1.0
    assert supervisor.debug_trace is False

    assert config.validate() == (True, [])


def test_env_file_values(env_file):
    """Test values are read from the .env file"""
    config = Create2Config(env_file(
        "CREATE2_AXLE_DISTANCE_MM=250\n"
        "CREATE2_BACKWARDS=true\n"
        "CREATE2_SPEED_CAP_MM_S=300\n"
        "CREATE2_VELOCITY_STRATEGY=body_frame\n"
        "CREATE2_MAX_UPDATE_HZ=50\n"
        "CREATE2_DEBUG_TRACE=yes\n"
    ))

    assert config.loaded is True

    kinematics = config.kinematics()
    assert kinematics.axle_distance_mm == 250.0
    assert kinematics.backwards is True

    assert config.translator_config().speed_cap_mm_s == 300

    odometry = config.odometry_config()
    assert odometry.velocity_strategy is VelocityStrategy.BODY_FRAME
    assert odometry.min_dt == pytest.approx(0.02)

    assert config.supervisor_config().debug_trace is True


def test_process_environment_wins(env_file):
    """Test variables already set are not overridden by the file"""
    os.environ["CREATE2_AXLE_DISTANCE_MM"] = "240"
    config = Create2Config(env_file("CREATE2_AXLE_DISTANCE_MM=250\n"))

    assert config.axle_distance_mm == 240.0


@pytest.mark.parametrize("text, message", [
    ("CREATE2_AXLE_DISTANCE_MM=0\n", "CREATE2_AXLE_DISTANCE_MM must be > 0"),
    ("CREATE2_CYCLE_HZ=fast\n", "CREATE2_CYCLE_HZ is not a number"),
    ("CREATE2_SPEED_CAP_MM_S=-5\n", "CREATE2_SPEED_CAP_MM_S must be > 0"),
    ("CREATE2_SPEED_CAP_MM_S=1.5\n", "CREATE2_SPEED_CAP_MM_S is not an integer"),
])
def test_validate_errors(env_file, text, message):
    """Test invalid settings are reported"""
    config = Create2Config(env_file(text))
    is_valid, errors = config.validate()

    assert is_valid is False
    assert message in errors


def test_validate_velocity_strategy(env_file):
    """Test unknown strategies list the choices"""
    config = Create2Config(env_file("CREATE2_VELOCITY_STRATEGY=sideways\n"))
    is_valid, errors = config.validate()

    assert is_valid is False
    assert errors == ["CREATE2_VELOCITY_STRATEGY must be one of: world_frame, body_frame"]


def test_get_config_caches(env_file):
    """Test the global instance is reused unless reloaded"""
    path = env_file("CREATE2_CYCLE_HZ=50\n")

    first = get_config(reload=True, env_file=path)
    assert get_config() is first
    assert get_config(reload=True, env_file=path) is not first
    assert first.cycle_hz == 50.0


def test_print_status(capsys, tmp_path):
    """Test status output"""
    Create2Config(str(tmp_path / "missing.env")).print_status()
    out = capsys.readouterr().out

    assert ".env loaded:     No" in out
    assert "Configuration is valid" in out


def test_only_driver_settings_exposed():
    """Test serial session settings are left to the transport integration"""
    config = Create2Config()

    for name in ("port", "brc_pin", "use_brc_pin"):
        assert not hasattr(config, name)
