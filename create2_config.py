#!/usr/bin/env python3
"""
Create 2 Environment Configuration Helper

Provides easy access to .env configuration for the driver.
Loads the .env file and provides defaults for every setting.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from core.types import (
    OdometryConfig,
    SupervisorConfig,
    TranslatorConfig,
    VelocityStrategy,
    WheelKinematicsConfig,
)


_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


class Create2Config:
    """Configuration manager for the Create 2 driver"""

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration

        Args:
            env_file: Path to .env file (default: .env in current directory)
        """
        self._loaded = False

        env_path = Path(env_file) if env_file is not None else Path(".env")
        if env_path.exists():
            load_dotenv(env_path)
            self._loaded = True

    @property
    def loaded(self) -> bool:
        """True if a .env file was read"""
        return self._loaded

    @property
    def wheel_diameter_mm(self) -> float:
        return _env_float("CREATE2_WHEEL_DIAMETER_MM", 72.0)

    @property
    def counts_per_rev(self) -> float:
        return _env_float("CREATE2_COUNTS_PER_REV", 508.8)

    @property
    def axle_distance_mm(self) -> float:
        return _env_float("CREATE2_AXLE_DISTANCE_MM", 235.0)

    @property
    def backwards(self) -> bool:
        """Robot driven with its rear as the front"""
        return _env_bool("CREATE2_BACKWARDS")

    @property
    def cycle_hz(self) -> float:
        """Watchdog cycle rate (default: 100 Hz)"""
        return _env_float("CREATE2_CYCLE_HZ", 100.0)

    @property
    def max_update_hz(self) -> float:
        """Fastest expected sensor rate, sets the velocity dt floor"""
        return _env_float("CREATE2_MAX_UPDATE_HZ", 100.0)

    @property
    def sensor_timeout(self) -> float:
        return _env_float("CREATE2_SENSOR_TIMEOUT", 5.0)

    @property
    def command_timeout(self) -> float:
        return _env_float("CREATE2_COMMAND_TIMEOUT", 1.0)

    @property
    def speed_cap_mm_s(self) -> Optional[int]:
        """Software wheel speed cap, unset means none"""
        value = os.getenv("CREATE2_SPEED_CAP_MM_S")
        return int(value) if value else None

    @property
    def velocity_strategy(self) -> VelocityStrategy:
        return VelocityStrategy(os.getenv("CREATE2_VELOCITY_STRATEGY", VelocityStrategy.WORLD_FRAME.value))

    @property
    def debug_trace(self) -> bool:
        """Log every sensor frame"""
        return _env_bool("CREATE2_DEBUG_TRACE")

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate configuration

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        numeric = [
            ("CREATE2_WHEEL_DIAMETER_MM", lambda: self.wheel_diameter_mm),
            ("CREATE2_COUNTS_PER_REV", lambda: self.counts_per_rev),
            ("CREATE2_AXLE_DISTANCE_MM", lambda: self.axle_distance_mm),
            ("CREATE2_CYCLE_HZ", lambda: self.cycle_hz),
            ("CREATE2_MAX_UPDATE_HZ", lambda: self.max_update_hz),
            ("CREATE2_SENSOR_TIMEOUT", lambda: self.sensor_timeout),
            ("CREATE2_COMMAND_TIMEOUT", lambda: self.command_timeout),
        ]
        for name, getter in numeric:
            try:
                if getter() <= 0:
                    errors.append(f"{name} must be > 0")
            except ValueError:
                errors.append(f"{name} is not a number")

        try:
            cap = self.speed_cap_mm_s
            if cap is not None and cap <= 0:
                errors.append("CREATE2_SPEED_CAP_MM_S must be > 0")
        except ValueError:
            errors.append("CREATE2_SPEED_CAP_MM_S is not an integer")

        try:
            self.velocity_strategy
        except ValueError:
            choices = ", ".join(s.value for s in VelocityStrategy)
            errors.append(f"CREATE2_VELOCITY_STRATEGY must be one of: {choices}")

        return len(errors) == 0, errors

    def kinematics(self) -> WheelKinematicsConfig:
        return WheelKinematicsConfig(
            wheel_diameter_mm=self.wheel_diameter_mm,
            counts_per_revolution=self.counts_per_rev,
            axle_distance_mm=self.axle_distance_mm,
            backwards=self.backwards,
        )

    def odometry_config(self) -> OdometryConfig:
        return OdometryConfig(
            max_update_hz=self.max_update_hz,
            velocity_strategy=self.velocity_strategy,
        )

    def translator_config(self) -> TranslatorConfig:
        return TranslatorConfig(speed_cap_mm_s=self.speed_cap_mm_s)

    def supervisor_config(self) -> SupervisorConfig:
        return SupervisorConfig(
            cycle_hz=self.cycle_hz,
            sensor_timeout=self.sensor_timeout,
            command_timeout=self.command_timeout,
            debug_trace=self.debug_trace,
        )

    def print_status(self):
        """Print configuration status"""
        print("Create 2 Configuration Status:")
        print(f"  .env loaded:     {'Yes' if self._loaded else 'No'}")

        is_valid, errors = self.validate()
        if is_valid:
            print(f"  Wheel diameter:  {self.wheel_diameter_mm} mm")
            print(f"  Counts/rev:      {self.counts_per_rev}")
            print(f"  Axle distance:   {self.axle_distance_mm} mm")
            print(f"  Backwards:       {self.backwards}")
            print(f"  Cycle:           {self.cycle_hz} Hz")
            print(f"  Timeouts:        sensor {self.sensor_timeout}s, command {self.command_timeout}s")
            print(f"  Speed cap:       {self.speed_cap_mm_s or '(none)'}")
            print(f"  Velocity:        {self.velocity_strategy.value}")
            print("\n  Status: Configuration is valid")
        else:
            print("\n  Status: Configuration has errors:")
            for error in errors:
                print(f"    - {error}")


# Global config instance
_config = None

def get_config(reload: bool = False, env_file: Optional[str] = None) -> Create2Config:
    """
    Get the global configuration instance

    Args:
        reload: Force reload of .env file
        env_file: Path to .env file used on (re)load

    Returns:
        Create2Config instance
    """
    global _config
    if _config is None or reload:
        _config = Create2Config(env_file)
    return _config


def main():
    """Command-line utility to check configuration"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Create 2 Configuration Utility",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Check current configuration:
    python create2_config.py

  Validate configuration:
    python create2_config.py --validate

  Use custom .env file:
    python create2_config.py --env-file /path/to/.env
        """
    )

    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument("--validate", action="store_true",
                       help="Validate configuration and exit with error if invalid")

    args = parser.parse_args()

    config = Create2Config(args.env_file)
    config.print_status()

    if args.validate:
        is_valid, errors = config.validate()
        if not is_valid:
            print("\nValidation failed!")
            import sys
            sys.exit(1)
        else:
            print("\nValidation passed!")


if __name__ == "__main__":
    main()
