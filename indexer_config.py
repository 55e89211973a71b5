#!/usr/bin/env python3
"""
Indexer Environment Configuration Helper

Loads tuning values from a .env file (or the process environment) and
turns them into the indexer configuration dataclasses. Anything not set
falls back to the dataclass defaults.
"""

import math
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from indexer.types import (
    ConfigError,
    CoordinatorConfig,
    PositionControllerConfig,
    RunnerConfig,
)


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} is not a number: {value!r}")


class IndexerEnvConfig:
    """Configuration manager for the indexer"""

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize configuration

        Args:
            env_file: Path to .env file (default: .env in current directory)
        """
        self._loaded = False

        path = Path(".env") if env_file is None else Path(env_file)
        if path.exists():
            load_dotenv(path)
            self._loaded = True

    @property
    def loaded(self) -> bool:
        """Whether a .env file was found and loaded"""
        return self._loaded

    @property
    def kp(self) -> Optional[float]:
        return _env_float("INDEXER_KP")

    @property
    def ki(self) -> Optional[float]:
        return _env_float("INDEXER_KI")

    @property
    def kd(self) -> Optional[float]:
        return _env_float("INDEXER_KD")

    @property
    def kg(self) -> Optional[float]:
        """Gravity feedforward in volts"""
        return _env_float("INDEXER_KG")

    @property
    def min_angle(self) -> Optional[float]:
        """Lowest carriage angle in radians"""
        return _env_float("INDEXER_MIN_ANGLE")

    @property
    def max_angle(self) -> Optional[float]:
        """Highest carriage angle in radians"""
        return _env_float("INDEXER_MAX_ANGLE")

    @property
    def tolerance(self) -> Optional[float]:
        return _env_float("INDEXER_TOLERANCE")

    @property
    def settle_ms(self) -> Optional[float]:
        """Center beam settle window in milliseconds"""
        return _env_float("INDEXER_SETTLE_MS")

    @property
    def source_angle_deg(self) -> Optional[float]:
        """Source loading carriage angle in degrees"""
        return _env_float("INDEXER_SOURCE_ANGLE_DEG")

    @property
    def loop_hz(self) -> float:
        """Control loop rate (default: 50)"""
        value = _env_float("INDEXER_LOOP_HZ")
        return 50.0 if value is None else value

    def position_config(self) -> PositionControllerConfig:
        """Build PositionControllerConfig from the environment"""
        config = PositionControllerConfig()
        for name in ("kp", "ki", "kd", "kg", "min_angle", "max_angle", "tolerance"):
            value = getattr(self, name)
            if value is not None:
                setattr(config, name, value)
        return config

    def coordinator_config(self) -> CoordinatorConfig:
        """Build CoordinatorConfig from the environment"""
        config = CoordinatorConfig()
        if self.settle_ms is not None:
            config.settle_time = self.settle_ms / 1000.0
        if self.source_angle_deg is not None:
            config.source_angle = math.radians(self.source_angle_deg)
        return config

    def runner_config(self) -> RunnerConfig:
        """Build RunnerConfig from the environment"""
        if self.loop_hz <= 0:
            raise ConfigError(f"INDEXER_LOOP_HZ must be positive: {self.loop_hz}")
        return RunnerConfig(loop_interval=1.0 / self.loop_hz)

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate configuration

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        builders = [self.position_config, self.coordinator_config, self.runner_config]
        for build in builders:
            try:
                config = build()
                if hasattr(config, "validate"):
                    config.validate()
            except ConfigError as e:
                errors.append(str(e))

        try:
            position = self.position_config()
            source = self.coordinator_config().source_angle
            if not position.min_angle <= source <= position.max_angle:
                errors.append(
                    f"Source angle {math.degrees(source):.1f} deg is outside the carriage range"
                )
        except ConfigError:
            pass

        return len(errors) == 0, errors

    def print_status(self):
        """Print configuration status"""
        print("Indexer Configuration Status:")
        print(f"  .env loaded: {'Yes' if self._loaded else 'No'}")
        try:
            position = self.position_config()
            coordinator = self.coordinator_config()
            print(f"  PID:         kP={position.kp} kI={position.ki} kD={position.kd}")
            print(f"  Gravity FF:  {position.kg} V")
            print(f"  Range:       {position.min_angle:.3f} .. {position.max_angle:.3f} rad")
            print(f"  Tolerance:   {position.tolerance} rad")
            print(f"  Settle:      {coordinator.settle_time * 1000:.0f} ms")
            print(f"  Source:      {math.degrees(coordinator.source_angle):.1f} deg")
            print(f"  Loop rate:   {self.loop_hz:.0f} Hz")
        except ConfigError as e:
            print(f"  (cannot build configuration: {e})")

        is_valid, errors = self.validate()
        if is_valid:
            print("\n  Status: Configuration is valid")
        else:
            print("\n  Status: Configuration has errors:")
            for error in errors:
                print(f"    - {error}")


# Global config instance
_config = None

def get_config(reload: bool = False) -> IndexerEnvConfig:
    """
    Get the global configuration instance

    Args:
        reload: Force reload of .env file

    Returns:
        IndexerEnvConfig instance
    """
    global _config
    if _config is None or reload:
        _config = IndexerEnvConfig()
    return _config


def main():
    """Command-line utility to check configuration"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Indexer Configuration Utility",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Check current configuration:
    python indexer_config.py

  Validate configuration:
    python indexer_config.py --validate

  Use custom .env file:
    python indexer_config.py --env-file /path/to/.env
        """
    )

    parser.add_argument("--env-file", help="Path to .env file")
    parser.add_argument("--validate", action="store_true",
                       help="Validate configuration and exit with error if invalid")

    args = parser.parse_args()

    config = IndexerEnvConfig(args.env_file)
    config.print_status()

    if args.validate:
        is_valid, errors = config.validate()
        if not is_valid:
            print("\nValidation failed!")
            sys.exit(1)
        else:
            print("\nValidation passed!")


if __name__ == "__main__":
    main()
