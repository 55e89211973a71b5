"""
Indexer interfaces (protocols) for hardware and collaborators.

These define the contracts the indexer consumes. Drivers, the intake
subsystem, operator feedback and telemetry live outside this package;
anything that has these methods can be plugged in.
"""

import time
from typing import Protocol, Optional

from .types import HapticChannel, IndexerRequest


class MotorDrive(Protocol):
    """
    Interface for a single motor controller.

    Inversion and current limits are configured by whoever builds the
    driver, not here.
    """

    def set(self, percent: float) -> None:
        """
        Command output as a fraction of max (-1.0 to 1.0).

        Args:
            percent: Duty cycle fraction
        """
        ...

    def set_voltage(self, volts: float) -> None:
        """
        Command output as a voltage.

        Args:
            volts: Voltage to apply
        """
        ...


class AbsoluteEncoder(Protocol):
    """Interface for the carriage absolute encoder (raw units)"""

    def position(self) -> Optional[float]:
        """
        Read raw absolute position.

        Returns:
            Position in encoder rotations [0, 1), or None if unavailable
        """
        ...

    def velocity(self) -> Optional[float]:
        """
        Read raw velocity.

        Returns:
            Velocity in RPM, or None if unavailable
        """
        ...


class DigitalInput(Protocol):
    """Interface for a raw digital line (break-beam sensors are active-low)"""

    def read(self) -> Optional[bool]:
        """
        Read the raw line level.

        Returns:
            Raw level, or None if the input cannot be read
        """
        ...


class IntakeActuator(Protocol):
    """Interface for the upstream intake subsystem"""

    def set_top_speed(self, percent: float) -> None:
        ...

    def set_bottom_speed(self, percent: float) -> None:
        ...

    def set_speed(self, percent: float) -> None:
        """Set both intake rollers to the same speed"""
        ...

    def stop(self) -> None:
        ...


class HapticFeedback(Protocol):
    """Interface for operator controller rumble"""

    def signal(self, channel: HapticChannel, intensity: float) -> None:
        """
        Rumble one operator controller.

        Args:
            channel: Which operator controller
            intensity: 0.0 (off) to 1.0 (full)
        """
        ...


class StatusLight(Protocol):
    """Interface for the robot status light (LED strip pattern)"""

    def set(self, pattern: float) -> None:
        ...


class TelemetrySink(Protocol):
    """Write-only numeric telemetry"""

    def publish(self, key: str, value: float) -> None:
        ...


class Clock(Protocol):
    """Monotonic time source in seconds"""

    def now(self) -> float:
        ...


class RequestSource(Protocol):
    """
    Interface for per-tick request sources (command layer, scripts, etc.).

    All request sources must implement these methods to be usable
    by the CommandRunner.
    """

    async def start(self) -> None:
        """Called once before the first tick"""
        ...

    async def stop(self) -> None:
        """Called once after the last tick"""
        ...

    async def read_request(self) -> Optional[IndexerRequest]:
        """
        Read the request for this tick.

        This should be non-blocking and return immediately.

        Returns:
            IndexerRequest, or None if no mode is selected
        """
        ...


class NullTelemetry:
    """Telemetry sink that drops everything"""

    def publish(self, key: str, value: float) -> None:
        pass


class MonotonicClock:
    """Clock backed by time.monotonic()"""

    def now(self) -> float:
        return time.monotonic()
