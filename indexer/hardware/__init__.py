"""
Mock hardware - For testing without a robot.

Records every command it receives and lets tests set sensor readings,
inject faults and step time by hand.
"""

import logging
import math
from typing import Dict, List, Optional, Tuple

from indexer.types import HapticChannel, PositionControllerConfig


logger = logging.getLogger(__name__)


class MockMotor:
    """Motor controller that remembers what it was told"""

    def __init__(self, name: str = "motor") -> None:
        self.name = name
        self.percent = 0.0
        self.volts = 0.0
        self.history: List[Tuple[str, float]] = []

    def set(self, percent: float) -> None:
        self.percent = percent
        self.volts = 0.0
        self.history.append(("percent", percent))

    def set_voltage(self, volts: float) -> None:
        self.volts = volts
        self.percent = 0.0
        self.history.append(("volts", volts))

    @property
    def is_stopped(self) -> bool:
        return self.percent == 0.0 and self.volts == 0.0


class MockEncoder:
    """Absolute encoder with settable raw readings"""

    def __init__(self, position: Optional[float] = 0.0, velocity: Optional[float] = 0.0) -> None:
        self.raw_position = position
        self.raw_velocity = velocity
        self.fail = False

    def position(self) -> Optional[float]:
        if self.fail:
            return None
        return self.raw_position

    def velocity(self) -> Optional[float]:
        if self.fail:
            return None
        return self.raw_velocity

    def set_angle(self, angle: float, config: PositionControllerConfig) -> None:
        """
        Set the raw reading that corresponds to a carriage angle.

        Args:
            angle: Carriage angle in radians
            config: Scaling the controller will apply
        """
        raw = angle / config.position_conversion
        if config.encoder_inverted:
            raw = -raw
        self.raw_position = raw % (config.wrap_period / config.position_conversion)


class MockDigitalInput:
    """
    Raw digital line.

    Break-beams are active-low, so `blocked=True` sets the raw line low.
    """

    def __init__(self, blocked: bool = False) -> None:
        self.raw = not blocked
        self.fail = False
        self.read_count = 0

    def read(self) -> Optional[bool]:
        self.read_count += 1
        if self.fail:
            return None
        return self.raw

    def set_blocked(self, blocked: bool) -> None:
        self.raw = not blocked


class MockIntake:
    """Intake subsystem that records its roller speeds"""

    def __init__(self) -> None:
        self.top = 0.0
        self.bottom = 0.0
        self.history: List[Tuple[str, float]] = []

    def set_top_speed(self, percent: float) -> None:
        self.top = percent
        self.history.append(("top", percent))

    def set_bottom_speed(self, percent: float) -> None:
        self.bottom = percent
        self.history.append(("bottom", percent))

    def set_speed(self, percent: float) -> None:
        self.top = percent
        self.bottom = percent
        self.history.append(("both", percent))

    def stop(self) -> None:
        self.set_speed(0.0)

    @property
    def is_stopped(self) -> bool:
        return self.top == 0.0 and self.bottom == 0.0


class MockHaptics:
    """Operator rumble that records each signal"""

    def __init__(self) -> None:
        self.signals: List[Tuple[HapticChannel, float]] = []

    def signal(self, channel: HapticChannel, intensity: float) -> None:
        logger.debug(f"[MOCK] Rumble {channel.value} at {intensity:.2f}")
        self.signals.append((channel, intensity))

    def count(self, channel: HapticChannel, active_only: bool = True) -> int:
        """Number of signals sent on a channel (non-zero only by default)"""
        return sum(
            1 for ch, intensity in self.signals
            if ch == channel and (intensity > 0.0 or not active_only)
        )


class MockStatusLight:
    def __init__(self) -> None:
        self.pattern: Optional[float] = None

    def set(self, pattern: float) -> None:
        self.pattern = pattern


class RecordingTelemetry:
    """Telemetry sink that keeps the latest value per key"""

    def __init__(self) -> None:
        self.values: Dict[str, float] = {}

    def publish(self, key: str, value: float) -> None:
        self.values[key] = value


class ManualClock:
    """Clock that only moves when told to"""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


class SimulatedCarriage:
    """
    Very rough carriage model for demos.

    Integrates the rotate motor voltage into an angle and writes the
    matching raw reading back into the encoder.
    """

    def __init__(
        self,
        rotate: MockMotor,
        encoder: MockEncoder,
        config: PositionControllerConfig,
        rad_per_volt_second: float = 0.8,
        angle: float = 0.0,
    ) -> None:
        self.rotate = rotate
        self.encoder = encoder
        self.config = config
        self.rad_per_volt_second = rad_per_volt_second
        self.angle = angle
        self.encoder.set_angle(angle, config)

    def step(self, dt: float) -> None:
        # Gravity holding voltage does not move the carriage
        volts = self.rotate.volts - self.config.kg * math.cos(self.angle)
        velocity = volts * self.rad_per_volt_second
        self.angle = (self.angle + velocity * dt) % self.config.wrap_period
        self.encoder.set_angle(self.angle, self.config)
        rpm = velocity / self.config.velocity_conversion
        self.encoder.raw_velocity = -rpm if self.config.encoder_inverted else rpm
