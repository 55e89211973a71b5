"""
Core data types for the carriage indexer.

All the data structures that flow through one control tick, fully typed.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class IndexerError(Exception):
    """Base class for indexer errors"""
    pass


class SensorFault(IndexerError):
    """A sensor could not report a valid reading"""
    pass


class ConfigError(IndexerError):
    """Configuration values are inconsistent"""
    pass


class Mode(Enum):
    """Requested operating mode - exactly one is authoritative per tick"""
    AMP = "amp"
    SPEAKER = "speaker"
    SOURCE_LOAD = "source_load"


class Drive(Enum):
    """Drives owned by the indexer"""
    TOP_WHEEL = "top_wheel"
    BOTTOM_WHEELS = "bottom_wheels"
    ROTATE = "rotate"


FEED_WHEELS = (Drive.TOP_WHEEL, Drive.BOTTOM_WHEELS)


class CommandUnit(Enum):
    """Unit of an actuator command"""
    PERCENT = "percent"
    VOLTS = "volts"


class HapticChannel(Enum):
    """Operator feedback channels (one per controller)"""
    PRIMARY = "primary"
    SECONDARY = "secondary"


class FeedState(Enum):
    """Feed cycle state machine states"""
    IDLE_OR_FEEDING = "idle_or_feeding"
    CENTER_DETECTED_PENDING_SETTLE = "center_detected_pending_settle"
    CENTER_CONFIRMED_STOPPED = "center_confirmed_stopped"
    SENSOR_FAULT = "sensor_fault"


@dataclass(frozen=True)
class SensorState:
    """
    Logical break-beam state captured once per tick.

    True means a game piece is blocking the beam.
    """
    center_broken: bool
    top_broken: bool


@dataclass(frozen=True)
class ActuatorCommand:
    """Last command issued to a single drive"""
    drive: Drive
    value: float
    unit: CommandUnit

    @property
    def is_zero(self) -> bool:
        return self.value == 0.0

    @classmethod
    def stop(cls, drive: Drive) -> "ActuatorCommand":
        """Create a zero command for a drive"""
        return cls(drive=drive, value=0.0, unit=CommandUnit.PERCENT)


@dataclass
class IndexerRequest:
    """
    Per-tick request from the command layer.

    `source_override` wins over `mode`; a request without any mode is a
    no-op tick.
    """
    mode: Optional[Mode] = None
    source_override: bool = False

    @property
    def effective_mode(self) -> Optional[Mode]:
        """Mode the coordinator actually dispatches on"""
        if self.source_override:
            return Mode.SOURCE_LOAD
        return self.mode


@dataclass
class ControlGoal:
    """Target angle (radians) and the tolerance that counts as reached"""
    angle: float
    tolerance: float


@dataclass
class FeedCycleState:
    """
    Edge/settle tracking for the SPEAKER feed cycle.

    `edge_time` is the clock reading when the center beam was first seen
    broken; it is only meaningful while pending settle.
    """
    state: FeedState = FeedState.IDLE_OR_FEEDING
    edge_time: Optional[float] = None
    confirmations: int = 0

    def reset(self) -> None:
        self.state = FeedState.IDLE_OR_FEEDING
        self.edge_time = None

    def settle_elapsed(self, now: float, settle_time: float) -> bool:
        """True once an edge was recorded and the settle window has passed"""
        if self.edge_time is None:
            return False
        return now - self.edge_time >= settle_time


# Carriage gearing: one encoder turn moves the carriage 16/23 of a turn
CARRIAGE_WRAP_PERIOD = 2.0 * math.pi / 23.0 * 16.0


@dataclass
class PositionControllerConfig:
    """Configuration for the PositionController"""
    kp: float = 6.0                     # Volts per radian of error
    ki: float = 0.0
    kd: float = 0.1
    integrator_range: float = 1.0       # Max |integral term| contribution (V)
    period: float = 0.02                # Loop period used for I and D terms (s)
    ks: float = 0.1                     # Static friction feedforward (V)
    kg: float = 0.35                    # Gravity feedforward (V)
    kv: float = 0.0                     # Velocity feedforward (V per rad/s)
    min_angle: float = 0.0
    max_angle: float = 4.36
    wrap_period: float = CARRIAGE_WRAP_PERIOD
    tolerance: float = 0.02
    position_conversion: float = CARRIAGE_WRAP_PERIOD    # rad per encoder rotation
    velocity_conversion: float = 2.0 * math.pi / 60.0   # rad/s per RPM
    encoder_inverted: bool = True
    max_velocity: Optional[float] = None       # Trapezoid profile (rad/s)
    max_acceleration: Optional[float] = None   # Trapezoid profile (rad/s^2)

    @property
    def has_profile(self) -> bool:
        """Check if a trapezoid motion profile is configured"""
        return self.max_velocity is not None and self.max_acceleration is not None

    def validate(self) -> None:
        """Raise ConfigError if the configuration is inconsistent"""
        if self.min_angle > self.max_angle:
            raise ConfigError(
                f"min_angle ({self.min_angle}) is greater than max_angle ({self.max_angle})"
            )
        if self.wrap_period <= 0:
            raise ConfigError(f"wrap_period must be positive: {self.wrap_period}")
        if self.tolerance < 0:
            raise ConfigError(f"tolerance must not be negative: {self.tolerance}")
        if self.period <= 0:
            raise ConfigError(f"period must be positive: {self.period}")
        if self.has_profile and (self.max_velocity <= 0 or self.max_acceleration <= 0):
            raise ConfigError("profile constraints must be positive")


@dataclass
class CoordinatorConfig:
    """Configuration for the ModeCoordinator"""
    settle_time: float = 0.105                  # Center beam confirm window (s)
    source_angle: float = math.radians(140)     # Carriage angle for source loading
    speaker_feed_percent: float = 0.3
    speaker_intake_top: float = 0.4
    speaker_intake_bottom: float = 0.4
    amp_top_wheel_percent: float = -0.22
    amp_bottom_wheels_percent: float = 0.22
    amp_intake_top: float = -0.4
    amp_intake_bottom: float = -0.7
    haptic_intensity: float = 1.0
    clear_feedback_on_end: bool = True
    ready_light_pattern: float = 0.5            # Status light while waiting for a piece

    def validate(self) -> None:
        """Raise ConfigError if the configuration is inconsistent"""
        if self.settle_time < 0:
            raise ConfigError(f"settle_time must not be negative: {self.settle_time}")
        if not 0.0 <= self.haptic_intensity <= 1.0:
            raise ConfigError(f"haptic_intensity out of range: {self.haptic_intensity}")


@dataclass
class RunnerConfig:
    """Configuration for the CommandRunner"""
    loop_interval: float = 0.02        # Main loop interval (50Hz)
    max_consecutive_errors: int = 5    # Give up after this many failed ticks in a row
