"""
PositionController - Closed-loop carriage angle control.

PID on a continuous (wrapping) angle plus an arm feedforward, issued to the
rotate drive as a voltage. Optionally the PID chases a trapezoid-profiled
setpoint instead of jumping straight to the goal.

The carriage angle is read from an absolute encoder mounted through the
carriage gearing, so one encoder turn covers `wrap_period` radians and the
angle domain wraps at that value rather than at 2*pi.
"""

import logging
import math
from typing import Optional

from .actuators import ActuatorArray
from .interfaces import AbsoluteEncoder, NullTelemetry, TelemetrySink
from .types import ControlGoal, Drive, PositionControllerConfig, SensorFault


logger = logging.getLogger(__name__)


def _sign(value: float) -> float:
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0


def _clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp value to range [min_val, max_val]"""
    return max(min_val, min(max_val, value))


class PositionController:
    """
    Moves the carriage to a target angle and reports when it is there.

    Call `move_to_angle()` once per tick while the angle should be held;
    the controller does not run on its own.
    """

    def __init__(
        self,
        actuators: ActuatorArray,
        encoder: AbsoluteEncoder,
        config: PositionControllerConfig,
        telemetry: Optional[TelemetrySink] = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            actuators: Drives (only ROTATE is used)
            encoder: Carriage absolute encoder
            config: Gains, limits and encoder scaling
            telemetry: Optional sink for periodic()

        Raises:
            ConfigError: If the configuration is inconsistent
        """
        config.validate()
        self.actuators = actuators
        self.encoder = encoder
        self.config = config
        self.telemetry: TelemetrySink = telemetry or NullTelemetry()

        self._goal: Optional[ControlGoal] = None
        self._integral = 0.0
        self._prev_error: Optional[float] = None
        self._position_error = 0.0

        # Profiled setpoint (only used when a profile is configured)
        self._setpoint: Optional[float] = None
        self._setpoint_velocity = 0.0

    @property
    def goal(self) -> Optional[ControlGoal]:
        """Current goal, after clamping"""
        return self._goal

    @property
    def position_error(self) -> float:
        """Wrap-aware error from the last calculation (radians)"""
        return self._position_error

    def current_angle(self) -> float:
        """
        Read the carriage angle.

        Returns:
            Angle in radians within [0, wrap_period)

        Raises:
            SensorFault: If the encoder cannot report a position
        """
        raw = self._read(self.encoder.position, "position")
        angle = raw * self.config.position_conversion
        if self.config.encoder_inverted:
            angle = -angle
        return angle % self.config.wrap_period

    def current_velocity(self) -> float:
        """
        Read the carriage angular velocity.

        Returns:
            Velocity in rad/s, same sign convention as current_angle()

        Raises:
            SensorFault: If the encoder cannot report a velocity
        """
        raw = self._read(self.encoder.velocity, "velocity")
        velocity = raw * self.config.velocity_conversion
        return -velocity if self.config.encoder_inverted else velocity

    def move_to_angle(self, target: float) -> float:
        """
        Drive the carriage toward a target angle for one tick.

        Args:
            target: Desired angle in radians (clamped to the allowed range)

        Returns:
            Voltage issued to the rotate drive

        Raises:
            SensorFault: If the encoder cannot report a position
        """
        angle = _clamp(target, self.config.min_angle, self.config.max_angle)
        if angle != target:
            logger.debug(f"Target {target:.3f} rad clamped to {angle:.3f} rad")

        if self._goal is None or self._goal.angle != angle:
            self._goal = ControlGoal(angle=angle, tolerance=self.config.tolerance)

        measurement = self.current_angle()

        if self.config.has_profile:
            setpoint = self._advance_setpoint(measurement)
        else:
            setpoint = angle

        volts = self._pid(measurement, setpoint) + self._feedforward(measurement, 0.0)
        self.actuators.set_volts(Drive.ROTATE, volts)
        return volts

    def at_goal(self) -> bool:
        """
        Check if the carriage is within tolerance of the goal.

        Returns:
            True if the wrap-aware error is within tolerance, False if no
            goal has been set yet

        Raises:
            SensorFault: If the encoder cannot report a position
        """
        if self._goal is None:
            return False
        error = self._wrap_error(self._goal.angle - self.current_angle())
        return abs(error) <= self._goal.tolerance

    def reset(self) -> None:
        """Clear integrator, derivative history and profile state"""
        self._integral = 0.0
        self._prev_error = None
        self._position_error = 0.0
        self._setpoint = None
        self._setpoint_velocity = 0.0

    def periodic(self) -> None:
        """Publish current angle, goal and error to telemetry"""
        try:
            self.telemetry.publish("Current", self.current_angle())
        except SensorFault as e:
            logger.debug(f"Skipping angle telemetry: {e}")
        goal = self._goal.angle if self._goal is not None else 0.0
        self.telemetry.publish("Goal", goal)
        self.telemetry.publish("Error", self._position_error)

    def _wrap_error(self, error: float) -> float:
        """Map an angular difference into [-period/2, period/2)"""
        half = self.config.wrap_period / 2.0
        return ((error + half) % self.config.wrap_period) - half

    def _pid(self, measurement: float, setpoint: float) -> float:
        cfg = self.config
        error = self._wrap_error(setpoint - measurement)
        self._position_error = error

        if cfg.ki != 0.0:
            limit = cfg.integrator_range / abs(cfg.ki)
            self._integral = _clamp(self._integral + error * cfg.period, -limit, limit)

        derivative = 0.0
        if self._prev_error is not None:
            derivative = (error - self._prev_error) / cfg.period
        self._prev_error = error

        return cfg.kp * error + cfg.ki * self._integral + cfg.kd * derivative

    def _feedforward(self, angle: float, velocity: float) -> float:
        """Arm feedforward: static friction, gravity and velocity terms"""
        cfg = self.config
        return cfg.ks * _sign(velocity) + cfg.kg * math.cos(angle) + cfg.kv * velocity

    def _advance_setpoint(self, measurement: float) -> float:
        """
        Step the trapezoid profile one period toward the goal.

        Goal and setpoint are first moved to their closest equivalents
        around the measurement so the profile takes the short way round.
        """
        cfg = self.config
        if self._setpoint is None:
            self._setpoint = measurement
            self._setpoint_velocity = 0.0

        goal = measurement + self._wrap_error(self._goal.angle - measurement)
        position = measurement + self._wrap_error(self._setpoint - measurement)
        velocity = self._setpoint_velocity

        remaining = goal - position
        direction = _sign(remaining)
        # Fastest speed that can still stop at the goal
        cruise = min(cfg.max_velocity, math.sqrt(2.0 * cfg.max_acceleration * abs(remaining)))
        max_step = cfg.max_acceleration * cfg.period
        velocity += _clamp(direction * cruise - velocity, -max_step, max_step)
        position += velocity * cfg.period

        if direction == 0.0 or _sign(goal - position) != direction:
            position = goal
            velocity = 0.0

        self._setpoint = position
        self._setpoint_velocity = velocity
        return position

    @staticmethod
    def _read(reader, name: str) -> float:
        try:
            value = reader()
        except SensorFault:
            raise
        except Exception as e:
            raise SensorFault(f"encoder {name} read failed: {e}") from e

        if value is None or math.isnan(value):
            raise SensorFault(f"encoder {name} unavailable")
        return float(value)
