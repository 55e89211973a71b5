"""Tests for PositionController"""

import math

import pytest
from indexer.actuators import ActuatorArray
from indexer.hardware import MockEncoder, MockMotor, RecordingTelemetry
from indexer.position_controller import PositionController
from indexer.types import CommandUnit, Drive, PositionControllerConfig, SensorFault


def make_controller(config=None, angle=0.0):
    config = config or PositionControllerConfig()
    rotate = MockMotor("rotate")
    encoder = MockEncoder()
    encoder.set_angle(angle, config)
    actuators = ActuatorArray(MockMotor(), MockMotor(), rotate)
    telemetry = RecordingTelemetry()
    controller = PositionController(actuators, encoder, config, telemetry)
    return controller, encoder, rotate, telemetry


def test_current_angle_inverts_raw_reading():
    """Test raw rotations are scaled and inverted once"""
    config = PositionControllerConfig()
    controller, encoder, _, _ = make_controller(config)

    encoder.raw_position = 0.25
    expected = (-0.25 * config.position_conversion) % config.wrap_period
    assert controller.current_angle() == pytest.approx(expected)
    assert controller.current_angle() == pytest.approx(0.75 * config.wrap_period)


def test_current_angle_not_inverted():
    config = PositionControllerConfig(encoder_inverted=False)
    controller, encoder, _, _ = make_controller(config)

    encoder.raw_position = 0.25
    assert controller.current_angle() == pytest.approx(0.25 * config.wrap_period)


def test_current_velocity_scaling():
    config = PositionControllerConfig()
    controller, encoder, _, _ = make_controller(config)

    encoder.raw_velocity = 60.0
    assert controller.current_velocity() == pytest.approx(-2 * math.pi)


@pytest.mark.parametrize("target, expected", [
    (-1.0, 0.0),
    (10.0, 4.36),
    (2.0, 2.0),
])
def test_target_is_clamped(target, expected):
    """Test out-of-range targets are clamped before control"""
    controller, _, _, _ = make_controller()
    controller.move_to_angle(target)
    assert controller.goal.angle == pytest.approx(expected)


def test_move_issues_voltage_on_rotate():
    """Test output goes to the rotate drive as volts"""
    controller, _, rotate, _ = make_controller(angle=1.0)
    volts = controller.move_to_angle(2.0)

    command = controller.actuators.last_command(Drive.ROTATE)
    assert command.unit is CommandUnit.VOLTS
    assert command.value == pytest.approx(volts)
    assert rotate.volts == pytest.approx(volts)
    assert volts > 0


def test_effort_is_pid_plus_feedforward():
    """Test first-call output: P term plus gravity feedforward"""
    config = PositionControllerConfig(kp=5.0, ki=0.0, kd=0.0, ks=0.1, kg=0.4)
    controller, _, _, _ = make_controller(config, angle=1.0)

    volts = controller.move_to_angle(1.5)
    assert volts == pytest.approx(5.0 * 0.5 + 0.4 * math.cos(1.0), abs=1e-6)


def test_error_takes_short_way_round():
    """Test the error wraps instead of travelling the long way"""
    config = PositionControllerConfig(kp=1.0, kd=0.0, kg=0.0, ks=0.0, max_angle=4.36)
    controller, _, _, _ = make_controller(config, angle=4.3)

    controller.move_to_angle(0.1)
    # 4.3 -> 0.1 crosses the wrap point: about +0.17 rad, not -4.2
    expected = 0.1 + config.wrap_period - 4.3
    assert controller.position_error == pytest.approx(expected, abs=1e-6)
    assert controller.position_error > 0


def test_not_at_goal_without_goal():
    controller, _, _, _ = make_controller()
    assert controller.at_goal() is False


@pytest.mark.parametrize("angle, goal, expected", [
    (1.0, 1.0, True),
    (1.0, 1.019, True),
    (1.0, 1.021, False),
    (1.0, 0.981, True),
    (1.0, 0.979, False),
    # Across the wrap boundary
    (0.005, 4.36, True),
    (0.05, 4.36, False),
])
def test_at_goal_is_wrap_aware(angle, goal, expected):
    """Test at_goal uses the wrap-aware error"""
    config = PositionControllerConfig(min_angle=0.0, max_angle=4.36)
    controller, encoder, _, _ = make_controller(config, angle=angle)
    controller.move_to_angle(goal)

    encoder.set_angle(angle, config)
    error = (goal - angle + config.wrap_period / 2) % config.wrap_period - config.wrap_period / 2
    assert (abs(error) <= config.tolerance) is expected
    assert controller.at_goal() is expected


def test_encoder_unavailable_raises_sensor_fault():
    """Test a missing encoder reading is surfaced"""
    controller, encoder, rotate, _ = make_controller()
    encoder.fail = True

    with pytest.raises(SensorFault):
        controller.current_angle()
    with pytest.raises(SensorFault):
        controller.move_to_angle(1.0)
    assert rotate.history == []


def test_encoder_nan_raises_sensor_fault():
    controller, encoder, _, _ = make_controller()
    encoder.raw_position = float("nan")
    with pytest.raises(SensorFault):
        controller.current_angle()


def test_integrator_is_bounded():
    """Test the integral term stays within its range"""
    config = PositionControllerConfig(kp=0.0, ki=10.0, kd=0.0, kg=0.0, integrator_range=0.5)
    controller, _, _, _ = make_controller(config, angle=0.5)

    for _ in range(200):
        volts = controller.move_to_angle(2.0)
    assert volts == pytest.approx(0.5)


def test_reset_clears_history():
    config = PositionControllerConfig(kp=0.0, ki=1.0, kd=0.0, kg=0.0)
    controller, _, _, _ = make_controller(config, angle=0.5)
    controller.move_to_angle(1.5)
    controller.reset()

    assert controller._integral == 0.0
    assert controller._prev_error is None


def test_profile_limits_setpoint_step():
    """Test a configured profile moves the setpoint gradually"""
    config = PositionControllerConfig(
        kp=1.0, kd=0.0, kg=0.0, ks=0.0,
        max_velocity=1.0, max_acceleration=2.0,
    )
    controller, _, _, _ = make_controller(config, angle=1.0)

    controller.move_to_angle(3.0)
    # One period of acceleration from rest: v = 0.04, step = 0.0008 rad
    assert controller.position_error == pytest.approx(2.0 * 0.02 * 0.02, abs=1e-9)
    assert controller.goal.angle == pytest.approx(3.0)


def test_profile_reaches_goal():
    """Test the profiled setpoint ends exactly on the goal"""
    config = PositionControllerConfig(
        kp=1.0, kd=0.0, kg=0.0, ks=0.0,
        max_velocity=2.0, max_acceleration=4.0,
    )
    controller, _, _, _ = make_controller(config, angle=1.0)

    for _ in range(500):
        controller.move_to_angle(1.5)
    assert controller._setpoint == pytest.approx(1.5)
    assert controller._setpoint_velocity == 0.0


def test_periodic_publishes_telemetry():
    """Test telemetry keys"""
    controller, _, _, telemetry = make_controller(angle=1.0)
    controller.move_to_angle(1.2)
    controller.periodic()

    assert telemetry.values["Current"] == pytest.approx(1.0)
    assert telemetry.values["Goal"] == pytest.approx(1.2)
    assert telemetry.values["Error"] == pytest.approx(0.2)


def test_periodic_survives_encoder_fault():
    controller, encoder, _, telemetry = make_controller()
    encoder.fail = True
    controller.periodic()

    assert "Current" not in telemetry.values
    assert telemetry.values["Goal"] == 0.0
