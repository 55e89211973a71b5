"""Shared fixtures: an indexer wired to mock hardware"""

from types import SimpleNamespace

import pytest

from indexer.actuators import ActuatorArray
from indexer.coordinator import ModeCoordinator
from indexer.hardware import (
    ManualClock,
    MockDigitalInput,
    MockEncoder,
    MockHaptics,
    MockIntake,
    MockMotor,
    MockStatusLight,
    RecordingTelemetry,
)
from indexer.position_controller import PositionController
from indexer.sensor_gate import SensorGate
from indexer.types import CoordinatorConfig, PositionControllerConfig


@pytest.fixture
def position_config():
    """Controller config without a motion profile"""
    return PositionControllerConfig()


@pytest.fixture
def rig(position_config):
    """Everything the coordinator needs, with handles to each mock"""
    top_wheel = MockMotor("top_wheel")
    bottom_wheels = MockMotor("bottom_wheels")
    rotate = MockMotor("rotate")
    encoder = MockEncoder()
    center = MockDigitalInput()
    top = MockDigitalInput()
    intake = MockIntake()
    haptics = MockHaptics()
    light = MockStatusLight()
    telemetry = RecordingTelemetry()
    clock = ManualClock(start=100.0)

    actuators = ActuatorArray(top_wheel, bottom_wheels, rotate)
    position = PositionController(actuators, encoder, position_config, telemetry)
    coordinator = ModeCoordinator(
        sensors=SensorGate(center, top),
        actuators=actuators,
        position=position,
        intake=intake,
        config=CoordinatorConfig(),
        haptics=haptics,
        status_light=light,
        clock=clock,
    )
    coordinator.initialize()

    return SimpleNamespace(
        top_wheel=top_wheel,
        bottom_wheels=bottom_wheels,
        rotate=rotate,
        encoder=encoder,
        center=center,
        top=top,
        intake=intake,
        haptics=haptics,
        light=light,
        telemetry=telemetry,
        clock=clock,
        actuators=actuators,
        position=position,
        coordinator=coordinator,
    )
