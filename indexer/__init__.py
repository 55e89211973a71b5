"""
Carriage Indexer Core - Typed, testable indexer coordination.

This package contains the logic for the game-piece indexer:
- Types: Modes, drives, sensor snapshots, configuration
- Interfaces: Protocols for hardware and collaborators
- SensorGate / ActuatorArray: logical sensors and uniform drive commands
- PositionController: wrap-aware carriage angle control
- ModeCoordinator: per-tick mode arbitration and the feed cycle
- CommandRunner: reference fixed-rate loop
"""

from .types import (
    Mode,
    Drive,
    CommandUnit,
    HapticChannel,
    FeedState,
    SensorState,
    ActuatorCommand,
    IndexerRequest,
    ControlGoal,
    FeedCycleState,
    PositionControllerConfig,
    CoordinatorConfig,
    RunnerConfig,
    IndexerError,
    SensorFault,
    ConfigError,
)
from .interfaces import (
    MotorDrive,
    AbsoluteEncoder,
    DigitalInput,
    IntakeActuator,
    HapticFeedback,
    StatusLight,
    TelemetrySink,
    Clock,
    RequestSource,
)
from .sensor_gate import SensorGate
from .actuators import ActuatorArray
from .position_controller import PositionController
from .coordinator import ModeCoordinator
from .runner import CommandRunner

__all__ = [
    "Mode",
    "Drive",
    "CommandUnit",
    "HapticChannel",
    "FeedState",
    "SensorState",
    "ActuatorCommand",
    "IndexerRequest",
    "ControlGoal",
    "FeedCycleState",
    "PositionControllerConfig",
    "CoordinatorConfig",
    "RunnerConfig",
    "IndexerError",
    "SensorFault",
    "ConfigError",
    "MotorDrive",
    "AbsoluteEncoder",
    "DigitalInput",
    "IntakeActuator",
    "HapticFeedback",
    "StatusLight",
    "TelemetrySink",
    "Clock",
    "RequestSource",
    "SensorGate",
    "ActuatorArray",
    "PositionController",
    "ModeCoordinator",
    "CommandRunner",
]
