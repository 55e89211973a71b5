"""Tests for indexer types"""

import math

import pytest
from indexer.types import (
    CARRIAGE_WRAP_PERIOD,
    ActuatorCommand,
    CommandUnit,
    ConfigError,
    CoordinatorConfig,
    Drive,
    FeedCycleState,
    FeedState,
    IndexerRequest,
    Mode,
    PositionControllerConfig,
    SensorFault,
    IndexerError,
)


def test_request_effective_mode():
    """Test mode passes through without override"""
    assert IndexerRequest(mode=Mode.AMP).effective_mode is Mode.AMP
    assert IndexerRequest(mode=Mode.SPEAKER).effective_mode is Mode.SPEAKER


def test_source_override_wins():
    """Test source override replaces any mode"""
    for mode in (Mode.AMP, Mode.SPEAKER, None):
        request = IndexerRequest(mode=mode, source_override=True)
        assert request.effective_mode is Mode.SOURCE_LOAD


def test_request_without_mode():
    """Test empty request has no effective mode"""
    request = IndexerRequest()
    assert request.effective_mode is None


def test_actuator_command_stop():
    """Test stop command creation"""
    stop = ActuatorCommand.stop(Drive.ROTATE)
    assert stop.is_zero is True
    assert stop.drive is Drive.ROTATE
    assert stop.unit is CommandUnit.PERCENT


def test_feed_cycle_settle_needs_edge():
    """Test settle never elapses without a recorded edge"""
    feed = FeedCycleState()
    assert feed.settle_elapsed(now=1000.0, settle_time=0.105) is False

    feed.edge_time = 10.0
    assert feed.settle_elapsed(now=10.1, settle_time=0.105) is False
    assert feed.settle_elapsed(now=10.11, settle_time=0.105) is True


def test_feed_cycle_reset_keeps_confirmations():
    """Test reset clears tracking but not the confirmation count"""
    feed = FeedCycleState(state=FeedState.CENTER_CONFIRMED_STOPPED, edge_time=5.0, confirmations=2)
    feed.reset()
    assert feed.state is FeedState.IDLE_OR_FEEDING
    assert feed.edge_time is None
    assert feed.confirmations == 2


def test_position_config_defaults():
    """Test carriage scaling defaults"""
    config = PositionControllerConfig()
    assert config.wrap_period == pytest.approx(2 * math.pi * 16 / 23)
    assert config.wrap_period == pytest.approx(4.367, abs=0.005)
    assert config.position_conversion == CARRIAGE_WRAP_PERIOD
    assert config.tolerance == 0.02
    assert config.encoder_inverted is True
    assert config.has_profile is False


def test_position_config_validation():
    """Test inconsistent controller configs are rejected"""
    with pytest.raises(ConfigError):
        PositionControllerConfig(min_angle=2.0, max_angle=1.0).validate()

    with pytest.raises(ConfigError):
        PositionControllerConfig(wrap_period=0.0).validate()

    with pytest.raises(ConfigError):
        PositionControllerConfig(max_velocity=-1.0, max_acceleration=1.0).validate()


def test_coordinator_config_defaults():
    """Test feed cycle defaults"""
    config = CoordinatorConfig()
    assert config.settle_time == pytest.approx(0.105)
    assert config.source_angle == pytest.approx(math.radians(140))
    assert config.speaker_feed_percent == 0.3


def test_coordinator_config_validation():
    with pytest.raises(ConfigError):
        CoordinatorConfig(settle_time=-0.1).validate()

    with pytest.raises(ConfigError):
        CoordinatorConfig(haptic_intensity=1.5).validate()


def test_error_hierarchy():
    assert issubclass(SensorFault, IndexerError)
    assert issubclass(ConfigError, IndexerError)


def test_mode_enum():
    """Test mode enum values"""
    assert {m.value for m in Mode} == {"amp", "speaker", "source_load"}
