"""Tests for the .env configuration helper"""

import math
import os

import pytest
import indexer_config
from indexer_config import IndexerEnvConfig
from indexer.types import ConfigError


ENV_VARS = [
    "INDEXER_KP", "INDEXER_KI", "INDEXER_KD", "INDEXER_KG",
    "INDEXER_MIN_ANGLE", "INDEXER_MAX_ANGLE", "INDEXER_TOLERANCE",
    "INDEXER_SETTLE_MS", "INDEXER_SOURCE_ANGLE_DEG", "INDEXER_LOOP_HZ",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    # load_dotenv writes straight into os.environ
    for name in ENV_VARS:
        os.environ.pop(name, None)


def test_defaults_without_env_file():
    config = IndexerEnvConfig()
    assert config.loaded is False

    position = config.position_config()
    assert position.kp == 6.0
    assert position.tolerance == 0.02
    assert config.coordinator_config().settle_time == pytest.approx(0.105)
    assert config.runner_config().loop_interval == pytest.approx(0.02)


def test_env_file_overrides(tmp_path):
    env_file = tmp_path / "indexer.env"
    env_file.write_text(
        "INDEXER_KP=4.5\n"
        "INDEXER_MAX_ANGLE=3.0\n"
        "INDEXER_SETTLE_MS=150\n"
        "INDEXER_SOURCE_ANGLE_DEG=120\n"
        "INDEXER_LOOP_HZ=100\n"
    )

    config = IndexerEnvConfig(str(env_file))
    assert config.loaded is True

    position = config.position_config()
    assert position.kp == 4.5
    assert position.max_angle == 3.0

    coordinator = config.coordinator_config()
    assert coordinator.settle_time == pytest.approx(0.15)
    assert coordinator.source_angle == pytest.approx(math.radians(120))
    assert config.runner_config().loop_interval == pytest.approx(0.01)

    is_valid, errors = config.validate()
    assert is_valid, errors


def test_validate_reports_bad_range(monkeypatch):
    monkeypatch.setenv("INDEXER_MIN_ANGLE", "3.0")
    monkeypatch.setenv("INDEXER_MAX_ANGLE", "1.0")

    is_valid, errors = IndexerEnvConfig().validate()
    assert is_valid is False
    assert any("min_angle" in e for e in errors)


def test_validate_reports_unreachable_source(monkeypatch):
    monkeypatch.setenv("INDEXER_MAX_ANGLE", "2.0")

    is_valid, errors = IndexerEnvConfig().validate()
    assert is_valid is False
    assert any("Source angle" in e for e in errors)


def test_non_numeric_value(monkeypatch):
    monkeypatch.setenv("INDEXER_KP", "fast")

    with pytest.raises(ConfigError):
        IndexerEnvConfig().position_config()
    is_valid, _ = IndexerEnvConfig().validate()
    assert is_valid is False


def test_non_numeric_loop_rate(monkeypatch):
    """Test a bad loop rate is reported, not raised"""
    monkeypatch.setenv("INDEXER_LOOP_HZ", "fast")

    with pytest.raises(ConfigError):
        IndexerEnvConfig().runner_config()
    is_valid, errors = IndexerEnvConfig().validate()
    assert is_valid is False
    assert any("INDEXER_LOOP_HZ" in e for e in errors)
    IndexerEnvConfig().print_status()


def test_bad_loop_rate(monkeypatch):
    monkeypatch.setenv("INDEXER_LOOP_HZ", "0")
    with pytest.raises(ConfigError):
        IndexerEnvConfig().runner_config()


def test_get_config_is_cached():
    first = indexer_config.get_config(reload=True)
    assert indexer_config.get_config() is first
    assert indexer_config.get_config(reload=True) is not first
