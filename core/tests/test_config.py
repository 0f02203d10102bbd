"""Tests for configuration loading from the config file and environment."""

import json

import pytest

from stepflow import config
from stepflow.config import RetryConfig


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "configuration.json"
    monkeypatch.setattr(config, "STEPFLOW_CONFIG_FILE", path)
    for var in (
        "STEPFLOW_RETRY_MAX_ATTEMPTS",
        "STEPFLOW_RETRY_INTERVAL",
        "STEPFLOW_RETRY_EXPONENTIAL",
        "STEPFLOW_RETRY_MAX_DELAY",
        "STEPFLOW_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    return path


def test_defaults_without_config_file(config_file):
    retry = RetryConfig()

    assert config.get_stepflow_config() == {}
    assert retry.max_attempts == config.DEFAULT_MAX_ATTEMPTS
    assert retry.retry_interval == config.DEFAULT_RETRY_INTERVAL
    assert retry.retry_exponential == config.DEFAULT_RETRY_EXPONENTIAL
    assert retry.max_delay == config.DEFAULT_RETRY_MAX_DELAY
    assert config.get_log_level() == "INFO"


def test_values_from_config_file(config_file):
    config_file.write_text(
        json.dumps({"retry": {"max_attempts": 6, "interval": 0.5}, "logging": {"level": "DEBUG"}})
    )

    retry = RetryConfig()

    assert retry.max_attempts == 6
    assert retry.retry_interval == 0.5
    assert config.get_log_level() == "DEBUG"


def test_environment_overrides_config_file(config_file, monkeypatch):
    config_file.write_text(json.dumps({"retry": {"max_attempts": 6}}))
    monkeypatch.setenv("STEPFLOW_RETRY_MAX_ATTEMPTS", "2")
    monkeypatch.setenv("STEPFLOW_RETRY_MAX_DELAY", "10")

    retry = RetryConfig()

    assert retry.max_attempts == 2
    assert retry.max_delay == 10.0


def test_invalid_values_fall_back_to_defaults(config_file, monkeypatch):
    config_file.write_text("{not json")
    monkeypatch.setenv("STEPFLOW_RETRY_INTERVAL", "soon")

    assert config.get_stepflow_config() == {}
    assert RetryConfig().retry_interval == config.DEFAULT_RETRY_INTERVAL


def test_delay_grows_exponentially_up_to_cap():
    retry = RetryConfig(max_attempts=6, retry_interval=2.0, retry_exponential=3.0, max_delay=100.0)

    assert [retry.delay_for(n) for n in range(1, 5)] == [6.0, 18.0, 54.0, 100.0]
