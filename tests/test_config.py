"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from same_mesh_alerter.core.config import AppConfig, DeliveryConfig, MeshConfig

DEFAULT_YAML = Path(__file__).resolve().parents[1] / "config" / "default.yaml"


def test_defaults():
    config = AppConfig()

    assert config.mesh.alert_channel == 0
    assert config.mesh.test_channel is None
    assert config.mesh.backend == "cli"
    assert config.decoder.command == ["samedec", "-r", "{rate}"]
    assert config.decoder.sample_rate == 48000
    assert config.delivery.fragment_bytes == 75
    assert config.delivery.min_interval_seconds == 20.0
    assert config.delivery.max_retries == 3
    assert config.delivery.retry_delay_seconds == 5.0
    assert config.delivery.overflow_policy == "split"
    assert config.filtering.locations == []


@pytest.mark.parametrize("channel", [-1, 8, 10])
def test_channel_out_of_range(channel):
    with pytest.raises(ValidationError):
        MeshConfig(alert_channel=channel)
    with pytest.raises(ValidationError):
        MeshConfig(test_channel=channel)


def test_port_and_host_are_exclusive():
    with pytest.raises(ValidationError):
        MeshConfig(port="/dev/ttyUSB0", host="192.168.1.20")


def test_unknown_backend():
    with pytest.raises(ValidationError):
        MeshConfig(backend="carrier-pigeon")


def test_unknown_overflow_policy():
    with pytest.raises(ValidationError):
        DeliveryConfig(overflow_policy="drop")


def test_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "mesh:\n"
        "  host: 192.168.1.20\n"
        "  test_channel: 1\n"
        "delivery:\n"
        "  min_interval_seconds: 30\n"
        "filtering:\n"
        "  locations: ['039035']\n",
        encoding="utf-8",
    )

    config = AppConfig.from_yaml(path)

    assert config.mesh.host == "192.168.1.20"
    assert config.mesh.test_channel == 1
    assert config.delivery.min_interval_seconds == 30
    assert config.filtering.locations == ["039035"]


def test_from_yaml_missing_file(tmp_path):
    assert AppConfig.from_yaml(tmp_path / "missing.yaml").mesh.alert_channel == 0


def test_empty_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    assert AppConfig.from_yaml(str(path)).delivery.fragment_bytes == 75


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SAME_MESH_MESH__PORT", "/dev/ttyACM0")
    monkeypatch.setenv("SAME_MESH_DELIVERY__MAX_RETRIES", "5")

    config = AppConfig()

    assert config.mesh.port == "/dev/ttyACM0"
    assert config.delivery.max_retries == 5


def test_environment_beats_shipped_yaml(monkeypatch):
    monkeypatch.setenv("SAME_MESH_MESH__PORT", "/dev/ttyACM0")
    monkeypatch.setenv("SAME_MESH_DELIVERY__MIN_INTERVAL_SECONDS", "30")

    config = AppConfig.from_yaml(DEFAULT_YAML)

    assert config.mesh.port == "/dev/ttyACM0"
    assert config.delivery.min_interval_seconds == 30
    # Untouched keys keep the file's values
    assert config.delivery.fragment_bytes == 75


def test_environment_host_replaces_yaml_port(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("mesh:\n  port: /dev/ttyUSB0\n  alert_channel: 2\n", encoding="utf-8")
    monkeypatch.setenv("SAME_MESH_MESH__HOST", "192.168.1.20")

    config = AppConfig.from_yaml(path)

    assert config.mesh.host == "192.168.1.20"
    assert config.mesh.port is None
    assert config.mesh.alert_channel == 2


def test_environment_merges_into_yaml_section(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(
        "delivery:\n"
        "  min_interval_seconds: 30\n"
        "  max_retries: 2\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("SAME_MESH_DELIVERY__MIN_INTERVAL_SECONDS", "45")

    config = AppConfig.from_yaml(path)

    assert config.delivery.min_interval_seconds == 45
    assert config.delivery.max_retries == 2


def test_yaml_does_not_leak_into_later_configs(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("mesh:\n  alert_channel: 4\n", encoding="utf-8")

    assert AppConfig.from_yaml(path).mesh.alert_channel == 4
    assert AppConfig().mesh.alert_channel == 0
