"""Tests for mesh transports."""

import asyncio
import os
import stat
import sys

import pytest

from same_mesh_alerter.core.config import ConfigurationError, MeshConfig
from same_mesh_alerter.notifications.meshtastic_cli import MeshtasticCliSink
from same_mesh_alerter.notifications.transport import MeshConnection, create_sink

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses a shell script as the CLI")


def fake_cli(tmp_path, body):
    script = tmp_path / "meshtastic"
    script.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return str(script)


def test_connection_needs_exactly_one_target():
    with pytest.raises(ConfigurationError):
        MeshConnection()
    with pytest.raises(ConfigurationError):
        MeshConnection(port="/dev/ttyUSB0", host="192.168.1.20")

    assert str(MeshConnection(port="/dev/ttyUSB0")) == "serial port /dev/ttyUSB0"
    assert str(MeshConnection(host="radio.local:4403")) == "TCP radio.local:4403"


def test_build_command_serial():
    sink = MeshtasticCliSink(MeshConnection(port="/dev/ttyUSB0"))

    assert sink.build_command("🚨Tornado Warning", 2) == [
        "meshtastic", "--ch-index", "2", "--sendtext", "🚨Tornado Warning", "--ack",
        "--port", "/dev/ttyUSB0",
    ]


def test_build_command_host_without_ack():
    sink = MeshtasticCliSink(MeshConnection(host="192.168.1.20"), cli_path="/opt/mesh/meshtastic", want_ack=False)

    assert sink.build_command("hi", 0) == [
        "/opt/mesh/meshtastic", "--ch-index", "0", "--sendtext", "hi", "--host", "192.168.1.20",
    ]


@posix_only
def test_cli_delivery_success(tmp_path):
    log = tmp_path / "args.txt"
    cli = fake_cli(tmp_path, f'printf "%s\\n" "$@" > "{log}"')
    sink = MeshtasticCliSink(MeshConnection(port="/dev/ttyUSB0"), cli_path=cli)

    result = asyncio.run(sink.deliver("Tornado Warning, Location: Exampleton", 3))

    assert result.success
    assert log.read_text(encoding="utf-8").splitlines() == [
        "--ch-index", "3", "--sendtext", "Tornado Warning, Location: Exampleton", "--ack",
        "--port", "/dev/ttyUSB0",
    ]


@posix_only
def test_cli_nonzero_exit_is_failure(tmp_path):
    cli = fake_cli(tmp_path, 'echo "Error connecting to /dev/ttyUSB0" >&2; exit 1')
    sink = MeshtasticCliSink(MeshConnection(port="/dev/ttyUSB0"), cli_path=cli)

    result = asyncio.run(sink.deliver("hello", 0))

    assert not result.success
    assert "code 1" in result.error
    assert "Error connecting" in result.error


@posix_only
def test_cli_timeout_is_failure(tmp_path):
    cli = fake_cli(tmp_path, "exec sleep 30")
    sink = MeshtasticCliSink(MeshConnection(port="/dev/ttyUSB0"), cli_path=cli, timeout=0.2)

    result = asyncio.run(sink.deliver("hello", 0))

    assert not result.success
    assert "timed out" in result.error


def test_cli_missing_is_failure(tmp_path):
    sink = MeshtasticCliSink(MeshConnection(port="/dev/ttyUSB0"), cli_path=os.fspath(tmp_path / "missing"))

    result = asyncio.run(sink.deliver("hello", 0))

    assert not result.success
    assert "not found" in result.error


def test_create_sink_cli_backend():
    sink = create_sink(MeshConfig(port="/dev/ttyUSB0", cli_path="mesh-cli", command_timeout=10))

    assert isinstance(sink, MeshtasticCliSink)
    assert sink.cli_path == "mesh-cli"
    assert sink.timeout == 10


def test_create_sink_requires_connection():
    with pytest.raises(ConfigurationError):
        create_sink(MeshConfig())
