"""Tests for the meshtastic library transport."""

import asyncio

import pytest

from same_mesh_alerter.core.config import MeshConfig
from same_mesh_alerter.notifications import meshtastic_api
from same_mesh_alerter.notifications.meshtastic_api import MeshtasticApiSink
from same_mesh_alerter.notifications.transport import MeshConnection, create_sink


class FakeInterface:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.sent = []
        self.closed = False
        self.fail = False
        FakeInterface.instances.append(self)

    def sendText(self, text, wantAck=False, channelIndex=0):
        if self.fail:
            raise BrokenPipeError("device disconnected")
        self.sent.append((text, wantAck, channelIndex))

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def fake_interfaces(monkeypatch):
    FakeInterface.instances = []
    monkeypatch.setattr(meshtastic_api, "SerialInterface", FakeInterface)
    monkeypatch.setattr(meshtastic_api, "TCPInterface", FakeInterface)
    return FakeInterface


def test_serial_send():
    sink = MeshtasticApiSink(MeshConnection(port="/dev/ttyUSB0"))

    async def send_twice():
        first = await sink.deliver("hello", 2)
        second = await sink.deliver("again", 2)
        await sink.close()
        return first, second

    first, second = asyncio.run(send_twice())

    assert first.success and second.success
    assert len(FakeInterface.instances) == 1
    interface = FakeInterface.instances[0]
    assert interface.kwargs == {"devPath": "/dev/ttyUSB0"}
    assert interface.sent == [("hello", True, 2), ("again", True, 2)]
    assert interface.closed


@pytest.mark.parametrize("host, hostname, port", [
    ("192.168.1.20", "192.168.1.20", 4403),
    ("radio.local:4404", "radio.local", 4404),
])
def test_tcp_connection(host, hostname, port):
    sink = MeshtasticApiSink(MeshConnection(host=host), want_ack=False)

    asyncio.run(sink.deliver("hello", 0))

    interface = FakeInterface.instances[0]
    assert interface.kwargs == {"hostname": hostname, "portNumber": port}
    assert interface.sent == [("hello", False, 0)]


def test_failure_reconnects_on_next_attempt():
    sink = MeshtasticApiSink(MeshConnection(port="/dev/ttyUSB0"))

    async def fail_then_send():
        await sink.deliver("warmup", 0)
        FakeInterface.instances[0].fail = True
        failed = await sink.deliver("hello", 0)
        retried = await sink.deliver("hello", 0)
        return failed, retried

    failed, retried = asyncio.run(fail_then_send())

    assert not failed.success
    assert "device disconnected" in failed.error
    assert FakeInterface.instances[0].closed
    assert retried.success
    assert len(FakeInterface.instances) == 2


def test_create_sink_api_backend():
    sink = create_sink(MeshConfig(backend="api", host="radio.local"))
    assert isinstance(sink, MeshtasticApiSink)
