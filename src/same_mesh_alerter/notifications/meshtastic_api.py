"""
Mesh transport backed by the meshtastic Python library.
"""

import asyncio
import logging
from typing import Any, Optional

from meshtastic.serial_interface import SerialInterface
from meshtastic.tcp_interface import TCPInterface

from .transport import MeshConnection, TransportResult, TransportSink

logger = logging.getLogger(__name__)

DEFAULT_TCP_PORT = 4403


class MeshtasticApiSink(TransportSink):
    """Sends messages through a persistent meshtastic interface."""

    name = "meshtastic-api"

    def __init__(self, connection: MeshConnection, want_ack: bool = True):
        self.connection = connection
        self.want_ack = want_ack
        self._interface: Optional[Any] = None

    def _connect(self) -> Any:
        if self.connection.port:
            interface = SerialInterface(devPath=self.connection.port)
        else:
            host, _, port = self.connection.host.partition(":")
            interface = TCPInterface(hostname=host, portNumber=int(port) if port else DEFAULT_TCP_PORT)
        logger.info(f"Connected to device via {self.connection}")
        return interface

    def _send(self, text: str, channel: int) -> None:
        if self._interface is None:
            self._interface = self._connect()
        self._interface.sendText(text, wantAck=self.want_ack, channelIndex=channel)

    def _drop_interface(self) -> None:
        interface, self._interface = self._interface, None
        if interface is None:
            return
        try:
            interface.close()
        except Exception as e:
            logger.debug(f"Error closing meshtastic interface: {e}")

    async def deliver(self, text: str, channel: int) -> TransportResult:
        try:
            await asyncio.to_thread(self._send, text, channel)
        except Exception as e:
            # Reconnect on the next attempt
            await asyncio.to_thread(self._drop_interface)
            return TransportResult.failed(f"{type(e).__name__}: {e}")
        return TransportResult.ok()

    async def close(self) -> None:
        await asyncio.to_thread(self._drop_interface)
