"""
Mesh transport backed by the meshtastic command-line tool.
"""

import asyncio
import logging
from typing import List

from .transport import MeshConnection, TransportResult, TransportSink

logger = logging.getLogger(__name__)


class MeshtasticCliSink(TransportSink):
    """Sends each message by running ``meshtastic --sendtext``."""

    name = "meshtastic-cli"

    def __init__(
        self,
        connection: MeshConnection,
        cli_path: str = "meshtastic",
        timeout: int = 60,
        want_ack: bool = True,
    ):
        """
        Initialize the CLI transport.

        Args:
            connection: Serial port or host of the radio
            cli_path: meshtastic executable
            timeout: Seconds to wait for one invocation
            want_ack: Request an acknowledgment from the mesh
        """
        self.connection = connection
        self.cli_path = cli_path
        self.timeout = timeout
        self.want_ack = want_ack

    def build_command(self, text: str, channel: int) -> List[str]:
        """Build the meshtastic argument list for one message."""
        command = [self.cli_path, "--ch-index", str(channel), "--sendtext", text]
        if self.want_ack:
            command.append("--ack")
        if self.connection.port:
            command.extend(["--port", self.connection.port])
        else:
            command.extend(["--host", self.connection.host])
        return command

    async def deliver(self, text: str, channel: int) -> TransportResult:
        command = self.build_command(text, channel)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            return TransportResult.failed(f"meshtastic CLI not found: {self.cli_path}")
        except PermissionError:
            return TransportResult.failed(f"meshtastic CLI not executable: {self.cli_path}")

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return TransportResult.failed(f"meshtastic CLI timed out after {self.timeout}s")

        if process.returncode != 0:
            stderr_str = stderr.decode("utf-8", errors="replace").strip()
            return TransportResult.failed(f"meshtastic CLI exited with code {process.returncode}: {stderr_str}")

        stdout_str = stdout.decode("utf-8", errors="replace").strip()
        if stdout_str:
            logger.debug(f"meshtastic output: {stdout_str}")
        return TransportResult.ok()
