"""
Mesh transport interface for SAME Mesh Alerter.
"""

from dataclasses import dataclass
from typing import Optional

from ..core.config import ConfigurationError, MeshConfig


@dataclass(frozen=True)
class TransportResult:
    """Outcome of one delivery attempt."""

    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "TransportResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "TransportResult":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class MeshConnection:
    """Where the radio is attached: a serial port or a network host."""

    port: Optional[str] = None
    host: Optional[str] = None

    def __post_init__(self):
        if bool(self.port) == bool(self.host):
            raise ConfigurationError("Exactly one of port or host must be provided")

    def __str__(self) -> str:
        return f"serial port {self.port}" if self.port else f"TCP {self.host}"


class TransportSink:
    """Base class for mesh transports."""

    name = "transport"

    async def deliver(self, text: str, channel: int) -> TransportResult:
        """
        Attempt to send text on a mesh channel.

        Implementations report failures through the result and do not raise.
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release transport resources."""
        pass


def create_sink(config: MeshConfig) -> TransportSink:
    """
    Create the transport selected in configuration.

    Args:
        config: Mesh configuration

    Returns:
        Transport sink

    Raises:
        ConfigurationError: If the connection settings are incomplete
    """
    connection = MeshConnection(port=config.port, host=config.host)

    if config.backend == "api":
        from .meshtastic_api import MeshtasticApiSink
        return MeshtasticApiSink(connection, want_ack=config.want_ack)

    from .meshtastic_cli import MeshtasticCliSink
    return MeshtasticCliSink(
        connection,
        cli_path=config.cli_path,
        timeout=config.command_timeout,
        want_ack=config.want_ack,
    )
