"""
Mesh delivery for SAME Mesh Alerter.
"""

from .chunking import chunk_message
from .delivery import (
    DeliveryEngine,
    DeliveryReport,
    DeliveryStatus,
    FragmentResult,
    OutboundFragment,
    RetryPolicy,
)
from .transport import MeshConnection, TransportResult, TransportSink, create_sink

__all__ = [
    "chunk_message",
    "DeliveryEngine",
    "DeliveryReport",
    "DeliveryStatus",
    "FragmentResult",
    "OutboundFragment",
    "RetryPolicy",
    "MeshConnection",
    "TransportResult",
    "TransportSink",
    "create_sink",
]
