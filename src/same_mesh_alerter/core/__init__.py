"""
Core application components for SAME Mesh Alerter.
"""

from .config import (
    AppConfig,
    ConfigurationError,
    DecoderConfig,
    DeliveryConfig,
    FilteringConfig,
    LoggingConfig,
    MeshConfig,
)
from .models import AlertEnd, AlertEvent, AlertStart, DecodedAlert, SignificanceLevel

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "DecoderConfig",
    "DeliveryConfig",
    "FilteringConfig",
    "LoggingConfig",
    "MeshConfig",
    "AlertEnd",
    "AlertEvent",
    "AlertStart",
    "DecodedAlert",
    "SignificanceLevel",
]
