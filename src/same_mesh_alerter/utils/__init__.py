"""
Utilities for SAME Mesh Alerter.
"""

from .logging import setup_logging, AlertLogger

__all__ = [
    "setup_logging",
    "AlertLogger",
]
