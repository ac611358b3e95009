"""
Alert processing for SAME Mesh Alerter.
"""

from .classifier import AlertClassifier, Classification
from .composer import MessageComposer
from .locations import (
    LocationDataError,
    LocationEntry,
    LocationResolver,
    ResolvedLocation,
    load_location_table,
    normalize_code,
    subdivision_label,
)
from .pipeline import AlertProcessingPipeline, ProcessingResult, ProcessingStage

__all__ = [
    "AlertClassifier",
    "Classification",
    "MessageComposer",
    "LocationDataError",
    "LocationEntry",
    "LocationResolver",
    "ResolvedLocation",
    "load_location_table",
    "normalize_code",
    "subdivision_label",
    "AlertProcessingPipeline",
    "ProcessingResult",
    "ProcessingStage",
]
