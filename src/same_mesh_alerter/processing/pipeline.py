"""
Core alert processing pipeline for SAME Mesh Alerter.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.models import DecodedAlert
from ..notifications.delivery import DeliveryEngine, DeliveryReport
from .classifier import AlertClassifier, Classification
from .composer import MessageComposer


class ProcessingStage(Enum):
    """Furthest stage an alert reached."""
    RECEIVED = "received"
    SUPPRESSED = "suppressed"
    FILTERED = "filtered"
    COMPOSED = "composed"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass
class ProcessingResult:
    """Result of alert processing."""

    alert: DecodedAlert
    stage: ProcessingStage = ProcessingStage.RECEIVED
    classification: Optional[Classification] = None
    message: Optional[str] = None
    report: Optional[DeliveryReport] = None
    processing_time_ms: float = 0.0
    errors: List[str] = field(default_factory=list)

    @property
    def delivered(self) -> bool:
        return self.stage == ProcessingStage.DELIVERED

    def add_error(self, error: str) -> None:
        """Add an error that occurred during processing."""
        self.errors.append(error)


class AlertProcessingPipeline:
    """Classifies, composes and delivers one alert at a time."""

    def __init__(
        self,
        classifier: AlertClassifier,
        composer: MessageComposer,
        engine: DeliveryEngine,
    ):
        self.classifier = classifier
        self.composer = composer
        self.engine = engine
        self.logger = logging.getLogger(__name__)
        self._processing_stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "total_processed": 0,
            "stage_counts": {stage.value: 0 for stage in ProcessingStage},
        }

    async def process_alert(self, alert: DecodedAlert) -> ProcessingResult:
        """
        Process a single alert through the pipeline.

        Suppression, filtering and delivery failures end processing early
        and are reported in the result; nothing is raised.

        Args:
            alert: Decoded alert to process

        Returns:
            Processing result
        """
        start_time = datetime.now(timezone.utc)
        result = ProcessingResult(alert=alert)

        try:
            classification = self.classifier.classify(alert.significance)
            result.classification = classification

            if classification.suppressed:
                self.logger.info("Ignoring test alert")
                result.stage = ProcessingStage.SUPPRESSED
                return result

            message = self.composer.compose(alert, classification)
            if message is None:
                result.stage = ProcessingStage.FILTERED
                return result

            result.message = message
            result.stage = ProcessingStage.COMPOSED
            self.logger.info(f"Attempting to send message over the mesh: {message}")

            report = await self.engine.deliver_message(message, classification.channel)
            result.report = report
            result.stage = ProcessingStage.DELIVERED if report.success else ProcessingStage.FAILED

        except Exception as e:
            error_msg = f"Pipeline processing failed: {str(e)}"
            self.logger.error(error_msg, exc_info=True)
            result.add_error(error_msg)
            result.stage = ProcessingStage.FAILED

        finally:
            end_time = datetime.now(timezone.utc)
            result.processing_time_ms = (end_time - start_time).total_seconds() * 1000
            self._processing_stats["total_processed"] += 1
            self._processing_stats["stage_counts"][result.stage.value] += 1

            self.logger.debug(
                f"Alert {alert.event_code} processing completed in {result.processing_time_ms:.2f}ms "
                f"(stage: {result.stage.value})"
            )

        return result

    def get_processing_stats(self) -> Dict[str, Any]:
        """Get processing statistics."""
        stats = self._processing_stats.copy()
        stats["stage_counts"] = dict(stats["stage_counts"])
        return stats

    def reset_stats(self) -> None:
        """Reset processing statistics."""
        self._processing_stats = self._empty_stats()
        self.logger.info("Processing statistics reset")
