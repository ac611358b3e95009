"""
Alert classification by significance tier.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..core.models import SignificanceLevel

logger = logging.getLogger(__name__)


DEFAULT_ICONS: Dict[SignificanceLevel, str] = {
    SignificanceLevel.TEST: "📖Received ",
    SignificanceLevel.STATEMENT: "📟",
    SignificanceLevel.WATCH: "⚠️",
    SignificanceLevel.WARNING: "🚨",
    SignificanceLevel.EMERGENCY: "🚨",
    SignificanceLevel.UNKNOWN: "🚨",
}

URGENT_LEVELS = frozenset({
    SignificanceLevel.WARNING,
    SignificanceLevel.EMERGENCY,
    SignificanceLevel.UNKNOWN,
})


@dataclass(frozen=True)
class Classification:
    """Presentation and routing decision for one alert."""

    level: SignificanceLevel
    prefix: str
    channel: Optional[int]
    suppressed: bool = False
    urgent: bool = False


class AlertClassifier:
    """Maps significance tiers to a message prefix and mesh channel."""

    def __init__(
        self,
        alert_channel: int = 0,
        test_channel: Optional[int] = None,
        icons: Optional[Dict[str, str]] = None,
    ):
        self.alert_channel = alert_channel
        self.test_channel = test_channel
        self.icons = dict(DEFAULT_ICONS)

        # Overrides are keyed by tier name, e.g. {"Watch": "👀"}
        for name, icon in (icons or {}).items():
            try:
                self.icons[SignificanceLevel(name.capitalize())] = icon
            except ValueError:
                logger.warning(f"Ignoring icon for unknown significance level: {name}")

    @property
    def tests_enabled(self) -> bool:
        return self.test_channel is not None

    def classify(self, level: SignificanceLevel) -> Classification:
        """
        Classify an alert by significance.

        Args:
            level: Significance tier of the event

        Returns:
            Classification; test alerts are suppressed when no test channel is set
        """
        prefix = self.icons.get(level, self.icons[SignificanceLevel.UNKNOWN])

        if level == SignificanceLevel.TEST:
            return Classification(
                level=level,
                prefix=prefix,
                channel=self.test_channel,
                suppressed=not self.tests_enabled,
            )

        return Classification(
            level=level,
            prefix=prefix,
            channel=self.alert_channel,
            urgent=level in URGENT_LEVELS,
        )
