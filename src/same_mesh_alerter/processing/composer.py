"""
Alert message composition for SAME Mesh Alerter.
"""

import logging
from typing import Iterable, List, Optional

from ..core.models import DecodedAlert, SignificanceLevel
from .classifier import Classification
from .locations import LocationResolver

logger = logging.getLogger(__name__)


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut text to at most max_bytes of UTF-8 without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


class MessageComposer:
    """Builds the mesh text for a classified alert."""

    def __init__(
        self,
        resolver: LocationResolver,
        locations_of_interest: Optional[Iterable[str]] = None,
        overflow_policy: str = "split",
        max_message_bytes: int = 228,
    ):
        self.resolver = resolver
        self.locations_of_interest = frozenset(locations_of_interest or ())
        self.overflow_policy = overflow_policy
        self.max_message_bytes = max_message_bytes

    def matches_filter(self, alert: DecodedAlert) -> bool:
        """
        Check the alert against the locations of interest.

        Alerts pass when no filter is configured, when they carry no
        location codes, or when any of their codes is in the filter.
        """
        if not self.locations_of_interest or not alert.location_codes:
            return True
        return any(code in self.locations_of_interest for code in alert.location_codes)

    def resolve_locations(self, codes: Iterable[str]) -> List[str]:
        """Resolve location codes to labels, dropping unknown codes."""
        labels = []
        for code in codes:
            location = self.resolver.resolve(code)
            if location is not None:
                labels.append(location.label)
        return labels

    def compose(self, alert: DecodedAlert, classification: Classification) -> Optional[str]:
        """
        Compose the message text for an alert.

        Args:
            alert: Decoded alert
            classification: Classification of the alert

        Returns:
            Message text, or None when the alert is outside the locations of interest
        """
        if not self.matches_filter(alert):
            logger.info(
                f"Alert {alert.event_code} does not match configured locations, skipping",
                extra={'location_codes': list(alert.location_codes)},
            )
            return None

        message = classification.prefix + alert.event_description
        if classification.level == SignificanceLevel.TEST:
            message += f" from {alert.callsign}"
        message += f", Issued By: {alert.originator_detail}"

        if alert.is_national:
            message += " Nationwide Alert"
        else:
            locations = self.resolve_locations(alert.location_codes)
            if len(locations) == 1:
                message += f", Location: {locations[0]}"
            elif locations:
                message += ", Locations: " + ", ".join(locations)

        if self.overflow_policy == "truncate":
            truncated = truncate_utf8(message, self.max_message_bytes)
            if truncated != message:
                logger.debug("Message string too long for Meshtastic, truncating")
            message = truncated

        return message
