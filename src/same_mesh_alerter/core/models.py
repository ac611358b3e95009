"""
Core data models for SAME Mesh Alerter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field


NATIONAL_LOCATION_CODE = "000000"


class SignificanceLevel(str, Enum):
    """Significance tier of a SAME event."""

    TEST = "Test"
    STATEMENT = "Statement"
    WATCH = "Watch"
    WARNING = "Warning"
    EMERGENCY = "Emergency"
    UNKNOWN = "Unknown"


class DecodedAlert(BaseModel):
    """SAME alert header decoded by the external demodulator."""

    model_config = ConfigDict(frozen=True)

    originator: str = Field(..., description="Originator code (e.g., WXR)")
    originator_detail: str = Field(..., description="Human-readable originator")
    event_code: str = Field(..., description="Three-letter event code (e.g., TOR)")
    event_description: str = Field(..., description="Human-readable event name")
    significance: SignificanceLevel = Field(SignificanceLevel.UNKNOWN, description="Significance tier")
    location_codes: Tuple[str, ...] = Field(default_factory=tuple, description="PSSCCC location codes in header order")
    is_national: bool = Field(False, description="Nationwide alert flag")
    callsign: str = Field("", description="Sending station identifier")
    duration_minutes: Optional[int] = Field(None, description="Valid time in minutes")
    issue_time: Optional[str] = Field(None, description="Issue time as JJJHHMM (UTC)")
    raw_header: Optional[str] = Field(None, description="Original header text")


@dataclass(frozen=True)
class AlertStart:
    """Start of a SAME voice message."""

    alert: DecodedAlert


@dataclass(frozen=True)
class AlertEnd:
    """End of a SAME voice message (NNNN)."""

    pass


AlertEvent = Union[AlertStart, AlertEnd]
