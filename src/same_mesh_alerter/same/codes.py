"""
SAME event and originator code registries (47 CFR 11.31).
"""

from typing import Dict, Tuple

from ..core.models import SignificanceLevel

_T = SignificanceLevel.TEST
_S = SignificanceLevel.STATEMENT
_A = SignificanceLevel.WATCH
_W = SignificanceLevel.WARNING
_E = SignificanceLevel.EMERGENCY

EVENT_CODES: Dict[str, Tuple[str, SignificanceLevel]] = {
    # National
    "EAN": ("Emergency Action Notification", _W),
    "EAT": ("Emergency Action Termination", _S),
    "NIC": ("National Information Center", _S),
    "NPT": ("National Periodic Test", _T),
    "RMT": ("Required Monthly Test", _T),
    "RWT": ("Required Weekly Test", _T),
    "DMO": ("Practice/Demo Warning", _T),
    "ADR": ("Administrative Message", _S),
    "NMN": ("Network Message Notification", _S),
    # Weather
    "AVA": ("Avalanche Watch", _A),
    "AVW": ("Avalanche Warning", _W),
    "BZW": ("Blizzard Warning", _W),
    "CFA": ("Coastal Flood Watch", _A),
    "CFW": ("Coastal Flood Warning", _W),
    "DSW": ("Dust Storm Warning", _W),
    "EWW": ("Extreme Wind Warning", _W),
    "FFA": ("Flash Flood Watch", _A),
    "FFW": ("Flash Flood Warning", _W),
    "FFS": ("Flash Flood Statement", _S),
    "FLA": ("Flood Watch", _A),
    "FLW": ("Flood Warning", _W),
    "FLS": ("Flood Statement", _S),
    "FRW": ("Fire Warning", _W),
    "HWA": ("High Wind Watch", _A),
    "HWW": ("High Wind Warning", _W),
    "HUA": ("Hurricane Watch", _A),
    "HUW": ("Hurricane Warning", _W),
    "HLS": ("Hurricane Statement", _S),
    "SQW": ("Snow Squall Warning", _W),
    "SMW": ("Special Marine Warning", _W),
    "SPS": ("Special Weather Statement", _S),
    "SSA": ("Storm Surge Watch", _A),
    "SSW": ("Storm Surge Warning", _W),
    "SVA": ("Severe Thunderstorm Watch", _A),
    "SVR": ("Severe Thunderstorm Warning", _W),
    "SVS": ("Severe Weather Statement", _S),
    "TOA": ("Tornado Watch", _A),
    "TOR": ("Tornado Warning", _W),
    "TRA": ("Tropical Storm Watch", _A),
    "TRW": ("Tropical Storm Warning", _W),
    "TSA": ("Tsunami Watch", _A),
    "TSW": ("Tsunami Warning", _W),
    "WSA": ("Winter Storm Watch", _A),
    "WSW": ("Winter Storm Warning", _W),
    # Non-weather
    "BLU": ("Blue Alert", _W),
    "CAE": ("Child Abduction Emergency", _E),
    "CDW": ("Civil Danger Warning", _W),
    "CEM": ("Civil Emergency Message", _W),
    "EQW": ("Earthquake Warning", _W),
    "EVI": ("Evacuation Immediate", _W),
    "HMW": ("Hazardous Materials Warning", _W),
    "LAE": ("Local Area Emergency", _E),
    "LEW": ("Law Enforcement Warning", _W),
    "NUW": ("Nuclear Power Plant Warning", _W),
    "RHW": ("Radiological Hazard Warning", _W),
    "SPW": ("Shelter in Place Warning", _W),
    "TOE": ("911 Telephone Outage Emergency", _E),
    "VOW": ("Volcano Warning", _W),
}

_SUFFIX_SIGNIFICANCE: Dict[str, SignificanceLevel] = {
    "T": _T,
    "S": _S,
    "A": _A,
    "W": _W,
    "E": _E,
}

ORIGINATOR_CODES: Dict[str, str] = {
    "PEP": "Primary Entry Point System",
    "CIV": "Civil authorities",
    "WXR": "National Weather Service",
    "EAS": "Broadcast station or cable system",
}


def event_description(code: str) -> str:
    """Get human-readable name of an event code."""
    entry = EVENT_CODES.get(code.upper())
    if entry:
        return entry[0]
    return f"Unrecognized Event ({code})"


def event_significance(code: str) -> SignificanceLevel:
    """
    Get the significance tier of an event code.

    Codes missing from the registry fall back to the convention that the
    last letter names the tier (e.g. ``xxW`` is a warning).
    """
    code = code.upper()
    entry = EVENT_CODES.get(code)
    if entry:
        return entry[1]
    if len(code) == 3:
        return _SUFFIX_SIGNIFICANCE.get(code[-1], SignificanceLevel.UNKNOWN)
    return SignificanceLevel.UNKNOWN


def originator_description(code: str) -> str:
    """Get human-readable description of an originator code."""
    return ORIGINATOR_CODES.get(code.upper(), f"Unknown Originator ({code})")
