"""
SAME header parsing.

A decoded header has the form::

    ZCZC-ORG-EEE-PSSCCC-PSSCCC+TTTT-JJJHHMM-LLLLLLLL-

- ORG: originator code (PEP, CIV, WXR, EAS)
- EEE: event code
- PSSCCC: 1 to 31 location codes (P is the county subdivision digit)
- TTTT: valid time as hhmm
- JJJHHMM: issue time, day-of-year and UTC time
- LLLLLLLL: callsign of the sending station

The end of a voice message is signalled by ``NNNN``.
"""

import re

from ..core.models import NATIONAL_LOCATION_CODE, DecodedAlert
from .codes import event_description, event_significance, originator_description

HEADER_SEARCH_RE = re.compile(
    r"ZCZC-"
    r"(?P<org>[A-Z]{3})-"
    r"(?P<event>[A-Z]{3})-"
    r"(?P<locs>(?:\d{6}-){0,30}\d{6})"
    r"\+(?P<dur>\d{4})-"
    r"(?P<ts>\d{7})-"
    r"(?P<sender>[A-Za-z0-9/ ]{1,8})-"
)

EOM_RE = re.compile(r"\bNNNN\b")


class SameHeaderError(Exception):
    """Malformed SAME header."""

    pass


def is_end_of_message(line: str) -> bool:
    """Check whether a decoder output line marks the end of a message."""
    return bool(EOM_RE.search(line)) and "ZCZC" not in line


def parse_header(line: str) -> DecodedAlert:
    """
    Parse a SAME header out of a line of decoder output.

    Args:
        line: Decoder output containing a ZCZC header

    Returns:
        Decoded alert

    Raises:
        SameHeaderError: If no well-formed header is present
    """
    m = HEADER_SEARCH_RE.search(line)
    if not m:
        raise SameHeaderError(f"Malformed SAME header: {line.strip()!r}")

    g = m.groupdict()
    hours, mins = divmod(int(g["dur"]), 100)
    locations = tuple(g["locs"].split("-"))

    return DecodedAlert(
        originator=g["org"],
        originator_detail=originator_description(g["org"]),
        event_code=g["event"],
        event_description=event_description(g["event"]),
        significance=event_significance(g["event"]),
        location_codes=locations,
        is_national=NATIONAL_LOCATION_CODE in locations,
        callsign=g["sender"].strip(),
        duration_minutes=hours * 60 + mins,
        issue_time=g["ts"],
        raw_header=m.group(0),
    )
