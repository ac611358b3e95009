"""
SAME location code lookup for SAME Mesh Alerter.
"""

import csv
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Set, Union

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS_FILE = Path(__file__).resolve().parent.parent / "data" / "same_codes.csv"

_CODE_RE = re.compile(r"^\d{6}$")

# https://www.weather.gov/nwr/sameenz
SUBDIVISIONS: Dict[str, str] = {
    "0": "",
    "1": "Northwest",
    "2": "North",
    "3": "Northeast",
    "4": "West",
    "5": "Central",
    "6": "East",
    "7": "Southwest",
    "8": "South",
    "9": "Southeast",
}


class LocationDataError(Exception):
    """Location dataset could not be loaded."""

    pass


@dataclass(frozen=True)
class LocationEntry:
    """One row of the location dataset."""

    code: str
    county: str
    state: str


@dataclass(frozen=True)
class ResolvedLocation:
    """A location code resolved to its county and subdivision."""

    code: str
    county: str
    state: str
    direction: str = ""

    @property
    def label(self) -> str:
        """County name prefixed with the subdivision direction, if any."""
        if self.direction:
            return f"{self.direction} {self.county}"
        return self.county


LocationTable = Mapping[str, LocationEntry]


def load_location_table(path: Optional[Union[str, Path]] = None) -> LocationTable:
    """
    Load the location dataset.

    Each line is ``code,county,state`` with no header row. The table is
    keyed by the code with its subdivision digit set to ``0``.

    Args:
        path: Dataset path (defaults to the bundled CSV)

    Returns:
        Read-only mapping of normalized code to entry

    Raises:
        LocationDataError: If the file is missing or any record is malformed
    """
    path = Path(path) if path else DEFAULT_LOCATIONS_FILE
    table: Dict[str, LocationEntry] = {}

    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            for line_no, row in enumerate(csv.reader(f), start=1):
                if not row or all(not field.strip() for field in row):
                    continue
                if len(row) != 3:
                    raise LocationDataError(f"{path}:{line_no}: expected 3 fields, got {len(row)}")

                code, county, state = (field.strip() for field in row)
                if not _CODE_RE.match(code) or not county or not state:
                    raise LocationDataError(f"{path}:{line_no}: invalid record {row!r}")

                key = normalize_code(code)
                if key in table:
                    logger.debug(f"Duplicate location code {key} at line {line_no}, replacing")
                table[key] = LocationEntry(code=key, county=county, state=state)
    except OSError as e:
        raise LocationDataError(f"Cannot read location dataset {path}: {e}")
    except csv.Error as e:
        raise LocationDataError(f"Cannot parse location dataset {path}: {e}")

    return MappingProxyType(table)


def normalize_code(code: str) -> str:
    """Replace the subdivision digit of a PSSCCC code with 0."""
    return "0" + code[1:]


def state_code(code: str) -> str:
    """Two-digit state FIPS part of a PSSCCC code."""
    return code[1:3]


def subdivision_label(digit: str) -> str:
    """Map a subdivision digit to its compass direction."""
    return SUBDIVISIONS.get(digit, "")


class LocationResolver:
    """Resolves SAME location codes against the location table."""

    def __init__(self, table: LocationTable):
        self.table = table
        self.states = frozenset(state_code(key) for key in table)
        self._missing_states: Set[str] = set()

    def resolve(self, code: str) -> Optional[ResolvedLocation]:
        """
        Resolve a location code.

        Args:
            code: Six character PSSCCC code

        Returns:
            Resolved location, or None when the code is not in the table
        """
        code = code.strip()
        entry = self.table.get(normalize_code(code)) if code else None
        if entry is None:
            logger.debug(f"Location Code: {code} not found")
            self._warn_missing_state(code)
            return None

        return ResolvedLocation(
            code=code,
            county=entry.county,
            state=entry.state,
            direction=subdivision_label(code[0]),
        )

    def _warn_missing_state(self, code: str) -> None:
        # Once per state; 00 is the national code
        state = state_code(code)
        if not state.isdigit() or state == "00" or state in self.states or state in self._missing_states:
            return
        self._missing_states.add(state)
        logger.warning(
            f"Location dataset has no entries for state {state}; alerts there will not name counties. "
            f"Build a full dataset with scripts/build_same_codes.py and set locations_file"
        )

    def __len__(self) -> int:
        return len(self.table)
