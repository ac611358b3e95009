"""Pytest configuration and shared fixtures for SAME Mesh Alerter tests.

Async code is driven with ``asyncio.run`` from plain test functions. Time
never really passes: the delivery engine is given a fake clock whose
``sleep`` advances the clock instead of waiting.
"""
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

# Add src to Python path so tests run from a plain checkout
SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from same_mesh_alerter.core.config import AppConfig  # noqa: E402
from same_mesh_alerter.notifications.delivery import DeliveryEngine, RetryPolicy  # noqa: E402
from same_mesh_alerter.notifications.transport import TransportResult, TransportSink  # noqa: E402
from same_mesh_alerter.processing.locations import LocationResolver, load_location_table  # noqa: E402
from same_mesh_alerter.same.header import parse_header  # noqa: E402

LOCATION_ROWS = """\
048081,Exampleton,ExampleState
048083,Otherton,ExampleState
039035,Cuyahoga,Ohio
"""

TORNADO_WARNING = "ZCZC-WXR-TOR-048081+0030-1051700-KCLE/NWS-"
WEEKLY_TEST = "ZCZC-WXR-RWT-048081+0015-1051700-KCLE/NWS-"
NATIONAL_ALERT = "ZCZC-PEP-EAN-000000-048081+0600-1051700-WHITEHSE-"


class FakeClock:
    """Monotonic clock that only moves when something sleeps on it."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeSink(TransportSink):
    """Records every delivery attempt.

    ``script`` lists the outcome of successive attempts (True for success);
    once it runs out every attempt succeeds, or fails if ``always_fail``.
    """

    name = "fake"

    def __init__(self, clock: Optional[FakeClock] = None, script=None, always_fail: bool = False):
        self.clock = clock
        self.script = list(script or [])
        self.always_fail = always_fail
        self.calls: List[Tuple[str, int, Optional[float]]] = []
        self.closed = False

    async def deliver(self, text: str, channel: int) -> TransportResult:
        self.calls.append((text, channel, self.clock() if self.clock else None))
        if self.script:
            ok = self.script.pop(0)
        else:
            ok = not self.always_fail
        return TransportResult.ok() if ok else TransportResult.failed("radio not responding")

    async def close(self) -> None:
        self.closed = True

    @property
    def texts(self) -> List[str]:
        return [text for text, _, _ in self.calls]


@pytest.fixture
def locations_file(tmp_path: Path) -> Path:
    """Small location dataset in the bundled CSV format."""
    path = tmp_path / "same_codes.csv"
    path.write_text(LOCATION_ROWS, encoding="utf-8")
    return path


@pytest.fixture
def resolver(locations_file: Path) -> LocationResolver:
    return LocationResolver(load_location_table(locations_file))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink(clock: FakeClock) -> FakeSink:
    return FakeSink(clock=clock)


@pytest.fixture
def engine(sink: FakeSink, clock: FakeClock) -> DeliveryEngine:
    return DeliveryEngine(
        sink,
        retry_policy=RetryPolicy(max_retries=3, retry_delay_seconds=5.0),
        min_interval_seconds=20.0,
        fragment_bytes=75,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def make_alert():
    """Build a DecodedAlert from a ZCZC header string."""
    return parse_header


@pytest.fixture
def app_config(locations_file: Path) -> AppConfig:
    return AppConfig(
        locations_file=locations_file,
        mesh={"port": "/dev/ttyUSB0", "alert_channel": 0},
    )
