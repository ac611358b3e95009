"""
Rate-limited delivery with retry for SAME Mesh Alerter.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from .chunking import DEFAULT_FRAGMENT_BYTES, chunk_message
from .transport import TransportResult, TransportSink

logger = logging.getLogger(__name__)


class DeliveryStatus(Enum):
    """Delivery status."""
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class RetryPolicy:
    """Retry policy for failed deliveries."""

    max_retries: int = 3
    retry_delay_seconds: float = 5.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def get_delay(self, attempt: int) -> float:
        """Get delay after a failed attempt (no delay after the last one)."""
        if attempt <= 0 or attempt >= self.max_attempts:
            return 0.0
        return self.retry_delay_seconds


@dataclass(frozen=True)
class OutboundFragment:
    """A payload-sized slice of a message bound for one channel."""

    text: str
    channel: int
    index: int = 1
    total: int = 1


@dataclass
class FragmentResult:
    """Result of delivering one fragment."""

    fragment: OutboundFragment
    status: DeliveryStatus = DeliveryStatus.PENDING
    attempts: int = 0
    error: Optional[str] = None
    sent_at: Optional[float] = None

    @property
    def success(self) -> bool:
        return self.status == DeliveryStatus.SENT


@dataclass
class DeliveryReport:
    """Result of delivering a whole message."""

    text: str
    channel: int
    results: List[FragmentResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def failed(self) -> List[FragmentResult]:
        return [r for r in self.results if not r.success]


class DeliveryEngine:
    """
    Delivers messages over a transport sink.

    Messages are split into fragments, and each fragment is sent with
    retry. A single last-send timestamp enforces a minimum interval
    between sends across every fragment of every message; the timestamp
    and the send path are guarded by one lock.
    """

    def __init__(
        self,
        sink: TransportSink,
        retry_policy: Optional[RetryPolicy] = None,
        min_interval_seconds: float = 20.0,
        fragment_bytes: int = DEFAULT_FRAGMENT_BYTES,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.sink = sink
        self.retry_policy = retry_policy or RetryPolicy()
        self.min_interval_seconds = min_interval_seconds
        self.fragment_bytes = fragment_bytes
        self.clock = clock
        self.sleep = sleep
        self.last_sent: Optional[float] = None
        self._lock: Optional[asyncio.Lock] = None
        self._stats: Dict[str, int] = {
            "messages": 0,
            "fragments_sent": 0,
            "fragments_failed": 0,
            "attempts": 0,
        }

    @property
    def lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def split(self, text: str, channel: int) -> List[OutboundFragment]:
        """Split a message into outbound fragments."""
        chunks = [c for c in chunk_message(text, self.fragment_bytes) if c.strip()]
        return [
            OutboundFragment(text=chunk, channel=channel, index=i, total=len(chunks))
            for i, chunk in enumerate(chunks, start=1)
        ]

    async def deliver_message(self, text: str, channel: int) -> DeliveryReport:
        """
        Deliver a message as ordered fragments.

        A fragment that exhausts its attempts is reported and the
        remaining fragments are still sent.
        """
        report = DeliveryReport(text=text, channel=channel)
        fragments = self.split(text, channel)
        self._stats["messages"] += 1

        if len(fragments) > 1:
            logger.debug(f"Message split into {len(fragments)} fragments")

        async with self.lock:
            for fragment in fragments:
                report.results.append(await self._send_fragment(fragment))

        return report

    async def deliver_fragment(self, fragment: OutboundFragment) -> FragmentResult:
        """Deliver a single fragment with rate limiting and retry."""
        async with self.lock:
            return await self._send_fragment(fragment)

    async def _wait_for_interval(self) -> None:
        if self.last_sent is None:
            return
        remaining = self.min_interval_seconds - (self.clock() - self.last_sent)
        if remaining > 0:
            logger.debug(f"Rate limit: waiting {remaining:.1f}s before next send")
            await self.sleep(remaining)

    async def _attempt(self, fragment: OutboundFragment) -> TransportResult:
        try:
            return await self.sink.deliver(fragment.text, fragment.channel)
        except Exception as e:
            return TransportResult.failed(f"{type(e).__name__}: {e}")

    async def _send_fragment(self, fragment: OutboundFragment) -> FragmentResult:
        result = FragmentResult(fragment=fragment)
        max_attempts = self.retry_policy.max_attempts

        await self._wait_for_interval()

        for attempt in range(1, max_attempts + 1):
            result.attempts = attempt
            self._stats["attempts"] += 1
            outcome = await self._attempt(fragment)

            if outcome.success:
                self.last_sent = self.clock()
                result.status = DeliveryStatus.SENT
                result.sent_at = self.last_sent
                result.error = None
                self._stats["fragments_sent"] += 1
                logger.info(
                    f"Sent message on channel {fragment.channel} "
                    f"({fragment.index}/{fragment.total}, attempt {attempt})"
                )
                return result

            result.error = outcome.error
            logger.warning(f"Send attempt {attempt}/{max_attempts} failed: {outcome.error}")

            delay = self.retry_policy.get_delay(attempt)
            if delay > 0:
                await self.sleep(delay)

        result.status = DeliveryStatus.FAILED
        self._stats["fragments_failed"] += 1
        logger.error(
            f"Error sending message on channel {fragment.channel} after {max_attempts} attempts: "
            f"{fragment.text}",
            extra={
                'channel': fragment.channel,
                'fragment_text': fragment.text,
                'last_error': result.error,
            },
        )
        return result
