"""
Core application logic for SAME Mesh Alerter.
"""

import asyncio
import contextlib
import logging
import signal
from typing import Any, Dict, Optional

from .config import AppConfig, ConfigurationError
from .models import AlertEvent, AlertStart
from ..notifications.delivery import DeliveryEngine, RetryPolicy
from ..notifications.transport import TransportSink, create_sink
from ..processing.classifier import AlertClassifier
from ..processing.composer import MessageComposer
from ..processing.locations import LocationDataError, LocationResolver, load_location_table
from ..processing.pipeline import AlertProcessingPipeline, ProcessingResult
from ..same.source import AlertSource, DecoderProcessSource
from ..utils.logging import AlertLogger, setup_logging

logger = logging.getLogger(__name__)


class AlerterApplication:
    """Main application class for SAME Mesh Alerter."""

    def __init__(
        self,
        config: AppConfig,
        source: Optional[AlertSource] = None,
        sink: Optional[TransportSink] = None,
        engine_options: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the application.

        Args:
            config: Application configuration
            source: Alert source (defaults to the configured decoder process)
            sink: Mesh transport (defaults to the configured backend)
            engine_options: Extra DeliveryEngine keyword arguments (clock, sleep)
        """
        self.config = config
        self.source = source
        self.sink = sink
        self.engine_options = engine_options or {}
        self.resolver: Optional[LocationResolver] = None
        self.classifier: Optional[AlertClassifier] = None
        self.composer: Optional[MessageComposer] = None
        self.engine: Optional[DeliveryEngine] = None
        self.pipeline: Optional[AlertProcessingPipeline] = None
        self.alert_logger: Optional[AlertLogger] = None
        self.running = False
        self._shutdown_event = asyncio.Event()
        self._previous_handlers: Dict[int, Any] = {}

    async def initialize(self) -> None:
        """
        Initialize the application components.

        Raises:
            ConfigurationError: If the alerter cannot start
        """
        _, self.alert_logger = setup_logging(self.config.logging)
        logger.info("Initializing SAME Mesh Alerter")

        try:
            table = load_location_table(self.config.locations_file)
        except LocationDataError as e:
            raise ConfigurationError(str(e)) from e
        self.resolver = LocationResolver(table)
        logger.info(f"Loaded locations CSV ({len(table)} codes, {len(self.resolver.states)} states)")

        mesh = self.config.mesh
        delivery = self.config.delivery

        self.classifier = AlertClassifier(
            alert_channel=mesh.alert_channel,
            test_channel=mesh.test_channel,
            icons=self.config.icons,
        )
        self.composer = MessageComposer(
            self.resolver,
            locations_of_interest=self.config.filtering.locations,
            overflow_policy=delivery.overflow_policy,
            max_message_bytes=delivery.max_message_bytes,
        )

        if self.sink is None:
            self.sink = create_sink(mesh)
        self.engine = DeliveryEngine(
            self.sink,
            retry_policy=RetryPolicy(
                max_retries=delivery.max_retries,
                retry_delay_seconds=delivery.retry_delay_seconds,
            ),
            min_interval_seconds=delivery.min_interval_seconds,
            fragment_bytes=delivery.fragment_bytes,
            **self.engine_options,
        )
        self.pipeline = AlertProcessingPipeline(self.classifier, self.composer, self.engine)

        if self.source is None:
            self.source = DecoderProcessSource(
                self.config.decoder.command,
                sample_rate=self.config.decoder.sample_rate,
            )
        await self.source.open()

        logger.info(f"Alerts will be sent to channel: {mesh.alert_channel}")
        if mesh.test_channel is None:
            logger.info("Test alerts will be ignored (test channel was not provided)")
        else:
            logger.info(f"Test alerts will be sent to channel: {mesh.test_channel}")
        if self.config.filtering.locations:
            logger.info(f"Only relaying alerts for locations: {', '.join(self.config.filtering.locations)}")

    async def handle_event(self, event: AlertEvent) -> Optional[ProcessingResult]:
        """
        Handle one event from the alert source.

        Args:
            event: Alert start or end event

        Returns:
            Processing result for alert starts, None for alert ends
        """
        if not isinstance(event, AlertStart):
            self.alert_logger.log_alert_end()
            return None

        alert = event.alert
        self.alert_logger.log_alert_received(
            alert.event_code,
            alert.originator,
            alert.location_codes,
            raw_header=alert.raw_header,
        )

        result = await self.pipeline.process_alert(alert)
        if result.report is not None:
            self.alert_logger.log_alert_relayed(
                alert.event_code,
                result.report.channel,
                len(result.report.results),
                result.report.success,
            )
        return result

    async def _consume(self) -> None:
        async for event in self.source.events():
            await self.handle_event(event)
        logger.warning("Program stopped, no longer monitoring")

    async def run(self) -> None:
        """Run until the alert source is exhausted or a shutdown signal arrives."""
        try:
            await self.initialize()
            self._setup_signal_handlers()
            self.running = True
            logger.info("Monitoring for alerts")

            consumer = asyncio.create_task(self._consume())
            stopper = asyncio.create_task(self._shutdown_event.wait())
            try:
                done, _ = await asyncio.wait({consumer, stopper}, return_when=asyncio.FIRST_COMPLETED)
                if consumer in done:
                    consumer.result()
                else:
                    consumer.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await consumer
            finally:
                stopper.cancel()
        finally:
            await self.shutdown()

    def request_shutdown(self) -> None:
        """Ask the main loop to stop."""
        self._shutdown_event.set()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, initiating shutdown")
            loop.call_soon_threadsafe(self._shutdown_event.set)

        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                self._previous_handlers[signum] = signal.signal(signum, signal_handler)
            except ValueError:
                # Not on the main thread
                logger.debug(f"Cannot install handler for signal {signum}")

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    async def shutdown(self) -> None:
        """Shutdown the application gracefully."""
        logger.info("Shutting down SAME Mesh Alerter")
        self.running = False
        self._restore_signal_handlers()

        if self.source:
            await self.source.close()
        if self.sink:
            await self.sink.close()

        logger.info("Application shutdown complete")

    def get_status(self) -> Dict[str, Any]:
        """Get application status."""
        return {
            "running": self.running,
            "locations_loaded": len(self.resolver) if self.resolver else 0,
            "alert_channel": self.config.mesh.alert_channel,
            "test_channel": self.config.mesh.test_channel,
            "processing": self.pipeline.get_processing_stats() if self.pipeline else {},
            "delivery": self.engine.stats if self.engine else {},
        }
