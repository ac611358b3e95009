"""
Logging utilities for SAME Mesh Alerter.
"""

import logging
import logging.handlers
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable
import structlog
from structlog.stdlib import LoggerFactory

from ..core.config import LoggingConfig

_RECORD_ATTRIBUTES = frozenset({
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'message', 'asctime',
})


class AlerterFormatter(logging.Formatter):
    """JSON formatter that carries ``extra`` fields as structured data."""

    def format(self, record: logging.LogRecord) -> str:
        extra_data = {
            key: value for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES
        }

        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if extra_data:
            log_entry['data'] = extra_data

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class AlertLogger:
    """Specialized logger for alert relay events."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def log_alert_received(self, event_code: str, originator: str, locations: Iterable[str], **extra_data) -> None:
        """Log when a SAME header is received."""
        self.logger.info(
            f"Begin SAME voice message: {event_code} from {originator}",
            extra={
                'event_type': 'alert_received',
                'event_code': event_code,
                'originator': originator,
                'location_codes': list(locations),
                **extra_data
            }
        )

    def log_alert_relayed(self, event_code: str, channel: int, fragments: int, success: bool, **extra_data) -> None:
        """Log when an alert has gone through delivery."""
        level = logging.INFO if success else logging.WARNING
        self.logger.log(
            level,
            f"Alert {event_code} relayed on channel {channel}: "
            f"{'delivered' if success else 'delivery failed'} ({fragments} fragments)",
            extra={
                'event_type': 'alert_relayed',
                'event_code': event_code,
                'channel': channel,
                'fragments': fragments,
                'success': success,
                **extra_data
            }
        )

    def log_alert_end(self, **extra_data) -> None:
        """Log the end of a SAME voice message."""
        self.logger.info(
            "End SAME voice message",
            extra={
                'event_type': 'alert_end',
                **extra_data
            }
        )


def setup_logging(config: LoggingConfig) -> tuple[logging.Logger, AlertLogger]:
    """
    Setup logging for SAME Mesh Alerter.

    Args:
        config: Logging configuration

    Returns:
        Tuple of (main_logger, alert_logger)
    """
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logger = logging.getLogger('same_mesh_alerter')
    logger.setLevel(getattr(logging, config.level.upper()))
    logger.handlers.clear()

    if config.format == 'json':
        formatter = AlerterFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    alert_logger = AlertLogger(logger)

    logger.debug("Logging system initialized", extra={
        'log_level': config.level,
        'log_format': config.format,
        'log_file': str(config.file) if config.file else None
    })

    return logger, alert_logger

