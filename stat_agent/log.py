"""
Diagnostics logging for the agent.

Standard output carries the sample itself, so diagnostics go to standard
error: human-readable lines by default, or structured JSON with --log-json.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO


PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

ROOT_LOGGER = 'stat_agent'


class JSONFormatter(logging.Formatter):
    """
    Formats records as single-line JSON.

    Output format:
    {
        "timestamp": "2024-01-15T10:30:00.123Z",
        "level": "ERROR",
        "logger": "stat_agent.reporter",
        "thread": "stat-agent-report",
        "message": "Error sending data to dashboard. Status code: 500",
        "traceback": "..."  # Only for logger.exception()
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data = {
            'timestamp': created.strftime('%Y-%m-%dT%H:%M:%S') + f'.{int(record.msecs):03d}Z',
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(
    level: int = logging.INFO,
    use_json: bool = False,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level (default: INFO)
        use_json: Use JSONFormatter instead of plain text lines
        stream: Handler stream (default: sys.stderr)

    Returns:
        The `stat_agent` logger. Calling this again replaces the handler
        rather than stacking a second one.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, '_stat_agent_handler', False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if use_json else logging.Formatter(PLAIN_FORMAT))
    handler._stat_agent_handler = True
    logger.addHandler(handler)

    return logger
