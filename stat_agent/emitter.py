"""
Local emission of serialized samples.

Writes one JSON line per sample to a text stream, standard output unless the
caller hands in something else (the CLI passes an append-mode file for
--output).
"""

import logging
import sys
from typing import Optional, TextIO


logger = logging.getLogger(__name__)


class StreamEmitter:
    """Writes serialized samples to a local text stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved late so redirected stdout (tests, CliRunner) is honoured
        return self._stream if self._stream is not None else sys.stdout

    def emit(self, payload: str) -> bool:
        """Write one sample line. Returns False if the sink rejected it."""
        try:
            self.stream.write(payload + "\n")
            self.stream.flush()
        except (OSError, ValueError) as e:
            logger.error("Error writing sample to local output: %s", e)
            return False
        return True
