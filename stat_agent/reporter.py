"""
Fire-and-forget forwarding of samples to a remote collector.
"""

import logging
import threading
from typing import Optional

import requests

from stat_agent.errors import TransportError, UnexpectedStatus


logger = logging.getLogger(__name__)

JSON_HEADERS = {'Content-Type': 'application/json'}


class RemoteReporter:
    """POSTs serialized samples to the configured destination, in the background"""

    def __init__(
        self,
        destination_url: Optional[str],
        destination_env: str = 'PLOT_KEY',
        timeout: Optional[float] = None
    ):
        self.destination_url = destination_url or None
        self.destination_env = destination_env
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return self.destination_url is not None

    def report(self, payload: str) -> Optional[threading.Thread]:
        """
        Start sending `payload` on a daemon thread and return immediately.

        Returns the started thread, or None when no destination is configured.
        The caller never needs to wait on the thread; its outcome is only
        logged.
        """
        if not self.enabled:
            logger.warning(
                "%s environment variable not found. Data will not be sent to dashboard",
                self.destination_env
            )
            return None

        thread = threading.Thread(
            target=self._send_and_forget,
            args=(payload,),
            name='stat-agent-report',
            daemon=True
        )
        thread.start()
        return thread

    def send(self, payload: str) -> int:
        """Single blocking POST. Raises TransportError or UnexpectedStatus."""
        try:
            response = requests.post(
                self.destination_url,
                data=payload.encode('utf-8'),
                headers=JSON_HEADERS,
                timeout=self.timeout,
                stream=True
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e

        # Only the status is of interest; release the connection unread
        try:
            status_code = response.status_code
        finally:
            response.close()

        if status_code != 200:
            raise UnexpectedStatus(status_code)
        return status_code

    def _send_and_forget(self, payload: str) -> None:
        try:
            self.send(payload)
        except TransportError as e:
            logger.error("Error sending data to dashboard: %s", e)
        except UnexpectedStatus as e:
            logger.error("Error sending data to dashboard. Status code: %d", e.status_code)
        else:
            logger.debug("Sample delivered to %s", self.destination_url)
