"""
Server-wide request statistics.

One counter shared by every connection thread, guarded by one lock. The
``/api/stats`` snapshot is taken under the same lock so it never sees a
half-applied increment.
"""

import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_uptime(seconds: int) -> str:
    """
    Human readable uptime.

        >>> format_uptime(93784)
        '1d 2h 3m 4s'
    """
    days, remainder = divmod(int(seconds), 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{days}d {hours}h {minutes}m {secs}s"


class ServerStats:
    """
    Request counter plus process start time.

    Args:
        root_directory: Served root, echoed back in snapshots.
        clock: Returns "now" as a timestamp; injectable for tests.
    """

    def __init__(self, root_directory: str = "", clock: Callable[[], float] = time.time):
        self.root_directory = root_directory
        self._clock = clock
        self.start_time = clock()
        self._total_requests = 0
        self._lock = threading.Lock()

    @property
    def total_requests(self) -> int:
        with self._lock:
            return self._total_requests

    def increment(self) -> int:
        """Count one request. Returns the new total."""
        with self._lock:
            self._total_requests += 1
            return self._total_requests

    def snapshot(self) -> Dict[str, Any]:
        """The ``/api/stats`` payload. Key order is part of the output."""
        with self._lock:
            uptime = max(int(self._clock() - self.start_time), 0)
            return {
                "uptime_seconds": uptime,
                "uptime_formatted": format_uptime(uptime),
                "total_requests": self._total_requests,
                "start_time": datetime.fromtimestamp(self.start_time).strftime(TIMESTAMP_FORMAT),
                "root_directory": self.root_directory,
            }
