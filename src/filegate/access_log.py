"""
=============================================================================
ACCESS LOG
=============================================================================

One line per completed exchange on the ``filegate.access`` logger.

TEXT (combined-log style):

    127.0.0.1 - - [19/Oct/2026:10:00:00 +0000] "GET /docs/ HTTP/1.1" 200 1532 "-" "curl/8.4.0" 2.1ms

JSON (one object per line, for log shippers):

    {"timestamp": "2026-10-19T10:00:00+00:00", "client_ip": "127.0.0.1",
     "method": "GET", "path": "/docs/", "status": 200, "bytes": 1532, ...}

Successful and redirect responses log at INFO, client errors at WARNING,
server errors at ERROR, so raising the logger level filters the noise.

=============================================================================
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

from .http.status_codes import HTTPStatus


access_logger = logging.getLogger("filegate.access")


@dataclass
class RequestLog:
    client_ip: str
    method: str
    path: str
    version: str
    status: int
    response_size: int
    duration_ms: float
    user_agent: str = ""
    referer: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        stamp = self.timestamp.strftime("%d/%b/%Y:%H:%M:%S %z")
        return (
            f'{self.client_ip} - - [{stamp}] '
            f'"{self.method} {self.path} {self.version}" '
            f'{self.status} {self.response_size} '
            f'"{self.referer or "-"}" "{self.user_agent or "-"}" '
            f"{self.duration_ms:.1f}ms"
        )


def log_request(entry: RequestLog, log_format: str = "text") -> None:
    message = json.dumps(entry.to_dict()) if log_format == "json" else entry.to_text()

    status = HTTPStatus(entry.status)
    if status.is_server_error:
        access_logger.error(message)
    elif status.is_error:
        access_logger.warning(message)
    else:
        access_logger.info(message)
