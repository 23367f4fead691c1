"""
=============================================================================
ACCESS LOG
=============================================================================

One line per answered request on the ``minihttp.access`` logger, separate
from the diagnostic loggers so it can be routed on its own:

    logging.getLogger("minihttp.access").addHandler(file_handler)

TEXT FORMAT (default):

    127.0.0.1 - - [2026-01-01T12:00:00+00:00] "GET /echo/abc" 200 3 0.41ms "curl/8.4.0" [a1b2c3d4]

JSON FORMAT (log aggregators):

    {"connection_id": "a1b2c3d4", "client_ip": "127.0.0.1", "method": "GET", ...}

Dropped connections (parse errors, missing headers, I/O failures) are not
access-logged; the connection handler reports them as warnings instead.

=============================================================================
"""

import json
import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timezone


logger = logging.getLogger("minihttp.access")


@dataclass
class RequestLog:
    """Structured log entry for one request/response exchange."""

    connection_id: str
    client_ip: str
    method: str
    path: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        return (
            f'{self.client_ip or "-"} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms '
            f'"{self.user_agent or "-"}" [{self.connection_id}]'
        )


class AccessLogger:
    """Formats RequestLog entries and writes them to the access logger."""

    def __init__(self, log_format: str = "text", level: int = logging.INFO):
        self.log_format = log_format
        self.level = level

    def log(self, connection, request, response, started_at: float, finished_at: float):
        """
        Record one exchange.

        Args:
            connection: The core.Connection the request arrived on.
            request: The parsed Request.
            response: The Response that was written.
            started_at: time.perf_counter() when handling began.
            finished_at: time.perf_counter() after the write completed.
        """
        if not logger.isEnabledFor(self.level):
            return

        entry = RequestLog(
            connection_id=connection.id,
            client_ip=connection.client_ip,
            method=request.method.value,
            path=request.path,
            user_agent=request.user_agent or "",
            status_code=int(response.status),
            content_length=response.content_length,
            duration_ms=(finished_at - started_at) * 1000,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )

        if self.log_format == "json":
            logger.log(self.level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.level, entry.to_text())
