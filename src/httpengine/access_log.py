"""
Access logging: one line per finished exchange.

Written to the "httpengine.access" logger so it can be routed or silenced
separately from diagnostic logs:

    logging.getLogger("httpengine.access").setLevel(logging.WARNING)

Text lines follow the Apache style; JSON is one object per line.
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional

from .core.connection import Connection
from .http.request import HTTPRequest


logger = logging.getLogger("httpengine.access")


@dataclass
class RequestLog:
    """
    Structured log entry for one connection.

    method/target/user_agent are "-" when the request never parsed.
    """

    connection_id: str
    client_ip: str
    method: str
    target: str
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
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms '
            f'"{self.user_agent}" [{self.connection_id}]'
        )


def log_exchange(
    conn: Connection,
    request: Optional[HTTPRequest],
    status_code: int,
    content_length: int,
    log_format: str = "text",
) -> None:
    """Emit the access log line for a connection."""
    if not logger.isEnabledFor(logging.INFO):
        return

    entry = RequestLog(
        connection_id=conn.id,
        client_ip=conn.client_ip,
        method=request.method.value if request else "-",
        target=request.target if request else "-",
        user_agent=(request.user_agent or "-") if request else "-",
        status_code=status_code,
        content_length=content_length,
        duration_ms=conn.age * 1000,
        timestamp=datetime.now(timezone.utc).strftime("%d/%b/%Y:%H:%M:%S %z"),
    )

    if log_format == "json":
        logger.info(json.dumps(entry.to_dict()))
    else:
        logger.info(entry.to_text())
