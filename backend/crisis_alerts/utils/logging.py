"""Structured JSON logging for alert dispatch events."""

import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass
class DispatchEventLog:
    """Structured log for one dispatch-related event.

    Recipient addresses and phone numbers are never part of the record.
    """

    component: str
    event: str
    timestamp: str
    status: str
    latency_ms: int | None = None
    sms_requested: bool = False
    error_code: str | None = None
    error_message: str | None = None

    def to_json(self) -> str:
        return json.dumps(
            {
                "component": self.component,
                "event": self.event,
                "timestamp": self.timestamp,
                "status": self.status,
                "latency_ms": self.latency_ms,
                "sms_requested": self.sms_requested,
                "error_code": self.error_code,
                "error_message": self.error_message,
            },
            default=str,
        )


def log_dispatch_event(
    component: str,
    event: str,
    status: str,
    latency_ms: int | None = None,
    sms_requested: bool = False,
    error_code: str | None = None,
    error_message: str | None = None,
) -> None:
    """Log a dispatch event to stdout as structured JSON."""
    log = DispatchEventLog(
        component=component,
        event=event,
        timestamp=datetime.now(timezone.utc).isoformat(),
        status=status,
        latency_ms=latency_ms,
        sms_requested=sms_requested,
        error_code=error_code,
        error_message=error_message,
    )
    print(log.to_json(), flush=True)


class Timer:
    """Wall time of a `with` block in whole milliseconds, set on exit even when the block raises."""

    elapsed_ms: int = 0

    def __enter__(self) -> "Timer":
        self._started_ns = time.monotonic_ns()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.elapsed_ms = (time.monotonic_ns() - self._started_ns) // 1_000_000
        return False
