from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from time import monotonic

CONTEXT_KEYS = (
    "session_id",
    "service",
    "action",
    "slot_start",
    "event_id",
    "reason",
    "duration_ms",
    "slot_count",
    "free_count",
    "busy_count",
    "error",
)


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)


@contextmanager
def timed_call(
    logger: logging.Logger,
    service: str,
    action: str,
    threshold_ms: int = 2000,
) -> Iterator[None]:
    """
    Log the duration of an external call and warn when it exceeds threshold_ms.
    The duration is logged whether the call succeeds or raises.
    """
    started = monotonic()
    try:
        yield
    finally:
        duration_ms = int((monotonic() - started) * 1000)
        logger.debug(
            "External call finished",
            extra={"service": service, "action": action, "duration_ms": duration_ms},
        )
        if duration_ms > threshold_ms:
            logger.warning(
                "Slow external call (threshold %sms)",
                threshold_ms,
                extra={"service": service, "action": action, "duration_ms": duration_ms},
            )
