"""
Application logger.

Every record carries the correlation id of the request that produced it
(set by CorrelationMiddleware), or "-" outside a request.
"""
from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

from medlegal.core.config import settings

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [cid=%(correlation_id)s] %(message)s"


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id_var.get()
        return True


def setup_logging(level: str | None = None) -> logging.Logger:
    root = logging.getLogger("medlegal")
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if not any(getattr(h, "_medlegal", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(CorrelationIdFilter())
        handler._medlegal = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    root.propagate = False
    return root


setup_logging()
logger = logging.getLogger("medlegal.app")
