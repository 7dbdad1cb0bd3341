"""Logging helpers shared by the settings modules.

Domain code logs a short event name as the message and passes structured
context through `extra`, e.g.::

    logger.info("stock_changed", extra={"event": "stock_changed", "product_id": 3})

`JsonFormatter` turns that into one JSON object per line; `SamplingFilter`
thins noisy INFO traffic without ever dropping audit events.
"""

import json
import logging
import random
from datetime import datetime, timezone
from decimal import Decimal

# Events that reconcile money and stock; never sampled away
AUDIT_EVENTS = ("order_status_changed", "stock_changed", "payment_event_received")

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """Render a record as `{"time", "level", "name", "message", **extra}`.

    Timestamps are ISO-8601 UTC. Decimals keep their exact string form and
    other values that JSON cannot encode are stringified. Exceptions are
    attached under `exc_info` as formatted text.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in payload:
                continue
            payload[key] = _jsonable(value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class SamplingFilter(logging.Filter):
    """Keep a `rate` fraction of records at the sampled `levels`.

    A record whose `event` extra (or message) is listed in `allow_events`
    always passes, as does anything at a level outside `levels`.
    """

    def __init__(self, rate: float = 1.0, levels: list[str] | None = None, allow_events: list[str] | None = None):
        super().__init__()
        self.rate = min(max(float(rate), 0.0), 1.0)
        self.levels = set(levels or ["INFO"])
        self.allow_events = set(allow_events or AUDIT_EVENTS)

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if record.levelname not in self.levels:
            return True
        event = getattr(record, "event", None) or record.msg
        if isinstance(event, str) and event in self.allow_events:
            return True
        if self.rate >= 1.0:
            return True
        return random.random() < self.rate


def build_logging(*, formatter: str = "json", level: str = "INFO", orders_sample_rate: float = 1.0) -> dict:
    """Return a `LOGGING` dict routing every `storefront.*` logger to stdout.

    `formatter` is `json` for machine-read output or `verbose` for a plain
    console line. Only `storefront.orders` INFO records are sampled.
    """

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "config.logging.JsonFormatter"},
            "verbose": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
        },
        "filters": {
            "orders_info_sample": {
                "()": "config.logging.SamplingFilter",
                "rate": orders_sample_rate,
                "levels": ["INFO"],
                "allow_events": list(AUDIT_EVENTS),
            },
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": formatter},
            "orders_console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "filters": ["orders_info_sample"],
            },
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {
            "storefront": {"handlers": ["console"], "level": level, "propagate": False},
            "storefront.orders": {"handlers": ["orders_console"], "level": level, "propagate": False},
        },
    }
