import json
import logging
import random
from datetime import datetime, timezone
from decimal import Decimal

# LogRecord attributes that are plumbing, not event context
_RESERVED_ATTRS = frozenset(
    (
        "msg",
        "args",
        "levelname",
        "levelno",
        "name",
        "created",
        "msecs",
        "relativeCreated",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "exc_info",
        "exc_text",
        "stack_info",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    )
)


def _json_value(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    try:
        json.dumps(value)
        return value
    except TypeError:
        return str(value)


class JsonFormatter(logging.Formatter):
    """JSON formatter for production logs.

    - Base fields are time (ISO-8601 UTC), level, logger name and message.
    - Services log an event name as the message (``inventory.item_created``)
      and put context in ``extra``; those attributes are merged in.
    - A dict message is merged into the payload under its own keys.
    - Exceptions are rendered into an ``exc`` field.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
        }

        if isinstance(record.msg, dict):
            payload.update({k: _json_value(v) for k, v in record.msg.items()})
        else:
            payload["message"] = record.getMessage()

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            payload.setdefault(key, _json_value(value))

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


class SamplingFilter(logging.Filter):
    """Probabilistically drop logs to reduce noise while keeping signal.

    - `rate`: float in [0.0, 1.0]; fraction of matching records to allow.
    - `levels`: level names sampling applies to (default ``["INFO"]``).
    - `allow_events`: event names (the record's ``msg``) that are never dropped.
    """

    def __init__(self, rate: float = 1.0, levels: list[str] | None = None, allow_events: list[str] | None = None):
        super().__init__()
        try:
            self.rate = min(max(float(rate), 0.0), 1.0)
        except (TypeError, ValueError):
            self.rate = 1.0
        self.levels = set(levels or ["INFO"])
        self.allow_events = set(allow_events or [])

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if record.levelname not in self.levels:
            return True
        if getattr(record, "msg", "") in self.allow_events:
            return True
        if self.rate >= 1.0:
            return True
        if self.rate <= 0.0:
            return False
        return random.random() < self.rate
