import json
import logging
from datetime import datetime, timezone

# LogRecord attributes that are never copied into the JSON payload
_RESERVED = frozenset(
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


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for production logs.

    - Merges base fields (time, level, name, message) with any attributes
      provided via `extra` on the log record (e.g., event, user_id).
    - If the message is a dict (as emitted by `log_auth_event`), its keys are
      merged into the payload.
    - Exceptions are rendered under `exc_info` as formatted text.
    - Dates are ISO-8601 UTC.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        base = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
        }

        msg = record.msg if isinstance(record.msg, dict) else record.getMessage()
        if isinstance(msg, dict):
            payload = {**base, **msg}
        else:
            payload = {**base, "message": msg}

        for key, value in record.__dict__.items():
            if key in _RESERVED:
                continue
            # Only include simple JSON-serializable values
            try:
                json.dumps(value)
                payload.setdefault(key, value)
            except TypeError:
                payload.setdefault(key, str(value))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)
