import json
import logging
import sys
from datetime import datetime, timezone

_MASK = "********"
_CREDENTIAL_MARKERS = ("password", "secret", "token", "authorization")
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

# Chatty libraries that only matter when debugging the driver itself.
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "asyncpg")


def _mask_credentials(fields: dict) -> dict:
    masked = {}
    for key, value in fields.items():
        if any(marker in key.lower() for marker in _CREDENTIAL_MARKERS):
            masked[key] = _MASK
        elif isinstance(value, dict):
            masked[key] = _mask_credentials(value)
        else:
            masked[key] = value
    return masked


class JSONFormatter(logging.Formatter):
    """One JSON object per line, tagged with the current request id."""

    def format(self, record: logging.LogRecord) -> str:
        from storefront.api.middleware.request_id import request_id_var

        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if request_id := request_id_var.get(""):
            entry["request_id"] = request_id
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        fields = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if fields:
            entry["extra"] = _mask_credentials(fields)
        return json.dumps(entry, default=str)


def setup_logging(level: int = logging.INFO) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
