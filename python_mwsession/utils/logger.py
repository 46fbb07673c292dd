import logging
import json
import sys
from typing import Any, Dict
from datetime import datetime, timezone

# Attributes the pipeline attaches through ``extra=`` for per-call correlation.
_CALL_FIELDS = ("request_id", "action", "status")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, tagged with the client name and, for
    records emitted while dispatching, the API call they belong to."""

    def __init__(self, client_name: str = "mwsession", **kwargs):
        super().__init__(**kwargs)
        self.client_name = client_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "client": self.client_name,
        }

        for field in _CALL_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    client_name: str = "mwsession"
):
    """
    Configures the root logger. Records go to stderr; stdout belongs to
    command output.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)

    if format_type.lower() == "json":
        handler.setFormatter(JsonFormatter(client_name=client_name))
    else:
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
