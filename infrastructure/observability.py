"""Structured JSON logging.

Modules log through ``logging.getLogger(__name__)`` and attach structured
fields with ``extra={"extra_fields": {...}}``. Guest PII (names, e-mails,
phones) is never put in log fields.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

_CONFIGURED = False


class JsonFormatter(logging.Formatter):
    """One JSON object per log line"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_obj.update(record.extra_fields)

        return json.dumps(log_obj, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    """Install the JSON handler on the root logger once per process"""
    global _CONFIGURED
    if _CONFIGURED:
        return

    if level is None:
        from infrastructure.config import get_settings
        level = get_settings().log_level

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level.upper())
    _CONFIGURED = True
