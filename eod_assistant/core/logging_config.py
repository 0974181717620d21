import logging
import sys
from typing import Any

from pythonjsonlogger.json import JsonFormatter


class ServiceJsonFormatter(JsonFormatter):
    """JSON formatter adding level and source location to every record."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["function"] = record.funcName


def setup_logging(level: str = "INFO") -> None:
    """Route all application logs through one JSON stdout handler."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    # Reconfiguring (e.g. one app per test) must not stack handlers.
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ServiceJsonFormatter("%(asctime)s %(message)s"))
    root_logger.addHandler(handler)
