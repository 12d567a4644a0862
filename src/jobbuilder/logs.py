# logs.py
from __future__ import annotations

import logging
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter as BaseJsonFormatter

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(remote_ip)s] %(message)s"
JSON_FORMAT = "%(levelname)s %(asctime)s %(name)s %(funcName)s %(remote_ip)s %(message)s"


class RemoteIPFilter(logging.Filter):
    """Give every record a remote_ip so the formats can reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "remote_ip"):
            record.remote_ip = "-"
        return True


class JsonFormatter(BaseJsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname.lower()


def configure_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    """
    Set up the root logger.

    Logs go to stderr as text, or, when log_file is given, are appended to
    that file as one JSON object per line.
    """
    level = logging.DEBUG if debug else logging.INFO

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        handler.setFormatter(JsonFormatter(JSON_FORMAT))
    else:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    handler.setLevel(level)
    handler.addFilter(RemoteIPFilter())

    logging.basicConfig(handlers=[handler], level=level, force=True)


def request_logger(logger: logging.Logger, remote_ip: str) -> logging.LoggerAdapter:
    return logging.LoggerAdapter(logger, {"remote_ip": remote_ip})
