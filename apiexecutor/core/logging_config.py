"""
Logging Configuration

Provides:
- CustomJsonFormatter: one JSON object per record, extra fields included
- setup_logging: YAML dictConfig loader with ${VAR} substitution
"""

import json
import logging
import logging.config
import os
import string
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import yaml

if TYPE_CHECKING:
    from apiexecutor.config import ExecutorConfig

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "logging.yml"

_STANDARD_ATTRS = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


class CustomJsonFormatter(logging.Formatter):
    """
    JSON Formatter.

    Fields:
      - _time: ISO8601 timestamp (millisecond precision)
      - level: Log level
      - logger: Logger name (e.g. apiexecutor.executor)
      - message: Log message
      - any ``extra`` passed to the logging call (api_method, attempt, ...)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "_time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
    config: Optional["ExecutorConfig"] = None,
) -> None:
    """
    Load the YAML config, substitute environment variables, and initialize logging.

    Path and level default to ``config.LOG_CONFIG_PATH`` / ``config.LOG_LEVEL``
    when an ExecutorConfig is given. Falls back to ``logging.basicConfig`` when
    the file does not exist.
    """
    if config is not None:
        config_path = config_path or config.LOG_CONFIG_PATH or None
        log_level = log_level or config.LOG_LEVEL

    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    level = log_level or os.environ.get("LOG_LEVEL", "INFO")

    if not path.exists():
        logging.basicConfig(level=level)
        return

    with open(path, "r", encoding="utf-8") as f:
        # Supports ${LOG_LEVEL} format.
        template = string.Template(f.read())

    mapping = os.environ.copy()
    mapping["LOG_LEVEL"] = level

    content = template.safe_substitute(mapping)
    dict_config = yaml.safe_load(content)
    logging.config.dictConfig(dict_config)
