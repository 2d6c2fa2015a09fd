"""
Логирование тэггера.

Два формата вывода (LOG_FORMAT):
    json   - одна JSON-строка на событие, для production
    simple - "время | уровень | [request] logger: сообщение key=value", для разработки

Поля из extra={...} попадают в вывод обоих форматов, request id берётся
из request_id_var (его выставляет RequestLoggingMiddleware).
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from .config import settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Атрибуты, которые есть у любого LogRecord; всё остальное пришло из extra
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
    | {"message", "asctime", "taskName"}
)

# Шумные сторонние логгеры и их уровень
_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "aiosqlite": logging.WARNING,
}


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    """Поля, переданные в logger.*(..., extra={...})."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    Пример строки:
    {"timestamp": "2026-10-19T12:00:00+00:00", "level": "INFO",
     "logger": "tagger.services.team", "message": "Team created",
     "request_id": "5f0c...", "extra": {"team_id": "V1StGXR8_Z5jdHi6B-myT"}}
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if request_id := request_id_var.get():
            payload["request_id"] = request_id
        if extra := extra_fields(record):
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class SimpleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, UTC).strftime("%H:%M:%S")
        request_id = request_id_var.get()
        prefix = f"[{request_id[:8]}] " if request_id else ""

        line = f"{timestamp} | {record.levelname:8} | {prefix}{record.name}: {record.getMessage()}"
        extra = extra_fields(record)
        if extra:
            line += " " + " ".join(f"{key}={value}" for key, value in extra.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JSONFormatter,
    "simple": SimpleFormatter,
}


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Настроить корневой логгер: один handler в stdout с выбранным форматом.

    Неизвестный log_format трактуется как "simple", неизвестный уровень как INFO.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(FORMATTERS.get(log_format.lower(), SimpleFormatter)())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DATABASE_ECHO else logging.WARNING
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def generate_request_id() -> str:
    return str(uuid.uuid4())
