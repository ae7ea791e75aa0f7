"""
Centralized logging configuration with structured logging support.

Engine modules log through ``logging.getLogger(__name__)`` and attach
selection fields with ``extra=``. ``setup_logging()`` is called once by the
host application; a selection run can be tagged with a correlation ID via
``request_id_scope``.
"""
import json
import logging
import logging.config
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from simulation_builder.core.config import settings

# Correlation ID for the selection run currently executing in this context.
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Structured fields the engine attaches through ``extra=``
SELECTION_LOG_FIELDS = (
    "subject_id",
    "difficulty",
    "requested",
    "achieved",
    "allocation_preset",
)

_HUMAN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@contextmanager
def request_id_scope(request_id: Optional[str]) -> Iterator[None]:
    """
    Tag every log entry emitted inside the block with ``request_id``.

    A ``None`` ID leaves the surrounding context untouched.
    """
    if request_id is None:
        yield
        return
    token = request_id_context.set(request_id)
    try:
        yield
    finally:
        request_id_context.reset(token)


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for production logging.

    One object per line: timestamp, level, logger, message, the run's
    request ID when set, and any selection fields present on the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_context.get()
        if request_id:
            entry["request_id"] = request_id

        entry.update(
            {
                name: getattr(record, name)
                for name in SELECTION_LOG_FIELDS
                if hasattr(record, name)
            }
        )

        if record.levelno >= logging.ERROR:
            entry["source"] = f"{record.pathname}:{record.lineno}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def build_logging_config(
    log_level: int, use_json: bool, sql_debug: bool = False
) -> Dict[str, Any]:
    """
    Build the ``dictConfig`` mapping for the package.

    Args:
        log_level: Level for the root and ``simulation_builder`` loggers.
        use_json: Emit JSON lines instead of the human-readable format.
        sql_debug: Let SQLAlchemy engine logs through at INFO.

    Returns:
        Configuration dict accepted by ``logging.config.dictConfig``.
    """
    console = {
        "class": "logging.StreamHandler",
        "level": log_level,
        "formatter": "json" if use_json else "default",
        "stream": sys.stdout,
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": _HUMAN_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            "json": {"()": JSONFormatter},
        },
        "handlers": {"console": console},
        "root": {"level": log_level, "handlers": ["console"]},
        "loggers": {
            "simulation_builder": {
                "level": log_level,
                "handlers": ["console"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": logging.INFO if sql_debug else logging.WARNING,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging from settings.

    JSON output in production, human-readable output elsewhere. An unknown
    level name falls back to INFO.

    Args:
        level: Level name overriding ``settings.LOG_LEVEL``.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.config.dictConfig(
        build_logging_config(
            log_level,
            use_json=settings.ENV == "production",
            sql_debug=settings.DEBUG,
        )
    )
