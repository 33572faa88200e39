"""
Logging setup for the order import.

Console output (colored when DEBUG is on), optional rotating log files
(all records, errors only, and JSON lines in production), plus a filter
that tags records emitted by the sync path so they can be grepped out of
a shared log.
"""

import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from order_import.core.config import get_settings

settings = get_settings()

SYNC_OPERATION_LOGGER = "order_import.sync.operation"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else arrived through `extra=`
_STANDARD_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class ColoredFormatter(logging.Formatter):
    """Colors the level name, only when stderr is a terminal."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        text = super().format(record)
        if not (hasattr(sys.stderr, "isatty") and sys.stderr.isatty()):
            return text

        color = self.LEVEL_COLORS.get(record.levelname)
        if color is None:
            return text
        return text.replace(record.levelname, f"{color}{record.levelname}{self.RESET}", 1)


class StructuredFormatter(logging.Formatter):
    """
    One JSON document per record, for log shipping.

    Values passed through `extra=` end up under the "extra" key.
    """

    def format(self, record):
        document: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            "app": {
                "name": settings.APP_NAME,
                "version": settings.APP_VERSION,
                "environment": settings.ENVIRONMENT,
            },
        }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            document["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        extra = {key: value for key, value in vars(record).items() if key not in _STANDARD_RECORD_ATTRS}
        if extra:
            document["extra"] = extra

        return json.dumps(document, ensure_ascii=False, default=str)


class SyncOperationFilter(logging.Filter):
    """Adds `operation_type="sync"` to records from the fetch/transfer/ledger path."""

    SYNC_LOGGER_MARKERS = ("sync", "orders", "shopify", "remote", "ledger")

    def filter(self, record):
        name = record.name.lower()
        if any(marker in name for marker in self.SYNC_LOGGER_MARKERS):
            record.operation_type = "sync"
            if not hasattr(record, "sync_timestamp"):
                record.sync_timestamp = datetime.now(timezone.utc).isoformat()
        return True


def _rotating_file_handler(filename: str, level: str, formatter: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": filename,
        "maxBytes": settings.LOG_MAX_SIZE_MB * 1024 * 1024,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
    }


def _sibling_path(log_path: str, suffix: str) -> str:
    """"logs/import.log" + "_errors.log" -> "logs/import_errors.log"."""
    path = Path(log_path)
    return str(path.with_name(f"{path.stem}{suffix}"))


def get_logging_configuration() -> Dict[str, Any]:
    """
    Builds the `dictConfig` payload from the current settings.

    Returns:
        Dict: Logging configuration
    """
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "colored" if settings.DEBUG else "plain",
            "stream": "ext://sys.stdout",
        }
    }

    log_path = settings.LOG_FILE_PATH
    if log_path:
        handlers["file"] = _rotating_file_handler(log_path, settings.LOG_LEVEL, "verbose")
        handlers["error_file"] = _rotating_file_handler(_sibling_path(log_path, "_errors.log"), "ERROR", "verbose")
        if settings.is_production:
            handlers["json_file"] = _rotating_file_handler(_sibling_path(log_path, ".json"), "INFO", "json")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": settings.LOG_FORMAT, "datefmt": DATE_FORMAT},
            "verbose": {
                "format": "%(asctime)s %(levelname)-8s %(name)s [%(module)s.%(funcName)s:%(lineno)d] %(message)s",
                "datefmt": DATE_FORMAT,
            },
            "colored": {"()": ColoredFormatter, "format": settings.LOG_FORMAT, "datefmt": DATE_FORMAT},
            "json": {"()": StructuredFormatter},
        },
        "handlers": handlers,
        "root": {"level": settings.LOG_LEVEL, "handlers": list(handlers)},
    }


def configure_specific_loggers() -> None:
    """Package log levels and quieter third-party loggers."""
    logging.getLogger("order_import.services").setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    logging.getLogger("order_import.db").setLevel(logging.INFO)

    # zeep logs every WSDL import at INFO
    for noisy in ("zeep", "zeep.transports", "httpx", "aiohttp.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if settings.LEDGER_ECHO_SQL:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)


def setup_logging() -> None:
    """Configures logging for the whole process. Call once at startup."""
    if settings.LOG_FILE_PATH:
        Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_configuration())

    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL)
    sync_filter = SyncOperationFilter()
    for handler in root.handlers:
        handler.addFilter(sync_filter)

    configure_specific_loggers()

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {settings.LOG_LEVEL}")
    if settings.LOG_FILE_PATH:
        logger.info(f"Log files under {Path(settings.LOG_FILE_PATH).parent}")


def get_logger(name: str, **attributes) -> logging.Logger:
    """
    Returns a named logger, setting any keyword arguments as attributes on it.
    """
    logger = logging.getLogger(name)
    for key, value in attributes.items():
        setattr(logger, key, value)
    return logger


def log_sync_operation(operation: str, service: str, **fields):
    """
    Emits one structured INFO record describing a sync step.

    Args:
        operation: What happened (fetch, transfer, sync_batch, ...)
        service: Component that did it (ticimax, orchestrator, ledger, ...)
        **fields: Extra structured data (shop, order_number, counts, ...)
    """
    get_logger(SYNC_OPERATION_LOGGER).info(
        f"Sync operation: {operation} on {service}",
        extra={
            "sync_operation": operation,
            "service": service,
            "sync_timestamp": datetime.now(timezone.utc).isoformat(),
            **fields,
        },
    )
