"""
Logging setup for the classifier.

The library never installs handlers on import. Applications call
setup_console_logging / setup_json_logging once at startup.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

LOG_DIR = Path("logs")
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(signature)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_SIZE_MB = 10
BACKUP_COUNT = 5

EVENTS_LOGGER = "whale_swaps.events"

_loggers: Dict[str, logging.Logger] = {}


class SignatureFilter(logging.Filter):
    """Make sure every record has a ``signature`` attribute for LOG_FORMAT."""
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'signature'):
            record.signature = '-'
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    FIELDS = (
        "event_type", "signature", "reason", "direction", "confidence",
        "swapper", "error_code", "context",
    )

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        for key in self.FIELDS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


_signature_filter = SignatureFilter()


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get or create a logger."""
    if name in _loggers:
        return _loggers[name]
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    _loggers[name] = logger
    return logger


def setup_console_logging(level: int = logging.INFO) -> None:
    """Attach a stdout handler to the root logger (once)."""
    root_logger = logging.getLogger()

    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler) and getattr(handler, "stream", None) is sys.stdout:
            return

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(_signature_filter)
    root_logger.addHandler(console_handler)
    if root_logger.level > level or root_logger.level == logging.NOTSET:
        root_logger.setLevel(level)


def setup_json_logging(
    filename: str = "classifications.jsonl",
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Route structured classifier events to a rotating JSONL file."""
    directory = Path(log_dir) if log_dir is not None else LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / filename

    json_logger = logging.getLogger(EVENTS_LOGGER)
    json_logger.setLevel(logging.INFO)
    json_logger.propagate = False

    for handler in json_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return json_logger

    json_handler = logging.handlers.RotatingFileHandler(
        str(log_path),
        maxBytes=MAX_LOG_SIZE_MB * 1024 * 1024,
        backupCount=BACKUP_COUNT,
        encoding='utf-8'
    )
    json_handler.setFormatter(JSONFormatter())
    json_logger.addHandler(json_handler)
    return json_logger


def _emit_event(level: int, msg: str, attrs: Dict[str, Any], exc_info=None) -> None:
    json_logger = logging.getLogger(EVENTS_LOGGER)
    if not json_logger.handlers:
        return
    record = json_logger.makeRecord(
        name=EVENTS_LOGGER,
        level=level,
        fn="", lno=0,
        msg=msg,
        args=(), exc_info=exc_info
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    json_logger.handle(record)


def log_classification_event(
    kind: str,
    signature: str,
    reason: Optional[str] = None,
    direction: Optional[str] = None,
    confidence: Optional[str] = None,
    swapper: Optional[str] = None,
) -> None:
    """Structured record of one classification outcome (no-op without setup_json_logging)."""
    attrs: Dict[str, Any] = {"event_type": kind, "signature": signature}
    if reason is not None:
        attrs["reason"] = reason
    if direction is not None:
        attrs["direction"] = direction
    if confidence is not None:
        attrs["confidence"] = confidence
    if swapper is not None:
        attrs["swapper"] = swapper
    _emit_event(logging.INFO, f"{kind}: {signature[:16]}...", attrs)


def log_critical_error(
    error_code: str,
    message: str,
    module: str,
    exception: Optional[Exception] = None,
    extra: Optional[Dict[str, Any]] = None
) -> None:
    """Log an internal consistency problem with its full debug context."""
    attrs: Dict[str, Any] = {"event_type": "CRITICAL_ERROR", "error_code": error_code}
    if extra:
        attrs["context"] = dict(extra)
    _emit_event(
        logging.ERROR,
        message,
        attrs,
        exc_info=(type(exception), exception, exception.__traceback__) if exception else None,
    )
    logger = get_logger(module)
    logger.error(f"[{error_code}] {message} | context={extra or {}}")
