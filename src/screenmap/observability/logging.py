"""Structured logging for ScreenMap.

Library modules only create loggers; they never touch global logging
state. Each logger is a structlog wrapper around the stdlib logger of the
same name, so events follow whatever handlers and levels the host has set
up (and are dropped below WARNING when nobody has).

The CLI owns the handlers:
- Console logging: controlled by -v (stderr via rich)
- File logging: controlled by --log (JSONL under {logs_root}/logs/)
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - used at runtime for path operations
from typing import TYPE_CHECKING

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import EventDict, Processor, WrappedLogger

_file_handler: logging.FileHandler | None = None
_logs_dir: Path | None = None

# Events reach stdlib handlers as dicts (record.msg); handlers render them.
_PROCESSORS: list[Processor] = [
    structlog.stdlib.filter_by_level,
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
]


class JSONLFileHandler(logging.FileHandler):
    """File handler that writes one JSON object per event."""

    def emit(self, record: logging.LogRecord) -> None:
        """Write log record as JSON line."""
        try:
            entry = {
                "timestamp": datetime.now(UTC).isoformat(),
                "level": record.levelname,
                "logger": record.name,
            }
            if isinstance(record.msg, dict):
                event_dict = dict(record.msg)
                event_dict.pop("level", None)
                event_dict.pop("timestamp", None)
                entry["message"] = event_dict.pop("event", "")
                entry.update(event_dict)
            else:
                entry["message"] = record.getMessage()

            if self.stream:
                self.stream.write(json.dumps(entry, default=str) + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


def _drop_rendered_by_rich(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.pop("level", None)
    event_dict.pop("timestamp", None)
    return event_dict


def _console_handler(verbosity: int) -> RichHandler:
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        level={0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG),
    )
    # RichHandler already shows time and level; render only event and context.
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _drop_rendered_by_rich,
                structlog.processors.KeyValueRenderer(key_order=["event"], drop_missing=True),
            ],
        )
    )
    return handler


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    logs_root: Path | None = None,
) -> None:
    """Install console (and optionally file) handlers on the root logger.

    Called by the CLI. Library code never calls this.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG on the console.
        log_to_file: If True, also write every event to {logs_root}/logs/debug.jsonl.
        logs_root: Directory that receives the ``logs/`` folder. Required if
            log_to_file=True.

    Raises:
        ValueError: If log_to_file=True but logs_root is not provided.
    """
    global _file_handler, _logs_dir

    if log_to_file and logs_root is None:
        raise ValueError("logs_root is required when log_to_file=True")

    close_file_logging()
    _logs_dir = None

    handlers: list[logging.Handler] = [_console_handler(verbosity)]
    if log_to_file and logs_root is not None:
        _logs_dir = logs_root / "logs"
        _logs_dir.mkdir(parents=True, exist_ok=True)
        _file_handler = JSONLFileHandler(str(_logs_dir / "debug.jsonl"), mode="a")
        _file_handler.setLevel(logging.DEBUG)
        handlers.append(_file_handler)

    root_level = logging.DEBUG if (verbosity > 0 or log_to_file) else logging.WARNING
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)

    # markdown-it is pulled in by rich and chatters at DEBUG
    logging.getLogger("markdown_it").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger bound to the stdlib logger *name*.

    Safe to call at import time: no handlers or levels are changed.
    """
    logger: structlog.stdlib.BoundLogger = structlog.wrap_logger(
        logging.getLogger(name),
        processors=_PROCESSORS,
        wrapper_class=structlog.stdlib.BoundLogger,
    )
    return logger


def get_logs_dir() -> Path | None:
    """Return the directory receiving JSONL logs, or None if file logging is off."""
    return _logs_dir


def close_file_logging() -> None:
    """Close the JSONL file handler, if any."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
