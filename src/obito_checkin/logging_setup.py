#!/usr/bin/env python3
"""
Logging setup: rich console output plus a size-rotated JSON-lines file.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from obito_checkin.config import LOG_MAX_BYTES, LOG_BACKUP_COUNT


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message and context."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            entry.update(context)
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def build_file_handler(log_file: str) -> RotatingFileHandler:
    os.makedirs(os.path.dirname(log_file) or '.', exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT,
                                  encoding='utf-8')
    handler.setLevel(logging.INFO)
    handler.setFormatter(JsonLineFormatter())
    return handler


def setup_logging(console: Console, verbose: bool = False, log_file: Optional[str] = None):
    """Setup logging configuration.
    The console handler defaults to WARNING so per-token progress stays readable;
    --verbose switches it to DEBUG. The file handler always records INFO and above.
    """
    console_level = logging.DEBUG if verbose else logging.WARNING
    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=verbose,
        rich_tracebacks=verbose,
        markup=False,
    )
    console_handler.setLevel(console_level)

    handlers = [console_handler]
    if log_file:
        handlers.append(build_file_handler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )
    # Quiet noisy libraries unless verbose
    for name in ("urllib3", "requests"):
        logging.getLogger(name).setLevel(logging.WARNING if not verbose else logging.INFO)
