"""Structured logging configuration"""

import logging
import json
import os
from datetime import datetime
from typing import Any, Dict, Optional


class StructuredLogger:
    """
    Structured JSON logger for the risk engine.

    Keyword arguments passed to the level methods become fields of the JSON
    payload. bind() returns a logger that adds the same fields to every
    message, e.g. the run id of an analytics cycle.
    """

    def __init__(self, name: str, level: str = "INFO", context: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.context = dict(context or {})

        # One console handler per logger name
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def bind(self, **context) -> "StructuredLogger":
        """Child logger carrying extra fixed fields"""
        child = StructuredLogger.__new__(StructuredLogger)
        child.logger = self.logger
        child.context = {**self.context, **context}
        return child

    def log(self, level: str, message: str, **kwargs):
        """Log structured message"""
        log_data = {
            "timestamp": datetime.now().isoformat(),
            "level": level.upper(),
            "message": message,
            **self.context,
            **kwargs
        }

        getattr(self.logger, level.lower())(json.dumps(log_data, default=str))

    def info(self, message: str, **kwargs):
        self.log("info", message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.log("warning", message, **kwargs)

    def error(self, message: str, **kwargs):
        self.log("error", message, **kwargs)

    def debug(self, message: str, **kwargs):
        self.log("debug", message, **kwargs)


class JSONFormatter(logging.Formatter):
    """Formats records that were not already JSON-encoded by StructuredLogger"""

    def format(self, record):
        message = record.getMessage()
        if message.startswith("{"):
            return message

        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def get_logger(name: str) -> StructuredLogger:
    """Get or create structured logger, level from LOG_LEVEL"""
    return StructuredLogger(name, os.getenv("LOG_LEVEL", "INFO"))
