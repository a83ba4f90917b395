"""
Structured logging for the reconciliation system.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional
from po_reconciliation.config import get_config


config = get_config()


class StructuredFormatter(logging.Formatter):
    """Formats log records as structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra"):
            log_obj.update(record.extra)

        return json.dumps(log_obj, default=str)


def setup_logging(name: str = __name__) -> logging.Logger:
    """Setup and return a configured logger."""
    logger = logging.getLogger(name)
    level = getattr(logging, config.LOG_LEVEL.upper())
    logger.setLevel(level)

    # Modules call this at import time; attach handlers only once
    if logger.handlers:
        return logger

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
    logger.addHandler(console_handler)

    # File handler with structured JSON
    if config.LOG_FILE:
        file_handler = logging.FileHandler(config.LOG_FILE)
        file_handler.setLevel(level)
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    return logger


def log_deviation(
    logger: logging.Logger,
    result_ref: str,
    deviation_types: list,
    within_quantity_tolerance: bool,
    within_price_tolerance: bool,
) -> None:
    """Log a reconciliation result that carries deviations."""
    extra = {
        "type": "deviation",
        "result": result_ref,
        "deviation_types": sorted(getattr(t, "value", t) for t in deviation_types),
        "within_quantity_tolerance": within_quantity_tolerance,
        "within_price_tolerance": within_price_tolerance,
    }
    logger.warning(
        f"Deviations detected for {result_ref}: {', '.join(extra['deviation_types'])}",
        extra={"extra": extra}
    )


def log_transition(
    logger: logging.Logger,
    result_id: str,
    old_status: str,
    new_status: str,
    reviewer: Optional[str] = None,
) -> None:
    """Log an approval workflow status change."""
    extra = {
        "type": "transition",
        "result_id": result_id,
        "old_status": old_status,
        "new_status": new_status,
    }
    if reviewer:
        extra["reviewer"] = reviewer

    logger.info(
        f"Result {result_id}: {old_status} -> {new_status}",
        extra={"extra": extra}
    )
