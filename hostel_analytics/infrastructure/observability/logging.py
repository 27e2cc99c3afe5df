"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from hostel_analytics.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_payment(
    request_id: str,
    invoice_id: str,
    amount_cents: int,
    status: str,
    duration_ms: float,
) -> None:
    """Log structured payment outcome for reconciliation"""
    logging.info(
        "Payment recorded",
        extra={
            "request_id": request_id,
            "invoice_id": invoice_id,
            "step": "payment_recorded",
            "amount_cents": amount_cents,
            "invoice_status": status,
            "duration_ms": duration_ms,
        },
    )


def log_forecast(request_id: str, historical_days: int, trend: str, duration_ms: float) -> None:
    logging.info(
        "Forecast generated",
        extra={
            "request_id": request_id,
            "step": "forecast_complete",
            "historical_days": historical_days,
            "trend": trend,
            "duration_ms": duration_ms,
        },
    )
