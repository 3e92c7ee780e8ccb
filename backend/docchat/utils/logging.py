"""Logging setup and structured pipeline event logging."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class StructuredFormatter(logging.Formatter):
    """Formatter that appends the `structured` extra dict as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        structured = getattr(record, "structured", None)
        if not structured:
            return base
        fields = " ".join(f"{key}={value}" for key, value in structured.items())
        return f"{base} | {fields}"


def configure_logging(level: str = "INFO") -> None:
    """Install a structured formatter on the root logger.

    Idempotent: a second call only updates the level.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for handler in root.handlers:
        if isinstance(handler.formatter, StructuredFormatter):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(LOG_FORMAT))
    root.addHandler(handler)


class PipelineLogger:
    """Structured logger for ingestion and completion events."""

    def log_ingest(
        self,
        filename: str,
        status: str,
        latency_ms: float,
        doc_id: str | None = None,
        error: str | None = None,
    ) -> None:
        """Log the outcome of ingesting one uploaded file."""
        log_data: dict[str, Any] = {
            "file": filename,
            "status": status,
            "latency_ms": round(latency_ms, 2),
        }
        if doc_id:
            log_data["doc_id"] = doc_id
        if error:
            log_data["error"] = error

        log_msg = f"Ingest: {filename} - {status}"

        if status == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})

    def log_completion(
        self,
        provider: str,
        model: str,
        outcome: str,
        latency_ms: float,
        source_count: int,
        error: str | None = None,
    ) -> None:
        """Log a chat completion call."""
        log_data: dict[str, Any] = {
            "provider": provider,
            "model": model,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "sources": source_count,
        }
        if error:
            log_data["error"] = error

        log_msg = f"Completion: {provider}/{model} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
