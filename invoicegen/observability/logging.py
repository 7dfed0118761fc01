# ==== STRUCTURED LOGGING WITH LOGURU ==== #

"""
Structured logging with loguru for InvoiceGen.

JSON log output, rotating log files, stdlib logging interception and
OpenTelemetry trace correlation, plus helpers for owner-scoped business events.
"""

import logging
import sys
from typing import Any, Dict
from pathlib import Path

from loguru import logger
from opentelemetry.instrumentation.logging import LoggingInstrumentor


def init_logging(level: str = "INFO", log_to_files: bool = True) -> None:
    """Initialize structured logging with loguru.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_files: Also write rotating JSON log files under ``logs/``
    """
    # Remove default loguru handler
    logger.remove()

    # Console handler with JSON formatting
    logger.add(
        sys.stdout,
        format="{message}",
        serialize=True,
        level=level.upper(),
        enqueue=True,
        colorize=False,
        backtrace=True,
        diagnose=False,
    )

    if log_to_files:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        logger.add(
            logs_dir / "invoicegen_{time:YYYY-MM-DD}.log",
            rotation="100 MB",
            retention="30 days",
            compression="gz",
            serialize=True,
            level="DEBUG",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )

        # Errors are kept longer than regular logs
        logger.add(
            logs_dir / "invoicegen_errors_{time:YYYY-MM-DD}.log",
            rotation="50 MB",
            retention="90 days",
            compression="gz",
            serialize=True,
            level="ERROR",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )

    # Intercept standard logging to route through loguru
    class InterceptHandler(logging.Handler):
        def emit(self, record):
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            # Find caller from where originated the logged message
            frame, depth = logging.currentframe(), 2
            while frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    try:
        LoggingInstrumentor().instrument(set_logging_format=False)
    except Exception as e:
        logger.warning(f"Failed to setup OpenTelemetry logging: {e}")

    logger.info("Structured logging initialized", level=level)


class ContextualLogger:
    """Logger bound to a module name with trace context injection.

    Keyword arguments passed to any log method are attached to the record
    as structured fields.
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logger.bind(logger_name=name)

    def _add_context(self, extra: Dict[str, Any] | None = None) -> Dict[str, Any]:
        context = {"logger_name": self.name}

        if extra:
            context.update(extra)

        try:
            from opentelemetry import trace
            span = trace.get_current_span()
            if span and span.is_recording():
                span_context = span.get_span_context()
                if span_context.is_valid:
                    context['trace_id'] = format(span_context.trace_id, '032x')
                    context['span_id'] = format(span_context.span_id, '016x')
        except Exception:
            pass

        return context

    def debug(self, msg: str, **kwargs: Any) -> None:
        self.logger.bind(**self._add_context(kwargs)).debug(msg)

    def info(self, msg: str, **kwargs: Any) -> None:
        self.logger.bind(**self._add_context(kwargs)).info(msg)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self.logger.bind(**self._add_context(kwargs)).warning(msg)

    def error(self, msg: str, **kwargs: Any) -> None:
        self.logger.bind(**self._add_context(kwargs)).error(msg)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log exception with full traceback and context."""
        self.logger.bind(**self._add_context(kwargs)).exception(msg)


# ==== LOGGING UTILITIES ==== #

def get_logger(name: str) -> ContextualLogger:
    """Get a contextual logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        ContextualLogger instance
    """
    return ContextualLogger(name)


def log_business_event(event_type: str, owner_id: str, **context: Any) -> None:
    """Log business events with structured data.

    Args:
        event_type: Type of business event (invoice_created, invoice_paid, ...)
        owner_id: Owning user identifier
        **context: Additional business context
    """
    logger.bind(
        event_type=event_type,
        owner_id=owner_id,
        business_event=True,
        **context
    ).info(f"Business event: {event_type}")
