"""Structured logging configuration using structlog.

Provides JSON-formatted logs with consistent context including:
- run_id: Correlation ID for one processing run
- manifest_url: Address the run started from (when processing by URL)
- timestamp: ISO8601 formatted timestamp

Usage:
    from pubmanifest.logging import configure_from_settings, get_logger

    # Configure once at startup, from PUBMANIFEST_LOG_JSON
    configure_from_settings()

    # Get a logger for a module
    logger = get_logger(__name__)
    logger.info("something_happened", extra_field="value")
"""

import logging
import sys
from contextvars import ContextVar

import structlog

from pubmanifest.config import Environment, Settings, get_settings

# Context variables for run-scoped logging
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
manifest_url_var: ContextVar[str | None] = ContextVar("manifest_url", default=None)

# Set once configure_from_settings has run
_configured = False


def add_processing_context(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """Add processing context to all log entries.

    Injects all non-None ContextVar values into the log event dict.
    """
    run_id = run_id_var.get()
    manifest_url = manifest_url_var.get()

    if run_id:
        event_dict["run_id"] = run_id
    if manifest_url:
        event_dict["manifest_url"] = manifest_url

    return event_dict


def configure_logging(json_format: bool = True) -> None:
    """Configure structlog for the package.

    Args:
        json_format: If True, output JSON logs. If False, output console-friendly logs.
    """
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_processing_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)

    # Silence noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def configure_from_settings(settings: Settings | None = None) -> None:
    """Configure logging from settings, once per process.

    PUBMANIFEST_LOG_JSON selects the renderer. Under the test environment
    the structlog defaults are left alone so tests can capture events.
    """
    global _configured
    if _configured:
        return
    settings = settings or get_settings()
    if settings.pubmanifest_env == Environment.TEST:
        return
    configure_logging(json_format=settings.log_json)
    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger for the given name.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


def set_processing_context(run_id: str | None, manifest_url: str | None = None) -> None:
    """Set processing context for the current async context.

    Args:
        run_id: The run correlation ID.
        manifest_url: The address processing started from (optional).
    """
    run_id_var.set(run_id)
    if manifest_url is not None:
        manifest_url_var.set(manifest_url)


def clear_processing_context() -> None:
    """Clear all run-scoped context at the end of a run."""
    run_id_var.set(None)
    manifest_url_var.set(None)


def get_run_id() -> str | None:
    """Get the current run ID from context."""
    return run_id_var.get()
