"""Structured logging setup for applications embedding the retrying transport.

The transports log through ``structlog.get_logger("roundtrip_retry...")``
with ``method``, ``url`` and ``attempt`` bound on every event. Libraries do
not configure logging on import; an application calls configure_logging()
once at startup, or wires structlog itself.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, WrappedLogger

from roundtrip_retry.config import Settings, settings as default_settings

# Parent of every logger the transports create
TRANSPORT_LOGGER_NAME = "roundtrip_retry"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def add_transport_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag events emitted by the retrying transports.

    Lets log pipelines split retry diagnostics from application events
    without parsing logger names.
    """
    record = event_dict.get("_record")
    name = record.name if record is not None else (event_dict.get("logger") or "")
    if name == TRANSPORT_LOGGER_NAME or name.startswith(TRANSPORT_LOGGER_NAME + "."):
        event_dict["component"] = "retry-transport"
    return event_dict


def configure_logging(settings: Settings | None = None) -> None:
    """Route structlog through stdlib logging with one stdout handler.

    Args:
        settings: Source of LOG_LEVEL, TRANSPORT_LOG_LEVEL and ENVIRONMENT
            (defaults to global settings)

    ENVIRONMENT=production renders JSON lines; anything else renders
    colored console output. TRANSPORT_LOG_LEVEL, when set, applies only to
    the roundtrip_retry loggers, so per-attempt DEBUG events can be turned
    on without making the whole application verbose.
    """
    settings = settings or default_settings
    root_level = _level(settings.LOG_LEVEL)
    transport_level = (
        _level(settings.TRANSPORT_LOG_LEVEL) if settings.TRANSPORT_LOG_LEVEL else root_level
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_transport_context,
    ]

    is_production = settings.ENVIRONMENT.lower() == "production"
    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )
    # The handler must pass whichever of the two levels is more verbose
    handler.setLevel(min(root_level, transport_level))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(root_level)

    logging.getLogger(TRANSPORT_LOGGER_NAME).setLevel(transport_level)
    # Wrapped httpx transports log every connection at DEBUG
    logging.getLogger("httpx").setLevel(max(root_level, logging.WARNING))
    logging.getLogger("httpcore").setLevel(max(root_level, logging.WARNING))

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=settings.LOG_LEVEL,
        transport_log_level=logging.getLevelName(transport_level),
        renderer="json" if is_production else "console",
    )
