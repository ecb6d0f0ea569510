import logging

import structlog

from celine.opa_client.config import settings


def resolve_level(log_level: str | int) -> int:
    # Accept both standard level names (e.g. "INFO") and numeric values.
    if isinstance(log_level, int):
        return log_level
    level = getattr(logging, str(log_level).upper(), None)
    if not isinstance(level, int):
        try:
            level = int(log_level)
        except ValueError:
            level = logging.INFO
    return level


def configure_logging(
    log_level: str | int | None = None,
    json_format: bool | None = None,
) -> None:
    """Configure stdlib logging and structlog.

    Defaults come from settings (CELINE_OPA_LOG_LEVEL, CELINE_OPA_LOG_JSON).
    """
    level = resolve_level(settings.log_level if log_level is None else log_level)
    if json_format is None:
        json_format = settings.log_json

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # Quiet down httpx
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    processors = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
