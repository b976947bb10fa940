"""structlog setup shared by the tracking service and its tools."""
import logging
import sys

import structlog

_QUIET_LOGGERS = ("redis", "asyncio")


def configure_logging(
    log_format: str = "console",
    log_level: str = "INFO",
    stream=None,
) -> None:
    """Route structlog and stdlib logging through a single handler.

    Args:
        log_format: "console" for human-readable output, "json" for one JSON
            object per line.
        log_level: Standard Python log level string (DEBUG, INFO, WARNING, ERROR).
        stream: Output stream for the handler. Defaults to stdout; the replay
            CLI passes stderr so that its JSON-lines output stays clean.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    stream = stream if stream is not None else sys.stdout

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger bound to the given name."""
    return structlog.get_logger(name)


def bind_camera(camera_id: str) -> None:
    """Tag every log line emitted from the current task with ``camera_id``."""
    structlog.contextvars.bind_contextvars(camera_id=camera_id)
