"""structlog + stdlib logging setup shared by the API and the CLI.

Service modules log through ``structlog.get_logger()``; uvicorn, SQLAlchemy,
aiosqlite and alembic log through stdlib. Both are routed into one stdout
handler and rendered as JSON lines, or as coloured console output when
``MOVIE_MATCH_LOG_JSON=false``.
"""

import logging
import sys

import structlog

# Chatty third-party loggers kept at WARNING unless the root level is DEBUG
NOISY_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "uvicorn.access", "websockets")

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def _stdout_handler(json_output: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output),
            ],
        )
    )
    return handler


def configure_logging(json_output: bool = True, log_level: str = "INFO") -> None:
    """Route structlog and stdlib loggers into a single stdout handler.

    Safe to call more than once; the root handler is replaced each time.

    Args:
        json_output: Render JSON lines when ``True``, otherwise use the
            console renderer.
        log_level: Root log level name, e.g. ``"DEBUG"`` or ``"INFO"``.
            Unknown names fall back to ``INFO``.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=_SHARED_PROCESSORS + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stdout_handler(json_output))
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)
