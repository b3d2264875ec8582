"""structlog setup shared by the API server and the CLI."""

import logging
import sys
from contextlib import AbstractContextManager
from typing import TextIO

import structlog

from allmind.config import get_settings

# Per-request chatter from the chinvex client and asyncio subprocess plumbing.
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")

_SHARED_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
)


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    level: str,
    *,
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib records through one handler on ``stream``.

    JSON lines are emitted when ``json_output`` is set, or by default when
    APP_ENV is ``prod``. Logs always go to stderr unless a stream is given,
    so ``--json`` CLI output on stdout stays parseable.
    """
    log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    if json_output is None:
        json_output = get_settings().app_env == "prod"

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=list(_SHARED_PROCESSORS),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(json_output),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def log_context(**kwargs: object) -> AbstractContextManager[None]:
    """Bind fields (request path, scan generation) to every record in the block."""
    return structlog.contextvars.bound_contextvars(**kwargs)
