"""
Logging configuration for the API.

Usage:
    import logging
    logger = logging.getLogger(__name__)

    logger.info("Generating plan")

Records from stdlib loggers and structlog loggers are rendered by the same
structlog chain, so both carry the request id bound by
middleware.logging_middleware (structlog.contextvars).
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

from core.config import Settings, settings as default_settings

# `extra=` fields worth keeping in rendered records
EXTRA_FIELDS = ["request_id", "method", "path", "status_code", "duration_ms", "error"]

NOISY_LOGGERS = ["uvicorn.access", "uvicorn.error", "httpx", "httpcore", "google_genai"]


def _shared_processors():
    """Processors applied to both structlog events and foreign stdlib records"""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(allow=EXTRA_FIELDS),
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _build_formatter(log_format: str, colors: bool = True) -> structlog.stdlib.ProcessorFormatter:
    if log_format == "json":
        render_chain = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        render_chain = [
            structlog.dev.ConsoleRenderer(colors=colors, exception_formatter=structlog.dev.plain_traceback)
        ]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render_chain],
    )


def _rotating_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5)  # 10MB
    handler.setLevel(level)
    handler.setFormatter(_build_formatter("json"))
    return handler


def setup_logging(config: Optional[Settings] = None):
    """Configure logging for the application."""
    config = config or default_settings

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(_build_formatter(config.log_format, colors=config.debug))
    root_logger.addHandler(console_handler)

    # Production keeps JSON files: everything, and errors only
    if config.environment == "production":
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)
        root_logger.addHandler(_rotating_handler(log_dir / "api.log", logging.DEBUG))
        root_logger.addHandler(_rotating_handler(log_dir / "api_errors.log", logging.ERROR))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured: level={config.log_level}, format={config.log_format}, env={config.environment}")
