"""Unified logging configuration for the documentation service."""
from __future__ import annotations

import logging
import os
from pathlib import Path

# Log directory: configurable via LOG_DIR env var for Docker
LOG_DIR = Path(os.getenv("LOG_DIR", str(Path(__file__).parent.parent / "logs")))

# Prevent duplicate handlers
_configured_loggers: set[str] = set()


def setup_logger(name: str, filename: str) -> logging.Logger:
    """Setup a logger with file and console handlers.

    Args:
        name: Logger name (e.g., 'figdoc.api', 'figdoc.pipeline')
        filename: Log file name (e.g., 'api.log')

    Returns:
        Configured logger instance
    """
    if name in _configured_loggers:
        return logging.getLogger(name)

    LOG_DIR.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.propagate = False  # Prevent duplicate logs

    # File handler
    fh = logging.FileHandler(LOG_DIR / filename, encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
    ))

    # Console handler
    sh = logging.StreamHandler()
    sh.setLevel(logging.INFO)
    sh.setFormatter(logging.Formatter(
        "%(asctime)s [%(name)s] %(message)s"
    ))

    logger.addHandler(fh)
    logger.addHandler(sh)

    _configured_loggers.add(name)
    return logger


def get_api_logger() -> logging.Logger:
    """Logger for HTTP requests (FastAPI side)."""
    return setup_logger("figdoc.api", "api.log")


def get_pipeline_logger() -> logging.Logger:
    """Logger for generation workflow stages (``figdoc.pipeline.*``)."""
    return setup_logger("figdoc.pipeline", "pipeline.log")


def get_core_logger() -> logging.Logger:
    """Logger for the design, content, documents and integrations modules.

    Configures the ``figdoc`` parent, so any ``figdoc.*`` logger without
    its own handlers writes to figdoc.log. ``figdoc.api`` and
    ``figdoc.pipeline`` keep their own files and do not propagate here.
    """
    return setup_logger("figdoc", "figdoc.log")
