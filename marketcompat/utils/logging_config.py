#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Centralized logging configuration for marketcompat.

All modules log through loguru. ``configure_logging`` replaces loguru's default
sink with a console sink and, optionally, rotating file sinks.
"""

import os
import sys
import json

from loguru import logger

from marketcompat.config import config

LOG_LEVELS = {
    "TRACE": 5,
    "DEBUG": 10,
    "INFO": 20,
    "SUCCESS": 25,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50
}

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def _json_sink(message) -> None:
    record = message.record
    sys.stderr.write(json.dumps({
        "timestamp": record["time"].strftime("%Y-%m-%d %H:%M:%S.%f"),
        "level": record["level"].name,
        "message": record["message"],
        "module": record["name"],
        "function": record["function"],
        "line": record["line"],
        "extra": {k: str(v) for k, v in record["extra"].items()}
    }) + "\n")


def configure_logging(
    log_level: str = None,
    log_to_console: bool = True,
    log_to_file: bool = None,
    log_dir: str = None,
    app_name: str = "marketcompat",
    structured_logging: bool = None,
    rotation: str = "50 MB",
    retention: str = "10 days",
) -> None:
    """
    Configure the logging system.

    Args:
        log_level: Minimum log level to capture (default: from config or INFO)
        log_to_console: Whether to log to stderr
        log_to_file: Whether to log to file (default: from config)
        log_dir: Directory to store log files (default: from config)
        app_name: Application name for log file naming
        structured_logging: Whether console output is JSON (default: from config)
        rotation: When to rotate log files
        retention: How long to keep log files
    """
    logger.remove()

    if log_level is None:
        log_level = config.get("LOG_LEVEL", "INFO")
    log_level = log_level.upper()
    if log_level not in LOG_LEVELS:
        log_level = "INFO"

    if log_to_file is None:
        log_to_file = config.get("LOG_TO_FILE", False)
    if structured_logging is None:
        structured_logging = config.get("STRUCTURED_LOGGING", False)

    if log_to_console:
        if structured_logging:
            logger.add(_json_sink, level=log_level)
        else:
            logger.add(
                sys.stderr,
                format=DEFAULT_FORMAT,
                level=log_level,
                colorize=True,
                backtrace=True,
                diagnose=False
            )

    if log_to_file:
        if log_dir is None:
            log_dir = config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)

        logger.add(
            os.path.join(log_dir, f"{app_name}.log"),
            format=DEFAULT_FORMAT,
            level=log_level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False
        )
        logger.add(
            os.path.join(log_dir, f"{app_name}_error.log"),
            format=DEFAULT_FORMAT,
            level="ERROR",
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False
        )


def with_context(**kwargs):
    """Create a logger carrying additional context."""
    return logger.bind(**kwargs)


__all__ = ["logger", "with_context", "configure_logging", "LOG_LEVELS"]
