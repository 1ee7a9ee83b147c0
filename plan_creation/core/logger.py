"""Logger configuration for the plan creation engine.

The engine is a library: nothing is configured on import. Hosts call
configure_logging() once at startup, or setup_logger() with explicit values.
Engine modules log with bracketed component tags ([SESSION], [RECONCILER],
[SCHEDULER], ...) so one sink can serve the whole host process.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from plan_creation.config.settings import Settings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def _console_sink(level: str) -> dict[str, Any]:
    return {"sink": sys.stderr, "format": CONSOLE_FORMAT, "level": level, "colorize": True}


def _file_sink(log_file: str, level: str, rotation: str, retention: str) -> dict[str, Any]:
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return {
        "sink": log_path,
        "format": FILE_FORMAT,
        "level": level,
        "rotation": rotation,
        "retention": retention,
        "compression": "zip",
        "backtrace": True,
        "diagnose": True,
    }


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> list[int]:
    """Replace all loguru sinks with engine sinks.

    Args:
        level: Minimum level for every sink
        log_file: Optional file path; rotated and zip-compressed when set
        rotation: File rotation trigger (e.g. "10 MB", "1 day")
        retention: How long rotated files are kept (e.g. "7 days")

    Returns:
        loguru handler ids, console first
    """
    sinks = [_console_sink(level)]
    if log_file:
        sinks.append(_file_sink(log_file, level, rotation, retention))

    logger.remove()
    handler_ids = [logger.add(**sink) for sink in sinks]
    logger.info(f"[LOGGING] Sinks configured: level={level} file={log_file or 'none'}")
    return handler_ids


def configure_logging(settings: Settings | None = None) -> list[int]:
    """Configure sinks from LOG_LEVEL, LOG_FILE, LOG_ROTATION and LOG_RETENTION."""
    active = settings or get_settings()
    return setup_logger(
        level=active.log_level,
        log_file=active.log_file,
        rotation=active.log_rotation,
        retention=active.log_retention,
    )
