"""Loguru helpers for consistent logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from floresta_cln.config.schema import LoggingConfig

_SINK_IDS: dict[str, int] = {}


def ensure_rotating_log_file(path: Path, level: str = "INFO") -> Path:
    """Ensure a rotating log sink writing to `path`."""
    log_path = Path(path).expanduser()
    key = str(log_path)
    if key in _SINK_IDS:
        return log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        key,
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[key] = sink_id
    return log_path


def configure_logging(config: LoggingConfig, *, stderr: bool = True) -> None:
    """Replace default sinks; stdout is never used since it carries the protocol."""
    logger.remove()
    _SINK_IDS.clear()
    if stderr:
        logger.add(sys.stderr, level=config.level, backtrace=False, diagnose=False)
    if config.file is not None:
        ensure_rotating_log_file(config.file, level=config.level)
