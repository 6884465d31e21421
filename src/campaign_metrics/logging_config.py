"""Logging setup shared by the CLI and ad-hoc scripts."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Driver loggers that are noisy at INFO (server selection, heartbeats)
NOISY_LOGGERS = ("pymongo", "dask", "distributed")


def configure_logging(
    log_path: Path | None = None,
    level: int | str = logging.INFO,
) -> None:
    """Attach stdout (and optionally file) handlers to the root logger.

    Args:
        log_path: Optional file that receives a copy of every record.
        level: Root level as an int or a name such as "DEBUG".
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=handlers,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(int(level), logging.WARNING))
