"""Logging setup for the publisher CLI."""
from __future__ import annotations

import logging


def configure_logging(level: int = logging.INFO) -> None:
    """Set the root level; install a stream handler unless one already exists."""
    root = logging.getLogger()
    root.setLevel(level)
    # Connection pool chatter drowns the publisher's own debug output.
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
    if root.handlers:
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )