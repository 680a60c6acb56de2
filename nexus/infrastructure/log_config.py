from __future__ import annotations

import logging
import os

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a root handler once; LOG_LEVEL picks the level (default INFO)
    and LOG_FORMAT overrides the record format."""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT))
    else:
        root.setLevel(level)
    logging.getLogger("nexus").setLevel(level)
