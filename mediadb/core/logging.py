"""Logging setup shared by the app factory and the scripts."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    global _configured
    if not _configured:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        _configured = True
    logging.getLogger("mediadb").setLevel(level)
