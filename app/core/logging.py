# app/core/logging.py

import logging
import sys

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stdout handler to the root logger (idempotent)."""
    global _configured
    root = logging.getLogger()
    root.setLevel(level.upper())

    if _configured or root.handlers:
        _configured = True
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True
