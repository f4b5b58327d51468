from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the root logger."""

    global _configured  # noqa: PLW0603 - configured once per process

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if _configured:
        logging.getLogger().setLevel(level)
        return

    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Selenium and urllib3 are chatty at INFO.
    logging.getLogger("selenium").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    _configured = True
