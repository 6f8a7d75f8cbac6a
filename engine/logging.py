from __future__ import annotations

import logging
import os

# Per-request INFO lines from the HTTP stack drown out the loader's own events.
_NOISY_LOGGERS = ("httpx", "httpcore", "trimesh")


def configure_logging(default_level: str = "INFO", quiet: tuple[str, ...] = _NOISY_LOGGERS) -> None:
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(thread)d | %(message)s",
    )
    for name in quiet:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
