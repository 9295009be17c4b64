from __future__ import annotations

import logging
import sys


class _ThirdPartyNoiseFilter(logging.Filter):
    """Keep our own logs; only let other libraries through at WARNING+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(("taskstore_api", "task_client")):
            return True
        # uvicorn's access/error loggers are useful when serving.
        if record.name.startswith("uvicorn"):
            return True
        return record.levelno >= logging.WARNING


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Attach one stderr handler to the root logger.

    Does nothing if the root logger already has handlers (pytest, uvicorn --log-config,
    an embedding application), so calling it twice is safe.
    """
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    if root.handlers:
        return
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(handler)
