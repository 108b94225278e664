from __future__ import annotations

import logging
import sys
from typing import Union

# httpx logs every request URL at INFO, Zendesk ticket ids included
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "langchain")


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """One stdout handler; `level` accepts a name ("DEBUG") or a number."""
    root = logging.getLogger()
    if root.handlers:
        return  # reload / repeated create_app()

    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    ))

    root.setLevel(level)
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
