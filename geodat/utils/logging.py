# geodat/utils/logging.py

from __future__ import annotations

import logging
import sys

_ROOT_NAME = "geodat"
_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger living under the ``geodat`` namespace.

    The namespace root gets a single stderr handler the first time any
    module asks for a logger.
    """
    _configure_root()
    if name != _ROOT_NAME and not name.startswith(_ROOT_NAME + "."):
        name = f"{_ROOT_NAME}.{name}"
    return logging.getLogger(name)


def set_level(level: int) -> None:
    _configure_root().setLevel(level)
