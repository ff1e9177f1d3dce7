"""
Lightweight logging utilities for the Pegin toolkit.

Every module logs through a child of the ``pegin_toolkit`` logger. The root
package logger gets a single console handler; its level comes from the
PEGIN_LOG_LEVEL environment variable and can be raised by the CLI's
``--verbose`` flag.
"""

import logging
import os
from typing import Optional, Union

ROOT_LOGGER_NAME = "pegin_toolkit"

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        root.addHandler(handler)

        level_str = os.getenv("PEGIN_LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level_str, logging.INFO))
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger under the ``pegin_toolkit`` hierarchy.

    Names outside the package (e.g. ``__main__``) are nested under the root
    package logger so they share its handler and level.
    """
    _configure_root()
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_log_level(level: Union[int, str]) -> None:
    """Override the package log level (e.g. from a CLI flag)."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    _configure_root().setLevel(level)
