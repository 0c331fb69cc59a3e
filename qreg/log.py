# qreg/log.py
import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_ROOT_NAME = "qreg"


def _configure_root():
    root = logging.getLogger(_ROOT_NAME)
    if root.handlers:
        return root
    level = os.getenv("QREG_LOG_LEVEL", "WARNING").upper()
    root.setLevel(getattr(logging, level, logging.WARNING))
    if os.getenv("QREG_LOG_TO_CONSOLE", "false").lower() == "true":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    else:
        root.addHandler(logging.NullHandler())
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, configuring it on first use."""
    _configure_root()
    if not name.startswith(_ROOT_NAME):
        name = f"{_ROOT_NAME}.{name}"
    return logging.getLogger(name)
