# utils/log.py - stdout logger shared by the client and the upload runner
import logging
import os
import sys

ROOT_LOGGER = "simple_relevance"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def get_logger(name: str = ROOT_LOGGER):
    # Only the package logger gets a handler; children propagate to it, it does not
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.propagate = False
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
        root.setLevel(getattr(logging, level, logging.INFO))
    return logging.getLogger(name)
