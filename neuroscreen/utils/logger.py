import os
import sys
import logging

# --------------------------------------------------------
# Shared logger for every screening component.
# Level comes from NEUROSCREEN_LOG_LEVEL (default INFO);
# per-frame analyzer output is DEBUG only.
# --------------------------------------------------------
LOGGER_NAME = "neuroscreen"
LOG_LEVEL = os.getenv("NEUROSCREEN_LOG_LEVEL", "INFO").upper()

logger = logging.getLogger(LOGGER_NAME)
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            '[%(asctime)s] [%(levelname)s] %(message)s',
            datefmt='%H:%M:%S'
        )
    )
    logger.addHandler(handler)

# Host servers (uvicorn) install their own root handlers
logger.propagate = False


def debug(msg):
    logger.debug(msg)

def info(msg):
    logger.info(msg)

def warn(msg):
    logger.warning(msg)

def exception(msg):
    """ERROR with the active traceback; call from an except block."""
    logger.exception(msg)
