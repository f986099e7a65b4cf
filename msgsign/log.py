# --------------------------------------------------------------
# File: log.py
# Description: Logger compartido de la herramienta de firma.
# --------------------------------------------------------------
"""Configura una única vez el logger `msgsign` sobre stderr."""

import logging
import sys

from msgsign.config import LOG_LEVEL


def get_logger() -> logging.Logger:
    """Devuelve el logger `msgsign`, instalando su handler la primera vez."""

    logger = logging.getLogger("msgsign")
    if not logger.handlers:
        h = logging.StreamHandler(sys.stderr)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(message)s")
        h.setFormatter(fmt)
        logger.addHandler(h)
        logger.setLevel(LOG_LEVEL)
    return logger
