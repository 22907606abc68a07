"""
Configuration du logging applicatif (sortie standard, niveau LOG_LEVEL).
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    # Le SDK Realtime est très bavard en DEBUG
    logging.getLogger("realtime").setLevel(logging.WARNING)
