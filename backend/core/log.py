import logging
import sys

from core.config import settings


def setup_logging(level: str | None = None) -> logging.Logger:
    """
    Configure the root logger with a console handler.

    Safe to call more than once (uvicorn reload, tests).
    """
    root = logging.getLogger()
    root.setLevel(level or settings.log_level)

    # Prevent adding handlers multiple times if logging is already set up
    if root.hasHandlers():
        return root

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root.addHandler(handler)
    return root
