"""
Logging configuration for the API process.

``setup_logging`` attaches a console handler (and optionally a file
handler) to the root logger and tones down chatty third‑party loggers.
Application modules log through ``logging.getLogger(__name__)`` so
every record carries the dotted module path, e.g.
``culturepass_api.app.services.counter_service``.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# urllib3 logs every connection the Google token check opens.
QUIET_LOGGERS = ("urllib3", "httpx", "multipart")


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    quiet: Iterable[str] = QUIET_LOGGERS,
) -> None:
    """Configure the root logger once.

    Parameters
    ----------
    level : str
        Logging level name, case insensitive.  Unknown names fall back
        to ``INFO``.
    logfile : Optional[str]
        Optional path of a file that receives the same records as the
        console.
    quiet : Iterable[str]
        Logger names raised to ``WARNING`` regardless of ``level``.
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured (tests, repeated create_app calls).
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
