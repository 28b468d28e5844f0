"""
Logging setup for the Project Tracker API.

Console output always; a rotating file under LOG_DIR when it is set
(5 MB per file, 5 backups). Modules log through logging.getLogger(__name__),
the root handlers configured here pick them up.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s]: %(message)s"

_configured = False


def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> logging.Logger:
    global _configured
    root = logging.getLogger()
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    root.setLevel(level)
    if _configured:
        return root

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    log_dir = log_dir or os.getenv("LOG_DIR")
    if log_dir:
        try:
            path = Path(log_dir)
            path.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                str(path / "project_tracker.log"),
                maxBytes=5_000_000,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError as e:
            root.warning("File logging disabled: %s", e)

    _configured = True
    return root
