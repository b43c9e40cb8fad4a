# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Centralised logging configuration.

All log settings (levels, rotation, format …) live in  etc/logging.conf.
This module resolves the log-file path, patches it into the config text, and
applies it via the standard-library fileConfig loader.

Import the ready-made logger anywhere:
    from core.logger import logger
"""

import configparser
import logging
import logging.config
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
# project root: backend/core/logger.py  →  ../../
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOG_DIR = _PROJECT_ROOT / "log"
_LOG_FILE = _LOG_DIR / "app.log"
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"

LOGGER_NAME = "comments_api"


def configure_logging(conf_path: Path = _LOGGING_CONF, log_file: Path = _LOG_FILE) -> None:
    """
    Apply *conf_path* with ``%(log_file)s`` replaced by *log_file*.

    RawConfigParser is required: the format strings contain %(asctime)s etc.
    which ConfigParser would try to interpolate and fail on.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    raw = conf_path.read_text(encoding="utf-8")
    raw = raw.replace("%(log_file)s", str(log_file))

    parser = configparser.RawConfigParser()
    parser.read_string(raw)

    logging.config.fileConfig(parser, disable_existing_loggers=False)


configure_logging()

# ---------------------------------------------------------------------------
# Module-level handle
# ---------------------------------------------------------------------------
logger = logging.getLogger(LOGGER_NAME)
