# threat_rl/logging_config.py

import logging
import logging.handlers
from pathlib import Path
from typing import Optional


def setup_logging(log_level=logging.INFO, log_file: Optional[str] = None):
    """
    Configure the root logger for the CLI and the Flask server.

    Args:
        log_level: minimum level for every handler
        log_file:  optional path; adds a rotating file handler with a
                   detailed format next to the console handler
    """
    simple_formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )
    detailed_formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)-22s | %(funcName)-18s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

    # Werkzeug logs every request at INFO
    logging.getLogger("werkzeug").setLevel(max(log_level, logging.WARNING))

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s file=%s", logging.getLevelName(log_level), log_file
    )
