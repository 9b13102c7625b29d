from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_PATH = str(Path.home() / ".cache" / "workstation-setup" / "setup.log")

_BADGES = {
    logging.DEBUG: " .. ",
    logging.INFO: " .. ",
    logging.WARNING: "WARN",
    logging.ERROR: "FAIL",
    logging.CRITICAL: "FAIL",
}


class BadgeFormatter(logging.Formatter):
    """Console format: `  [ OK ] message`.

    The badge comes from the level, or from `extra={"badge": "OK"}` for
    success lines.
    """

    def format(self, record: logging.LogRecord) -> str:
        badge = getattr(record, "badge", None) or _BADGES.get(record.levelno, " .. ")
        return f"  [{badge:^4}] {record.getMessage()}"


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Configure logging.

    Everything (including command output at debug level) goes to the log
    file; the console gets the badge format at `level`.

    If the requested log path is not writable we fall back to a file in the
    current working directory. Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_workstation_setup_configured", False):
        return getattr(logger, "_workstation_setup_log_path", log_path)

    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler: Optional[logging.Handler] = None
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        chosen_path = log_path
    except OSError:
        fallback = str(Path.cwd() / "workstation-setup.log")
        file_handler = logging.FileHandler(fallback)
        chosen_path = fallback
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(BadgeFormatter())
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_workstation_setup_configured", True)
    setattr(logger, "_workstation_setup_log_path", chosen_path)

    logging.getLogger(__name__).debug(
        "Logging initialized (requested=%s, actual=%s)", log_path, chosen_path
    )
    return chosen_path
