import logging
import os
from pathlib import Path
from typing import Optional, Tuple
from logging.handlers import TimedRotatingFileHandler
from rich.logging import RichHandler
from xcribe.core.console import console as console_manager

LOGGER_NAME = "Xcribe"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "grpc", "google", "asyncio", "charset_normalizer")


def default_log_dir() -> Path:
    xdg_state = os.environ.get("XDG_STATE_HOME")
    base = Path(xdg_state) if xdg_state else Path.home() / ".local" / "state"
    return base / "xcribe" / "logs"


def _levels(debug: bool, output_mode: str) -> Tuple[int, int]:
    """(console level, file level)"""
    if output_mode == "silent":
        return logging.CRITICAL, logging.DEBUG
    if debug:
        return logging.DEBUG, logging.DEBUG
    return logging.INFO, logging.INFO


def setup_logging(log_dir: Optional[str] = None, debug: bool = False, output_mode: str = "standard") -> logging.Logger:
    """Configures logging to the Rich console and a daily rotating file.

    Args:
        log_dir: Directory for ``app.log``. Defaults to ``default_log_dir()``.
        debug: Log DEBUG records everywhere.
        output_mode: 'standard', 'verbose' or 'silent'. 'silent' keeps the file log only.
    """
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    console_level, file_level = _levels(debug, output_mode)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    # Called again (e.g. after the config changed the mode): only adjust levels
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(file_level if isinstance(handler, TimedRotatingFileHandler) else console_level)
        return logger

    if output_mode != "silent":
        console_handler = RichHandler(
            console=console_manager.console,
            rich_tracebacks=True,
            markup=False,
            show_path=False,
        )
        console_handler.setLevel(console_level)
        logger.addHandler(console_handler)

    log_file = (Path(log_dir).expanduser() if log_dir else default_log_dir()) / "app.log"
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(log_file, when="midnight", backupCount=30, encoding="utf-8")
    except OSError as e:
        console_manager.warning(f"Could not create log file at {log_file}: {e}. Logging to console only.")
    else:
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    return logger
