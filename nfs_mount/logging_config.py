import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LOG_FILE_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

START_MARKER = "========== NFS Mount Manager Started =========="


def log_success(message: str, *args) -> None:
    """Log at the SUCCESS level on the root logger."""
    logging.log(SUCCESS, message, *args)


def trim_log_file(log_file: Path, max_lines: int) -> None:
    """Keep only the last `max_lines` lines of the log file."""
    if not log_file.exists():
        return

    with open(log_file, "r", encoding="utf-8", errors="replace") as f:
        lines = f.readlines()

    if len(lines) <= max_lines:
        return

    tmp_file = log_file.with_name(log_file.name + ".tmp")
    with open(tmp_file, "w", encoding="utf-8") as f:
        f.writelines(lines[-max_lines:] if max_lines > 0 else [])
    tmp_file.replace(log_file)


def setup_logging(settings: Settings, silent: bool = False) -> None:
    """
    Setup logging: Rich console output for interactive runs + append-only file log.

    The file always receives everything; the console handler is left out
    entirely in silent mode.
    """
    log_dir = settings.log_directory
    log_dir.mkdir(parents=True, exist_ok=True)

    trim_log_file(settings.log_file_path, settings.log_max_lines)

    file_handler = logging.FileHandler(
        filename=settings.log_file_path, mode="a", encoding="utf-8"
    )
    file_handler.setLevel(settings.log_level)
    file_handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT, datefmt=LOG_DATE_FORMAT))

    # Configure root logger (catches everything)
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)

    # Clear any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if not silent:
        console = Console(stderr=True)
        rich_handler = RichHandler(
            console=console,
            show_time=False,
            show_level=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
        )
        rich_handler.setLevel(settings.log_level)
        root_logger.addHandler(rich_handler)

    root_logger.addHandler(file_handler)

    logging.info(START_MARKER)
    logging.debug(
        f"Logging initialized - File: {settings.log_file_path}, "
        f"Level: {settings.log_level}, "
        f"Kept lines: {settings.log_max_lines}"
    )
