"""Logging configuration for feed-timeline."""
import logging
import logging.handlers
from datetime import datetime, timedelta
from pathlib import Path

LOG_DATE_FORMAT = "%Y-%m-%d"


def setup_logging(log_dir: Path, retention_days: int = 30, verbose: bool = False) -> logging.Logger:
    """Log to a daily file (DEBUG) and to stderr (INFO, DEBUG if verbose).

    Args:
        log_dir: Directory for log files (created if missing)
        retention_days: How many days of logs to keep
        verbose: If True, set console to DEBUG level
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    cleanup_old_logs(log_dir, retention_days)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=log_dir / f"{datetime.now().strftime(LOG_DATE_FORMAT)}.log",
        when="midnight",
        backupCount=retention_days,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s [%(threadName)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(message)s", datefmt="%H:%M:%S"))
    root_logger.addHandler(console_handler)

    # connection pool chatter drowns out per-feed messages
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return root_logger


def cleanup_old_logs(log_dir: Path, retention_days: int) -> int:
    """Delete YYYY-MM-DD.log files older than retention_days. Returns count removed."""
    if not log_dir.exists():
        return 0

    cutoff = datetime.now() - timedelta(days=retention_days)
    removed = 0
    for log_file in log_dir.glob("*.log"):
        try:
            if datetime.strptime(log_file.stem, LOG_DATE_FORMAT) < cutoff:
                log_file.unlink()
                removed += 1
        except (ValueError, OSError):
            continue
    return removed
