"""Logging configuration for routeros-sync.

Provides configurable logging with:
- File-based logging with rotation
- Console output for real-time debugging
- Performance timing decorator for synchronizer operations

Environment Variables:
    ROUTEROS_SYNC_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    ROUTEROS_SYNC_LOG_FILE: Path to log file (default: ~/.routeros-sync/routeros-sync.log)
    ROUTEROS_SYNC_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    ROUTEROS_SYNC_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from routeros_sync.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("read")
    async def read(self, record):
        ...
"""
import asyncio
import functools
import logging
import os
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("routeros_sync.perf")


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get("ROUTEROS_SYNC_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".routeros-sync" / "routeros-sync.log"
    path_str = os.environ.get("ROUTEROS_SYNC_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging() -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (INFO+ by default, respects ROUTEROS_SYNC_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    """
    log_level = get_log_level()
    log_file = get_log_file()
    max_size_mb = int(os.environ.get("ROUTEROS_SYNC_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("ROUTEROS_SYNC_LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-30s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    # perf records propagate up to this logger
    root_logger = logging.getLogger("routeros_sync")
    root_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    root_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")


def _target_of(args: tuple) -> Optional[str]:
    """Best-effort name of the object an operation runs against."""
    if not args:
        return None
    target = getattr(args[0], "schema", None)
    return getattr(target, "path", None)


def _report(operation: str, label: Optional[str], start: float, error: Optional[Exception] = None) -> None:
    elapsed = (time.perf_counter() - start) * 1000  # ms
    line = f"{operation:12s} | {label or 'N/A':20s} | {elapsed:8.2f}ms"
    if error is None:
        perf_logger.info(f"{line} | OK")
    else:
        perf_logger.warning(f"{line} | FAIL: {error}")


def timed(operation: str, target: Optional[str] = None):
    """Decorator to log execution time of sync/async functions.

    Args:
        operation: Name of the operation (e.g., "read", "create", "import")
        target: Optional target label (inferred from ``self.schema.path``)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            label = target or _target_of(args)
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _report(operation, label, start, e)
                raise
            _report(operation, label, start)
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            label = target or _target_of(args)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _report(operation, label, start, e)
                raise
            _report(operation, label, start)
            return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
