"""
Centralized Logging Configuration for the ATS Scorer API

Every module logs through ``get_logger(__name__)`` so records land under the
``ats_scorer.`` namespace. ``configure_for_environment`` picks a profile from
``ENVIRONMENT`` (development, production, testing) once at import of the app.
"""
import functools
import logging
import logging.config
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


LOGGER_PREFIX = "ats_scorer"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

FORMATS = {
    "simple": "%(levelname)s - %(name)s - %(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)-36s | %(funcName)-20s:%(lineno)-4d | %(message)s",
    "json": '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
}

# level None means "use LOG_LEVEL"
PROFILES: Dict[str, Dict[str, Any]] = {
    "production": {"level": None, "console": True, "files": True, "style": "json"},
    "development": {"level": "DEBUG", "console": True, "files": True, "style": "detailed"},
    "testing": {"level": "WARNING", "console": True, "files": False, "style": "simple"},
}

# Third-party loggers that are chatty at DEBUG
QUIET_LOGGERS = {"pymongo": "WARNING", "motor": "WARNING", "urllib3": "WARNING", "multipart": "INFO"}


def _rotating_handler(filename: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filename": str(filename),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": LOG_BACKUPS,
        "encoding": "utf8",
    }


def setup_logging(
    level: str = "INFO",
    enable_console: bool = True,
    enable_file: bool = True,
    format_style: str = "detailed",
    log_dir: Optional[str] = None,
) -> None:
    """
    Apply a dictConfig with a console handler and, optionally, rotating
    application and error logs under ``log_dir`` (``LOG_DIR`` or ./logs).
    """
    log_path = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    stamp = datetime.now().strftime("%Y%m%d")

    handlers: Dict[str, Any] = {}
    if enable_console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": format_style if format_style in FORMATS else "detailed",
            "stream": "ext://sys.stdout",
        }
    if enable_file:
        log_path.mkdir(parents=True, exist_ok=True)
        handlers["file"] = _rotating_handler(log_path / f"ats_scorer_{stamp}.log", level)
        handlers["error_file"] = _rotating_handler(log_path / f"ats_scorer_errors_{stamp}.log", "ERROR")

    app_handlers = list(handlers)
    server_handlers = [h for h in app_handlers if h != "error_file"]
    loggers: Dict[str, Any] = {
        "": {"level": level, "handlers": app_handlers, "propagate": False},
        "uvicorn": {"level": "INFO", "handlers": server_handlers, "propagate": False},
        "uvicorn.access": {"level": "INFO", "handlers": server_handlers[:1], "propagate": False},
    }
    for name, quiet_level in QUIET_LOGGERS.items():
        loggers[name] = {"level": quiet_level}

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            name: {"format": fmt, "datefmt": "%Y-%m-%d %H:%M:%S"} for name, fmt in FORMATS.items()
        },
        "handlers": handlers,
        "loggers": loggers,
    })

    get_logger("logging").info(
        f"Logging configured - Level: {level}, Console: {enable_console}, "
        f"Files: {log_path if enable_file else 'disabled'}"
    )


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``ats_scorer.`` namespace; already-prefixed names are kept as-is"""
    if name.startswith(f"{LOGGER_PREFIX}.") or name == LOGGER_PREFIX:
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")


def log_api_call(operation: str):
    """Log start, completion time and failure of an async route handler"""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(f"api.{func.__module__}")
            logger.info(f"API {operation} started")
            with PerformanceMonitor(f"API {operation}", logger) as monitor:
                result = await func(*args, **kwargs)
            logger.info(f"API {operation} completed in {monitor.elapsed_ms:.1f}ms",
                        extra={"execution_ms": monitor.elapsed_ms})
            return result

        return wrapper
    return decorator


def configure_for_environment():
    environment = os.getenv("ENVIRONMENT", "development").lower()
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    profile = PROFILES.get(environment)
    if profile is None:
        setup_logging(level=log_level)
        return
    setup_logging(
        level=profile["level"] or log_level,
        enable_console=profile["console"],
        enable_file=profile["files"],
        format_style=profile["style"],
    )


class PerformanceMonitor:
    """Times a block; slow blocks warn, failures log with the elapsed time and re-raise"""

    def __init__(self, operation_name: str, logger: logging.Logger = None, threshold_ms: float = 1000):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.threshold_ms = threshold_ms
        self.start_time = None
        self.elapsed_ms = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000

        if exc_type is not None:
            self.logger.error(f"{self.operation_name} failed after {self.elapsed_ms:.2f}ms: {exc_val}")
        elif self.elapsed_ms > self.threshold_ms:
            self.logger.warning(
                f"{self.operation_name} took {self.elapsed_ms:.2f}ms (threshold {self.threshold_ms}ms)"
            )
        else:
            self.logger.debug(f"{self.operation_name} completed in {self.elapsed_ms:.2f}ms")
        return False
