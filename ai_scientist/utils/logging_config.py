# ai_scientist/utils/logging_config.py
import functools
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

ROOT_LOGGER_NAME = "ai_scientist"

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEBUG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'

QUIET_LOGGERS = ("urllib3", "requests", "httpx", "httpcore", "langgraph")


def _make_handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: str = "logs",
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_format: Optional[str] = None
) -> logging.Logger:
    """
    Setup logging for the analysis engine

    Replaces any handlers already installed on the root logger, so calling it
    twice does not duplicate output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files; created only when logging to file
        log_to_file: Whether to write an ``analysis_<timestamp>.log`` file
        log_to_console: Whether to log to stdout
        log_format: Custom log format string; DEBUG level adds caller location

    Returns:
        The ``ai_scientist`` logger
    """
    level = getattr(logging, log_level.upper())
    if log_format is None:
        log_format = DEBUG_FORMAT if level <= logging.DEBUG else DEFAULT_FORMAT
    formatter = logging.Formatter(log_format)

    handlers: List[logging.Handler] = []
    file_path = None

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_path = log_path / f"analysis_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        handlers.append(_make_handler(logging.FileHandler(file_path, mode='a', encoding='utf-8'), level, formatter))

    if log_to_console:
        handlers.append(_make_handler(logging.StreamHandler(sys.stdout), level, formatter))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)

    configure_third_party_logging()

    engine_logger = logging.getLogger(ROOT_LOGGER_NAME)
    engine_logger.info(f"Logging initialized. Level: {log_level}")
    if file_path is not None:
        engine_logger.info(f"Log file: {file_path}")

    return engine_logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``ai_scientist`` namespace"""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_execution_time(func):
    """Decorator logging how long ``func`` took, at DEBUG on success and ERROR on failure"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"Failed {func.__qualname__} after {time.perf_counter() - start:.4f} seconds: {str(e)}")
            raise
        logger.debug(f"{func.__qualname__} took {time.perf_counter() - start:.4f} seconds")
        return result

    return wrapper


class PipelineLogger:
    """Context manager for pipeline step logging; ``duration`` is set on exit"""

    def __init__(self, step_name: str, logger: Optional[logging.Logger] = None):
        self.step_name = step_name
        self.logger = logger or get_logger("pipeline")
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.info(f"=== Starting {self.step_name} ===")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time

        if exc_type is None:
            self.logger.info(f"=== Completed {self.step_name} in {self.duration:.4f} seconds ===")
        else:
            self.logger.error(f"=== Failed {self.step_name} after {self.duration:.4f} seconds: {exc_val} ===")

    def log_progress(self, message: str):
        self.logger.info(f"[{self.step_name}] {message}")


def configure_third_party_logging():
    """Keep HTTP client and graph runtime loggers at WARNING"""
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
