"""Structured logging with a Rich console handler and optional JSON file output.

Provides readable TTY output for interactive use and JSON logging for machine parsing.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


# Global console instance
_console: Optional[Console] = None

_TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record):
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def get_console() -> Console:
    """Get global Rich console instance."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def is_tty() -> bool:
    """Check if stderr is a TTY (interactive terminal)."""
    return sys.stderr.isatty()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    log_format: str = "text",  # "text" or "json"
    use_rich: Optional[bool] = None
) -> None:
    """Setup logging configuration.
    
    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to log file
        log_format: Format for file logging ("text" or "json")
        use_rich: Whether to use Rich for console output (auto-detects TTY if None)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    
    if use_rich is None:
        use_rich = is_tty()
    
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)
    
    console_handler: Union[RichHandler, logging.Handler]
    if use_rich:
        console_handler = RichHandler(
            console=get_console(),
            show_time=False,
            show_level=False,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
    else:
        # Benchmark output goes to stdout, so logs stay on stderr
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT))
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)
    
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        if log_format == "json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.
    
    Args:
        name: Logger name (typically __name__)
    
    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_benchmark_start(logger: logging.Logger, benchmark_name: str, mode: Optional[str] = None) -> None:
    """Log benchmark start with context.
    
    Args:
        logger: Logger instance
        benchmark_name: Name of the benchmark
        mode: Optional mode description (e.g. 'n=10', 'target=1000000000ns')
    """
    context = f" [{mode}]" if mode else ""
    logger.info(f"Starting benchmark: {benchmark_name}{context}")


def log_benchmark_complete(logger: logging.Logger, benchmark_name: str, n: int, ns_per_op: float) -> None:
    """Log benchmark completion with results."""
    logger.info(f"Completed: {benchmark_name} - {n} ops, {ns_per_op:.3f} ns/op")


def log_benchmark_error(logger: logging.Logger, benchmark_name: str, error: BaseException) -> None:
    """Log benchmark error.
    
    Args:
        logger: Logger instance
        benchmark_name: Name of the benchmark
        error: The exception raised by the benchmark function
    """
    logger.error(f"Failed: {benchmark_name} - {type(error).__name__}: {error}")
