"""Logging setup for the migrator: colored console output, optional log file, run progress."""

import logging
import logging.handlers
import time
from typing import Any, Dict, Optional

import colorlog

LOGGER_NAME = 'blogger_markdown_migrator'

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}

LEVEL_NAMES = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _resolve_level(verbosity: int, level: Optional[str]) -> int:
    if level:
        name = level.upper()
        if name not in LEVEL_NAMES:
            raise ValueError(f"Invalid log level '{level}'. Must be one of: {list(LEVEL_NAMES)}")
        return getattr(logging, name)

    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
    log_format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    level: Optional[str] = None
) -> logging.Logger:
    """
    Configure the ``blogger_markdown_migrator`` logger namespace.

    Calling it again replaces the handlers installed by a previous call.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2 or more = DEBUG
        log_file: Also log to this rotating file
        log_format: Record format for both handlers
        date_format: Timestamp format for both handlers
        level: Explicit level name, overrides ``verbosity``

    Returns:
        The namespace logger

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    log_level = _resolve_level(verbosity, level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    while logger.handlers:
        handler = logger.handlers[0]
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(log_level)
    console.setFormatter(colorlog.ColoredFormatter(
        fmt='%(log_color)s' + log_format,
        datefmt=date_format,
        log_colors=LOG_COLORS,
    ))
    logger.addHandler(console)

    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding='utf-8',
            )
        except OSError as e:
            logger.warning(f"Cannot log to {log_file}: {e}")
        else:
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(fmt=log_format, datefmt=date_format))
            logger.addHandler(file_handler)
            logger.info(f"Logging to file: {log_file}")

    logger.debug(f"Log level: {logging.getLevelName(log_level)}")
    return logger


class ProgressTracker:
    """
    Counts successes and failures over a batch and logs a summary on exit.

    A progress line is logged every ``log_every`` items and after each failure.
    """

    def __init__(self, total_items: int, item_type: str = 'items', log_every: int = 10):
        self.total_items = total_items
        self.item_type = item_type
        self.log_every = log_every
        self.successful_items = 0
        self.failed_items = 0
        self.started_at: Optional[float] = None
        self.logger = logging.getLogger(LOGGER_NAME)

    @property
    def processed_items(self) -> int:
        return self.successful_items + self.failed_items

    def __enter__(self) -> 'ProgressTracker':
        self.started_at = time.monotonic()
        self.logger.info(f"Starting {self.total_items} {self.item_type}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.started_at is None:
            return

        if self.total_items and self.failed_items == self.total_items:
            level = logging.ERROR
        elif self.failed_items or exc_type is not None:
            level = logging.WARNING
        else:
            level = logging.INFO

        stats = self.get_stats()
        self.logger.log(
            level,
            f"Progress Summary: {self.item_type.upper()} - "
            f"{stats['processed']}/{stats['total']} processed, "
            f"{stats['successful']} ok, {stats['failed']} failed "
            f"({stats['success_rate']:.1f}%) in {stats['elapsed_time_formatted']}"
        )

    def increment(self, success: bool = True) -> None:
        """Record one finished item."""
        if success:
            self.successful_items += 1
        else:
            self.failed_items += 1

        if not success or self.processed_items % self.log_every == 0:
            self.logger.info(
                f"{self.processed_items}/{self.total_items} {self.item_type} done"
                f"{'' if success else ' (last one failed)'}"
            )

    def get_stats(self) -> Dict[str, Any]:
        elapsed = time.monotonic() - self.started_at if self.started_at is not None else 0.0
        rate = self.successful_items / self.total_items * 100 if self.total_items else 0.0
        return {
            'total': self.total_items,
            'processed': self.processed_items,
            'successful': self.successful_items,
            'failed': self.failed_items,
            'success_rate': rate,
            'elapsed_time': elapsed,
            'elapsed_time_formatted': format_elapsed(elapsed),
        }


def format_elapsed(seconds: float) -> str:
    """Render a duration as ``12.3s``, ``4m 5s`` or ``1h 2m 5s``."""
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"


def log_section(title: str) -> None:
    """Log a banner line marking a pipeline phase."""
    logger = logging.getLogger(LOGGER_NAME)
    banner = '=' * 60
    logger.info(banner)
    logger.info(f"  {title.upper()}")
    logger.info(banner)


# (label, section, key) rows printed by log_config
CONFIG_SUMMARY = (
    ('Connect Timeout', 'http', 'connect_timeout'),
    ('Read Timeout', 'http', 'read_timeout'),
    ('Max Indirection', 'http', 'max_indirection'),
    ('Converter Backend', 'converter', 'backend'),
    ('Output Directory', 'export', 'output_directory'),
    ('Content File', 'export', 'content_filename'),
    ('Frontmatter Format', 'export', 'frontmatter_format'),
    ('Continue On Error', 'migration', 'continue_on_error'),
    ('Max Workers', 'migration', 'max_workers'),
    ('Dry Run', 'migration', 'dry_run'),
)


def log_config(config: Dict[str, Any]) -> None:
    """Log the effective settings of a run at INFO."""
    logger = logging.getLogger(LOGGER_NAME)
    log_section("Configuration")
    for label, section, key in CONFIG_SUMMARY:
        logger.info(f"{label}: {config.get(section, {}).get(key)}")


__all__ = [
    'LOGGER_NAME',
    'setup_logging',
    'ProgressTracker',
    'format_elapsed',
    'log_section',
    'log_config'
]
