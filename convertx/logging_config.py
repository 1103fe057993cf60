"""
Logging setup for applications and scripts using convertx.

Library modules only create named loggers; setup_logging() wires the root
logger from the 'logging' section of the convertx configuration.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .config import get_default_config

LOG_FILE_PREFIX = "convertx_"
MAX_LOG_FILES = 10
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
VALID_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _resolve_level(log_level: str) -> str:
    level = str(log_level).upper()
    if level not in VALID_LEVELS:
        print(f"Warning: Invalid log level '{log_level}'. Using INFO.", file=sys.stderr)
        return 'INFO'
    return level


def _prune_old_logs(logs_path: Path) -> None:
    """Delete the oldest convertx log files so that one more fits under MAX_LOG_FILES."""
    # Microsecond timestamps in the names sort chronologically
    log_files = sorted(logs_path.glob(f"{LOG_FILE_PREFIX}*.log"), key=lambda p: p.name)
    for old_file in log_files[:max(0, len(log_files) - (MAX_LOG_FILES - 1))]:
        try:
            old_file.unlink()
        except OSError as e:
            print(f"Warning: Could not delete old log file {old_file}: {e}", file=sys.stderr)


def setup_logging(settings: Optional[Dict[str, Any]] = None) -> Optional[Path]:
    """
    Configure the root logger to write to a timestamped file and to stderr.

    Args:
        settings: The 'logging' config section ('log_level', 'logs_dir').
            Missing keys fall back to get_default_config() values.

    Returns:
        Path of the new log file, or None if the root logger was already configured
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return None

    options = dict(get_default_config()['logging'])
    options.update(settings or {})

    logs_path = Path(options['logs_dir'])
    logs_path.mkdir(parents=True, exist_ok=True)
    _prune_old_logs(logs_path)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    log_filename = logs_path / f"{LOG_FILE_PREFIX}{timestamp}.log"

    level_name = _resolve_level(options['log_level'])
    numeric_level = getattr(logging, level_name)
    root_logger.setLevel(numeric_level)

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in (logging.FileHandler(log_filename), logging.StreamHandler()):
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.info(f"Logging initialized. Log file: {log_filename}, Level: {level_name}")
    return log_filename
