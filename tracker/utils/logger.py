import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import List, Optional

from tracker.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_handlers: Optional[List[logging.Handler]] = None


def _shared_handlers() -> List[logging.Handler]:
    """Console plus one midnight-rotated file, created once per process."""
    global _handlers
    if _handlers is None:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        console = logging.StreamHandler(sys.stdout)
        console.setLevel(logging.DEBUG if Config.DEBUG else logging.INFO)

        log_dir = Path(Config.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        logfile = TimedRotatingFileHandler(
            log_dir / 'season_tracker.log', when='midnight', backupCount=14, encoding='utf-8'
        )
        logfile.setLevel(logging.DEBUG)

        for handler in (console, logfile):
            handler.setFormatter(formatter)
        _handlers = [console, logfile]
    return _handlers


def setup_logger(name: str) -> logging.Logger:
    """Module logger writing to stdout and logs/season_tracker.log"""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if Config.DEBUG else logging.INFO)
    for handler in _shared_handlers():
        logger.addHandler(handler)
    return logger
