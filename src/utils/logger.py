"""
Logging setup for the market making core.
Console logging for every module logger, optional rotating files under a log
directory, and a dedicated 'trades' logger for fills and position events.

File: logger.py
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Dict, Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
TRADE_LOG_FORMAT = '%(asctime)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

TRADE_LOGGER = 'trades'


def _resolve_level(level: Union[int, str]) -> int:
    """Accept logging constants or names such as 'DEBUG' from config files"""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def setup_logger(name: str = __name__, level: Union[int, str] = logging.INFO,
                 log_dir: Optional[Union[str, Path]] = None) -> logging.Logger:
    """Set up logger with a console handler and optional rotating file handlers"""
    level = _resolve_level(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir is not None:
        _add_file_handlers(logger, Path(log_dir), formatter)

    return logger


def _add_file_handlers(logger: logging.Logger, log_dir: Path,
                       formatter: logging.Formatter) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    # everything at DEBUG and above, rotated by size
    file_handler = RotatingFileHandler(
        log_dir / 'market_maker.log',
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    error_handler = RotatingFileHandler(
        log_dir / 'errors.log',
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=5
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    logger.addHandler(error_handler)

    trade_path = (log_dir / 'trades.log').resolve()
    trade_logger = logging.getLogger(TRADE_LOGGER)
    trade_logger.setLevel(logging.INFO)

    # several module loggers may share one log directory
    for handler in trade_logger.handlers:
        if Path(getattr(handler, 'baseFilename', '')) == trade_path:
            return

    trade_handler = TimedRotatingFileHandler(
        trade_path,
        when='midnight',
        interval=1,
        backupCount=30
    )
    trade_handler.setLevel(logging.INFO)
    trade_handler.setFormatter(logging.Formatter(TRADE_LOG_FORMAT, datefmt=DATE_FORMAT))
    trade_logger.addHandler(trade_handler)


def log_trade(symbol: str, side: str, size: float, price: float,
              pnl: Optional[float] = None, reason: Optional[str] = None):
    """Log trade execution"""
    message = f"TRADE - Symbol: {symbol}, Side: {side}, Size: {size}, Price: {price}"

    if pnl is not None:
        message += f", PnL: {pnl:.2f}"

    if reason:
        message += f", Reason: {reason}"

    logging.getLogger(TRADE_LOGGER).info(message)


def log_position_update(symbol: str, action: str, details: Dict):
    """Log position updates"""
    fields = ''.join(f", {key}: {value}" for key, value in details.items())
    logging.getLogger(TRADE_LOGGER).info(f"POSITION - Symbol: {symbol}, Action: {action}{fields}")
