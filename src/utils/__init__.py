"""
Utils Package - Utility modules for the market making core
Provides configuration loading, logging setup and the clock/id capabilities
injected into the core.

File: __init__.py
"""

from .config import Config
from .logger import setup_logger, log_trade, log_position_update
from .clock import SystemClock, ManualClock, UuidIdGenerator, SequentialIdGenerator

__all__ = [
    'Config',
    'setup_logger',
    'log_trade',
    'log_position_update',
    'SystemClock',
    'ManualClock',
    'UuidIdGenerator',
    'SequentialIdGenerator'
]
