"""
Utility modules for Eternal Quest.
"""

from .logging import setup_logging, get_logger
from .timestamps import get_current_timestamp, parse_timestamp, validate_timestamp

__all__ = [
    'setup_logging', 'get_logger',
    'get_current_timestamp', 'parse_timestamp', 'validate_timestamp'
]
