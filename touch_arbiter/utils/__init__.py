"""
Logging utilities.
"""

from .logger import TouchLogger

__all__ = ['TouchLogger']
