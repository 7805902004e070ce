"""
Logging Configuration
=====================

Responsibility:
- Console handler with colorama level colouring.
- Optional rotating UTF-8 log file.
- Package logger tree under 'crossvalidation'.
"""

from .logging_config import LoggingConfigurator, ColoredFormatter

__all__ = ['LoggingConfigurator', 'ColoredFormatter']
