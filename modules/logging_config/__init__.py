"""
Logging Configuration Module
============================

Responsibility:
- Root logger setup for console (coloured) and rotating file output.
"""

from .logging_config import LoggingConfigurator, ColoredFormatter

__all__ = ['LoggingConfigurator', 'ColoredFormatter']
