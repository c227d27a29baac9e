"""Logging helpers."""

from musebridge.logger.logger import console, get_logger

__all__ = ["console", "get_logger"]
