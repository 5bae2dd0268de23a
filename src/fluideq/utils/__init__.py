"""Utility functionality of fluideq."""

from .logging import time_logger

__all__ = ["time_logger"]
