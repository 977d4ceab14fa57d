"""
Utility modules for the IMS Station Assignment System.

This module provides utility functions and setup for logging and other
common functionality used throughout the system.
"""

from .logging_setup import (
    setup_logging,
    setup_logging_from_config,
    get_logger,
    log_performance,
)

__all__ = ["setup_logging", "setup_logging_from_config", "get_logger", "log_performance"]
