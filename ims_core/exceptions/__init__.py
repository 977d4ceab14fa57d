"""
Custom exceptions for the IMS Station Assignment System.

This module provides domain-specific exception classes for error handling
and debugging throughout the system.
"""

from .custom_exceptions import (
    IMSBaseException,
    IMSConfigurationError,
    IMSValidationError,
    IMSDataSourceError,
    IMSProcessingError,
)

__all__ = [
    "IMSBaseException",
    "IMSConfigurationError",
    "IMSValidationError",
    "IMSDataSourceError",
    "IMSProcessingError",
]
