"""
Custom exception classes for the IMS Station Assignment System.

This module defines domain-specific exceptions to provide clear error handling
and debugging information throughout the system.
"""

from typing import Optional, Dict, Any


class IMSBaseException(Exception):
    """Base exception class for all IMS system exceptions."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class IMSConfigurationError(IMSBaseException):
    """
    Exception raised when configuration loading fails.

    This exception is raised when:
    - Configuration files are missing or contain invalid JSON
    - Environment configuration is malformed
    - Module configuration cannot be read
    """
    pass


class IMSValidationError(IMSBaseException):
    """
    Exception raised when validation of configuration or input data fails.

    This exception is raised when:
    - Required configuration keys or environment variables are missing
    - Projection or territory settings are inconsistent
    - Station records fail schema validation
    """
    pass


class IMSDataSourceError(IMSBaseException):
    """
    Exception raised when a persistence collaborator cannot be read.

    This exception is raised when:
    - Station or district data files are missing
    - Data files cannot be parsed
    - The backing store is otherwise unavailable
    """
    pass


class IMSProcessingError(IMSBaseException):
    """
    Exception raised when assignment processing fails.

    This exception is raised when:
    - A batch of incidents cannot be read or written
    - Processing is attempted with an invalid configuration
    """
    pass
