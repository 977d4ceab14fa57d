"""
IMS Framework Core Package

This package contains the shared infrastructure for the IMS (Incident Management
System) station assignment framework: configuration loading, the exception
hierarchy, logging setup and the interface implemented by processing modules.
"""

from .interfaces import ModuleProcessor, ProcessingResult, ModuleStatus

__version__ = "1.0.0"
__all__ = ['ModuleProcessor', 'ProcessingResult', 'ModuleStatus']
