"""IMS Framework Interfaces

Contracts and result models shared by IMS processing modules.
"""

from .module_processor import ComponentStatus, ModuleProcessor, ModuleStatus, ProcessingResult, RunSummary

__all__ = ['ComponentStatus', 'ModuleProcessor', 'ModuleStatus', 'ProcessingResult', 'RunSummary']
