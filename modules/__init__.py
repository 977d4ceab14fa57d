"""IMS Processing Modules

This package contains the processing modules of the IMS framework. Each module
implements the ModuleProcessor interface and keeps its configuration under
``modules/<module>/config/``.
"""
