"""doclinks - documentation link auditor and fixer."""

__version__ = "0.1.0"
