"""
Package: config
Description: Runtime configuration for the SQS batch processor.
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
