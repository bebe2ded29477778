"""
Logging setup for the service process.
"""

from .logging_setup import configure_logging

__all__ = ["configure_logging"]
