"""
Command-line interface for SCOPEWIRE.
"""

from .main import cli

__all__ = ["cli"]
