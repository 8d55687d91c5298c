"""
Package manager adapters.

Each adapter implements ``BasePackageManager`` for one ecosystem.
"""

from .pip import PipAdapter

__all__ = ["PipAdapter"]
