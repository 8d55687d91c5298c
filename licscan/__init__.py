"""licscan - license metadata for Python project dependencies."""

__version__ = "0.1.0"
