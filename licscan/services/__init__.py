"""Registry services for licscan."""

from .pypi_service import PyPIRegistryClient

__all__ = ['PyPIRegistryClient']
