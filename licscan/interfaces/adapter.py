"""
Package manager adapter interface for licscan.

Adapters depend on an ``AdapterContext`` supplied by the enclosing scanner
rather than inheriting shared behaviour, so each ecosystem only implements
the contract declared by ``BasePackageManager``.
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from licscan.models import PackageRecord


class AdapterContext:
    """Collaborators and options handed to an adapter by the scanner."""

    def __init__(
        self,
        options: Optional[Mapping[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
        project_path: Optional[Path] = None,
    ):
        self.options: Dict[str, Any] = dict(options or {})
        if project_path is None and self.options.get("project_path"):
            project_path = self.options["project_path"]
        self.project_path = Path(project_path) if project_path else None
        self.logger = logger or logging.getLogger("licscan")

    @property
    def working_directory(self) -> Path:
        """Directory external commands run in."""
        return self.project_path or Path.cwd()

    def detected_package_path(self, candidates: Sequence[Path]) -> Optional[Path]:
        """Return the first candidate path that exists, if any."""
        for candidate in candidates:
            if Path(candidate).exists():
                return Path(candidate)
        return None


class BasePackageManager(ABC):
    """Abstract contract every package manager adapter implements."""

    def __init__(self, context: Optional[AdapterContext] = None):
        self.context = context or AdapterContext()

    @property
    def logger(self) -> logging.Logger:
        return self.context.logger

    @property
    def project_path(self) -> Optional[Path]:
        return self.context.project_path

    @property
    def package_manager_name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def prepare(self) -> None:
        """Install declared dependencies so enumeration sees the full graph."""
        pass

    @abstractmethod
    def current_packages(self) -> List[PackageRecord]:
        """Enumerate installed dependencies as normalized package records."""
        pass

    @abstractmethod
    def possible_package_paths(self) -> List[Path]:
        """Manifest paths whose existence means this adapter applies."""
        pass

    def detected_package_path(self) -> Optional[Path]:
        return self.context.detected_package_path(self.possible_package_paths())

    def is_active(self) -> bool:
        """Whether one of ``possible_package_paths`` exists."""
        active = self.detected_package_path() is not None
        if active:
            self.logger.debug(f"{self.package_manager_name}: is active")
        return active
