"""
pip package manager adapter.

Installs a project's requirements with ``pip2``/``pip3``, lists the
installed dependency closure with the bundled enumerator script, and
enriches every package with PyPI ``info`` metadata.
"""

import json
from pathlib import Path
from typing import List, Optional

from licscan.interfaces.adapter import AdapterContext, BasePackageManager
from licscan.models import (
    DEFAULT_ENUMERATOR_SCRIPT,
    AdapterConfig,
    EnumeratedPackage,
    PackageRecord,
    PythonVersion,
)
from licscan.services.pypi_service import PyPIRegistryClient
from licscan.utils.command_runner import CommandRunner, SubprocessCommandRunner
from licscan.utils.exceptions import (
    EnumerationFailedError,
    PrepareFailedError,
    format_command,
)


class PipAdapter(BasePackageManager):
    """Package manager adapter for pip requirements files."""

    def __init__(
        self,
        context: Optional[AdapterContext] = None,
        command_runner: Optional[CommandRunner] = None,
        registry_client: Optional[PyPIRegistryClient] = None,
    ):
        """
        Args:
            context: Options, logger and project path from the scanner
            command_runner: Process runner (defaults to subprocess)
            registry_client: PyPI client (defaults to one built from config)

        Raises:
            InvalidConfigurationError: If ``python_version`` is not "2" or "3"
        """
        super().__init__(context)
        self.config = AdapterConfig.from_options(
            {**self.context.options, "project_path": self.context.project_path}
        )
        self.command_runner = command_runner or SubprocessCommandRunner()
        self.registry_client = registry_client or PyPIRegistryClient(
            registry_url=self.config.registry_url,
            timeout=self.config.request_timeout,
        )
        if (
            self.config.python_version is PythonVersion.PY2
            and self.config.enumerator_script == DEFAULT_ENUMERATOR_SCRIPT
        ):
            self.logger.warning(
                f"{self.package_manager_name}: the bundled enumerator needs Python 3.8+ "
                "but python_version is 2; set python_version to 3 or point "
                "enumerator_script at a Python 2 compatible script"
            )

    @classmethod
    def package_management_command(cls) -> str:
        """Binary used to check that pip is installed at all."""
        return "pip2"

    @property
    def prepare_command(self) -> str:
        return f"{self.config.python_version.pip_binary} install"

    def install_command(self) -> List[str]:
        return [
            self.config.python_version.pip_binary,
            "install",
            "-r",
            str(self.config.requirements_path),
        ]

    def prepare(self) -> None:
        """Install declared requirements into the target environment.

        Raises:
            PrepareFailedError: If the installer exits non-zero and
                ``prepare_no_fail`` is not set
        """
        command = self.install_command()
        result = self.command_runner.run(
            command,
            working_directory=self.context.working_directory,
            timeout=self.config.install_timeout,
        )
        if result.success:
            return

        self.logger.error(
            f"{self.package_manager_name}: prepare failed\n{result.stderr}".rstrip()
        )
        if not self.config.prepare_no_fail:
            raise PrepareFailedError(command, result.exit_status, result.stderr)

    def possible_package_paths(self) -> List[Path]:
        if self.config.project_path is None:
            return [self.config.requirements_path]
        return [self.config.project_path / self.config.requirements_path]

    def current_packages(self) -> List[PackageRecord]:
        """Enumerate installed packages and attach PyPI metadata.

        Raises:
            EnumerationFailedError: If the enumerator fails or its output
                cannot be decoded
        """
        packages = []
        for package in self.pip_output():
            packages.append(PackageRecord(
                name=package.name,
                version=package.version,
                children=frozenset(package.dependencies),
                install_path=Path(package.location) / package.name,
                license_metadata=self.registry_client.pypi_def(package.name, package.version),
            ))

        self.logger.info(f"{self.package_manager_name}: found {len(packages)} packages")
        return packages

    def enumerate_command(self) -> List[str]:
        package_path = self.detected_package_path() or self.possible_package_paths()[0]
        return [
            self.config.python_version.python_binary,
            str(self.config.enumerator_script),
            str(package_path),
        ]

    def pip_output(self) -> List[EnumeratedPackage]:
        command = self.enumerate_command()
        result = self.command_runner.run(
            command,
            timeout=self.config.enumerate_timeout,
        )
        if not result.success:
            raise EnumerationFailedError(
                f"Dependency enumerator failed: {result.stderr.strip()}",
                command=command,
                exit_status=result.exit_status,
            )

        try:
            data = json.loads(result.stdout)
        except ValueError as e:
            raise EnumerationFailedError(
                "Dependency enumerator produced invalid JSON",
                command=command,
                original_exception=e,
            ) from e

        if not isinstance(data, list):
            raise EnumerationFailedError(
                f"Expected a JSON array of packages, got {type(data).__name__}",
                command=command,
            )

        self.logger.debug(f"{self.package_manager_name}: {format_command(command)} listed {len(data)} packages")
        return [EnumeratedPackage.from_dict(item) for item in data]
