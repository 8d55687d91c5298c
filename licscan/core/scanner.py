"""
Scanner service implementation for licscan.

Runs a package manager adapter end to end: prepare, enumerate, render,
and optionally save the resulting package records.
"""
import json
import logging
from typing import List, Optional, Tuple

from rich.table import Table

from licscan.core.config_manager import ConfigManager
from licscan.interfaces.adapter import AdapterContext, BasePackageManager
from licscan.models import PackageRecord
from licscan.package_managers.pip import PipAdapter
from licscan.rich_utils.ui_helpers import get_console
from licscan.utils.exceptions import LicenseScanError

logger = logging.getLogger(__name__)


class ScannerService:
    """Concrete scanner service for the pip ecosystem."""

    def __init__(self, config_manager: Optional[ConfigManager] = None, console=None):
        self.config_manager = config_manager or ConfigManager()
        self.console = console or get_console()

    def build_adapter(self, config: dict) -> BasePackageManager:
        """Create the pip adapter from a merged config.

        Raises:
            InvalidConfigurationError: If the pip options are invalid
        """
        context = AdapterContext(
            options=self.config_manager.pip_options(config),
            logger=logging.getLogger("licscan.pip"),
        )
        return PipAdapter(context)

    def collect_packages(self, adapter: BasePackageManager, prepare: bool = True) -> List[PackageRecord]:
        """Run ``prepare`` (optionally) and return the adapter's packages."""
        if not adapter.is_active():
            paths = ", ".join(str(p) for p in adapter.possible_package_paths())
            self.console.print(f"⚠️ No dependency file found (looked for {paths})", style="yellow")
            return []

        if prepare:
            self.console.print("📦 Installing declared requirements...", style="cyan")
            adapter.prepare()

        self.console.print("🔍 Enumerating installed packages...", style="cyan")
        return adapter.current_packages()

    def render_packages(self, packages: List[PackageRecord]) -> None:
        table = Table(title="Python dependencies")
        table.add_column("Package", style="bold")
        table.add_column("Version")
        table.add_column("Licenses")
        table.add_column("Children", justify="right")

        for package in packages:
            licenses = ", ".join(package.license_names) or "unknown"
            table.add_row(package.name, package.version, licenses, str(len(package.children)))

        self.console.print(table)

    def save_packages(self, packages: List[PackageRecord], path: str) -> str:
        with open(path, "w") as fp:
            json.dump([package.to_dict() for package in packages], fp, indent=4)
        self.console.print(f"✅ Package report saved to {path}", style="green")
        return path

    def execute_scan(
        self,
        config_path: Optional[str] = None,
        project_path: Optional[str] = None,
        python_version: Optional[str] = None,
        requirements: Optional[str] = None,
        skip_prepare: Optional[bool] = None,
        prepare_no_fail: Optional[bool] = None,
        output: Optional[str] = None,
    ) -> Tuple[int, List[PackageRecord]]:
        """
        Execute the complete scan workflow.

        Returns:
            Tuple of exit code and the package records found
        """
        try:
            config = self.config_manager.discover_and_load_config(config_path)
            config = self.config_manager.merge_config_and_args(
                config,
                project_path=project_path,
                python_version=python_version,
                requirements=requirements,
                prepare_no_fail=prepare_no_fail,
                skip_prepare=skip_prepare,
                output=output,
            )
            adapter = self.build_adapter(config)
            packages = self.collect_packages(
                adapter, prepare=(config.get("scan") or {}).get("prepare", True)
            )
        except (LicenseScanError, FileNotFoundError) as e:
            logger.debug("Scan failed", exc_info=True)
            self.console.print(f"❌ Scan failed: {e}", style="bold red", markup=False)
            return 1, []

        self.render_packages(packages)

        packages_file = (config.get("output") or {}).get("packages_file")
        if packages_file:
            self.save_packages(packages, packages_file)

        return 0, packages
