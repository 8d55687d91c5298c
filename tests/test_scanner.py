"""
Tests for the scanner service and the CLI wiring.

Run with: pytest tests/test_scanner.py -xvs
"""

import io
import json
from pathlib import Path
from unittest.mock import Mock, patch

from rich.console import Console
from typer.testing import CliRunner

from licscan.cli import app
from licscan.core.scanner import ScannerService
from licscan.interfaces.adapter import BasePackageManager
from licscan.models import PackageRecord
from licscan.package_managers.pip import PipAdapter
from licscan.utils.exceptions import PrepareFailedError


def make_console():
    return Console(file=io.StringIO(), width=120, no_color=True)


def make_records():
    return [
        PackageRecord("flask", "2.0.0", {"werkzeug"}, Path("/venv/lib/flask"), {"license": "BSD-3-Clause"}),
        PackageRecord("private-lib", "0.1.0", set(), Path("/venv/lib/private-lib"), {}),
    ]


def make_fake_adapter(active=True, packages=None):
    adapter = Mock(spec=BasePackageManager)
    adapter.is_active.return_value = active
    adapter.possible_package_paths.return_value = [Path("requirements.txt")]
    adapter.current_packages.return_value = packages if packages is not None else make_records()
    return adapter


class TestScannerService:
    """Test suite for ScannerService."""

    def test_build_adapter(self, tmp_path):
        service = ScannerService(console=make_console())

        adapter = service.build_adapter({"pip": {"python_version": "3", "project_path": str(tmp_path)}})

        assert isinstance(adapter, PipAdapter)
        assert adapter.config.python_version.value == "3"
        assert adapter.project_path == tmp_path

    def test_collect_packages_prepares_then_enumerates(self):
        service = ScannerService(console=make_console())
        adapter = make_fake_adapter()

        packages = service.collect_packages(adapter, prepare=True)

        assert [p.name for p in packages] == ["flask", "private-lib"]
        adapter.prepare.assert_called_once()
        adapter.current_packages.assert_called_once()

    def test_collect_packages_skip_prepare(self):
        service = ScannerService(console=make_console())
        adapter = make_fake_adapter()

        service.collect_packages(adapter, prepare=False)

        adapter.prepare.assert_not_called()

    def test_inactive_adapter(self):
        console = make_console()
        service = ScannerService(console=console)
        adapter = make_fake_adapter(active=False)

        assert service.collect_packages(adapter) == []
        adapter.current_packages.assert_not_called()
        assert "No dependency file found" in console.file.getvalue()

    def test_execute_scan_renders_and_saves(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        console = make_console()
        service = ScannerService(console=console)
        output = tmp_path / "packages.json"

        with patch.object(ScannerService, "build_adapter", return_value=make_fake_adapter()):
            exit_code, packages = service.execute_scan(output=str(output))

        assert exit_code == 0
        assert len(packages) == 2
        rendered = console.file.getvalue()
        assert "BSD-3-Clause" in rendered
        assert "unknown" in rendered
        saved = json.loads(output.read_text())
        assert saved[0]["name"] == "flask"
        assert saved[0]["licenses"] == ["BSD-3-Clause"]
        assert saved[1]["licenses"] == []

    def test_execute_scan_invalid_python_version(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        console = make_console()
        service = ScannerService(console=console)

        exit_code, packages = service.execute_scan(python_version="4")

        assert exit_code == 1
        assert packages == []
        assert "Invalid python version '4'" in console.file.getvalue()

    def test_execute_scan_prepare_failure(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        adapter = make_fake_adapter()
        adapter.prepare.side_effect = PrepareFailedError(["pip2", "install", "-r", "requirements.txt"], 1)
        console = make_console()
        service = ScannerService(console=console)

        with patch.object(ScannerService, "build_adapter", return_value=adapter):
            exit_code, _ = service.execute_scan()

        assert exit_code == 1
        assert "Prepare command 'pip2 install -r requirements.txt' failed" in console.file.getvalue()

    def test_execute_scan_with_empty_config_sections(self, tmp_path, monkeypatch):
        """A user config whose sections are all commented out still scans."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "licscan.config.yaml").write_text("scan:\npip:\noutput:\n")
        adapter = make_fake_adapter()
        service = ScannerService(console=make_console())

        with patch.object(ScannerService, "build_adapter", return_value=adapter) as mock_build:
            exit_code, packages = service.execute_scan(python_version="3")

        assert exit_code == 0
        assert len(packages) == 2
        adapter.prepare.assert_called_once()
        assert mock_build.call_args.args[0]["pip"]["python_version"] == "3"

    def test_execute_scan_missing_config(self, tmp_path):
        service = ScannerService(console=make_console())

        exit_code, _ = service.execute_scan(config_path=str(tmp_path / "missing.yaml"))

        assert exit_code == 1


class TestCli:
    """CLI wiring through Typer."""

    def test_scan_passes_options(self):
        runner = CliRunner()

        with patch.object(ScannerService, "execute_scan", return_value=(0, [])) as mock_scan:
            result = runner.invoke(app, [
                "scan", "-p", "/srv/app", "--python-version", "3", "--skip-prepare", "-o", "out.json",
            ])

        assert result.exit_code == 0
        mock_scan.assert_called_once_with(
            config_path=None,
            project_path="/srv/app",
            python_version="3",
            requirements=None,
            skip_prepare=True,
            prepare_no_fail=None,
            output="out.json",
        )

    def test_scan_failure_exit_code(self):
        runner = CliRunner()

        with patch.object(ScannerService, "execute_scan", return_value=(1, [])):
            result = runner.invoke(app, ["scan"])

        assert result.exit_code == 1
