"""
CLI for licscan.
"""
import logging
import sys
from typing import Optional

import typer
from rich.logging import RichHandler

from licscan.core.scanner import ScannerService


app = typer.Typer(help="licscan - license metadata for Python dependencies")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def scan_command(
    config_path: Optional[str] = typer.Option(None, "-c", "--config", help="Path to config YAML"),
    project_path: Optional[str] = typer.Option(None, "-p", "--project-path", help="Project directory to scan"),
    python_version: Optional[str] = typer.Option(None, "--python-version", help="Python major version: 2 or 3 (the bundled enumerator needs 3)"),
    requirements: Optional[str] = typer.Option(None, "-r", "--requirements", help="Requirements file, relative to the project"),
    skip_prepare: bool = typer.Option(False, "--skip-prepare", help="Do not run pip install before enumerating"),
    prepare_no_fail: bool = typer.Option(False, "--prepare-no-fail", help="Continue when pip install fails"),
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Write package report JSON to this file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
):
    """Install requirements, list dependencies and fetch their licenses from PyPI."""
    configure_logging(verbose)

    scanner_service = ScannerService()
    exit_code, _packages = scanner_service.execute_scan(
        config_path=config_path,
        project_path=project_path,
        python_version=python_version,
        requirements=requirements,
        skip_prepare=skip_prepare or None,
        prepare_no_fail=prepare_no_fail or None,
        output=output,
    )

    if exit_code != 0:
        sys.exit(exit_code)


app.command("scan", help="Install requirements, list dependencies and fetch their licenses from PyPI.")(scan_command)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """licscan - license metadata for Python dependencies.

    Run 'licscan scan' to scan the project in the current directory.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(
            scan_command,
            config_path=None,
            project_path=None,
            python_version=None,
            requirements=None,
            skip_prepare=False,
            prepare_no_fail=False,
            output=None,
            verbose=False,
        )
