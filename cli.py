"""
extscan CLI: security red-flag scanner for extension packages.

Commands:
  scan          Recursively scan an extension directory
  show-config   Print the effective, normalized configuration
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from extscan import __version__
from extscan.config_loader import CONFIG_KEYS, ScanConfig, parse_scan_config, read_settings
from extscan.findings import severity_rank
from extscan.report import ScanReport, print_report, print_summary, write_json_report
from extscan.scanner import check

_console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _resolve_config(config_path: Path | None, overrides: dict[str, str | None]) -> ScanConfig:
    """Load settings and apply command-line overrides, exiting with a friendly message on failure."""
    try:
        settings = read_settings(config_path)
    except json.JSONDecodeError as exc:
        _console.print(f"[bold red]Config error:[/bold red] invalid JSON in {escape(str(config_path))}: {escape(str(exc))}")
        sys.exit(2)
    except (FileNotFoundError, ValueError) as exc:
        _console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        sys.exit(2)

    settings.update({key: value for key, value in overrides.items() if value is not None})
    return parse_scan_config(settings)


def _exit_for_severity(report: ScanReport, fail_on: str) -> None:
    """Exit with code 1 if any finding meets the fail-on threshold."""
    if fail_on == "never" or report.is_clean:
        return
    if severity_rank(report.highest_severity) >= severity_rank(fail_on):
        sys.exit(1)


def _config_options(func):
    options = [
        click.option("--config", "-c", "config_path", default=None,
                     type=click.Path(path_type=Path), help="Path to a security.json config file"),
        click.option("--executable-extensions", default=None, help="Comma-separated executable extensions"),
        click.option("--shell-extensions", default=None, help="Comma-separated shell script extensions"),
        click.option("--bad-filename-chars", default=None, help="Characters forbidden in filenames"),
        click.option("--obfuscated-patterns", default=None, help="Comma-separated obfuscation markers"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.version_option(__version__, prog_name="extscan")
def cli() -> None:
    """extscan: security red-flag scanner for extension packages."""


@cli.command("scan")
@click.argument("directory", type=click.Path(path_type=Path))
@_config_options
@click.option("--json-out", "-j", default=None, type=click.Path(path_type=Path), help="Write JSON report to file")
@click.option("--fail-on", "-f", default="error", show_default=True,
              type=click.Choice(["notice", "warning", "error", "never"]),
              help="Severity level that triggers a non-zero exit code")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log skipped files and directories")
def cmd_scan(directory: Path, config_path: Path | None, json_out: Path | None, fail_on: str,
             verbose: bool, **overrides: str | None) -> None:
    """Recursively scan an extension DIRECTORY for security red flags."""
    _setup_logging(verbose)
    cfg = _resolve_config(config_path, overrides)

    _console.print(f"[bold]Scanning[/bold] [dim]{escape(str(directory))}[/dim] …")
    report = ScanReport()
    start = time.monotonic()
    try:
        files_scanned = check(directory, cfg, report)
    except (FileNotFoundError, NotADirectoryError) as exc:
        _console.print(f"[bold red]Scan error:[/bold red] {escape(str(exc))}")
        sys.exit(2)
    elapsed = time.monotonic() - start

    print_report(report, root=directory)
    print_summary(report, files_scanned, elapsed=elapsed)

    if json_out:
        write_json_report(report, json_out, root=directory)
        _console.print(f"[dim]JSON report written to {escape(str(json_out))}[/dim]")

    _exit_for_severity(report, fail_on)


@cli.command("show-config")
@_config_options
def cmd_show_config(config_path: Path | None, **overrides: str | None) -> None:
    """Print the normalized configuration a scan would use."""
    cfg = _resolve_config(config_path, overrides)
    for key in CONFIG_KEYS:
        value = getattr(cfg, key)
        if isinstance(value, frozenset):
            shown = ", ".join(sorted(value))
        elif isinstance(value, tuple):
            shown = ", ".join(value)
        else:
            shown = repr(value)
        _console.print(f"[bold]{key}[/bold]: {escape(shown) if shown else '[dim](empty)[/dim]'}")


if __name__ == "__main__":
    cli()
