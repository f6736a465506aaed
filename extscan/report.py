"""
Report sinks and output for extscan scan results.

ReportSink is the interface the scanner writes to. ScanReport is the
collecting implementation used by the CLI, which renders it to the
console (rich-formatted) and to a JSON report file.
"""

from __future__ import annotations

import json
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from extscan import __version__
from extscan.findings import Finding, Severity, highest_severity

_SEVERITY_COLORS: dict[str, str] = {
    "error": "bold red",
    "warning": "yellow",
    "notice": "cyan",
    "clean": "green",
}

_SEVERITY_LABELS: dict[str, str] = {
    "error": "[!!]",
    "warning": "[!] ",
    "notice": "[-] ",
    "clean": "[+] ",
}

_console = Console(highlight=False)


class ReportSink(Protocol):
    """Receives findings from a scan, one call per finding."""

    def add_error(self, file: str, message: str) -> None: ...

    def add_warning(self, file: str, message: str) -> None: ...

    def add_notice(self, file: str, message: str) -> None: ...


class ScanReport:
    """A ReportSink that keeps every finding in arrival order."""

    def __init__(self) -> None:
        self.findings: list[Finding] = []

    def _add(self, file: str, severity: Severity, message: str) -> None:
        self.findings.append(
            Finding(file_path=file, severity=severity, message=message, rule_id="reported")
        )

    def add_error(self, file: str, message: str) -> None:
        self._add(file, "error", message)

    def add_warning(self, file: str, message: str) -> None:
        self._add(file, "warning", message)

    def add_notice(self, file: str, message: str) -> None:
        self._add(file, "notice", message)

    def add_finding(self, finding: Finding) -> None:
        """Store a finding with its rule id and detail intact."""
        self.findings.append(finding)

    def counts(self) -> dict[str, int]:
        counter = Counter(f.severity for f in self.findings)
        return {severity: counter.get(severity, 0) for severity in ("error", "warning", "notice")}

    def by_file(self) -> dict[str, list[Finding]]:
        grouped: dict[str, list[Finding]] = {}
        for finding in self.findings:
            grouped.setdefault(finding.file_path, []).append(finding)
        return grouped

    @property
    def highest_severity(self) -> str:
        return highest_severity(self.findings)

    @property
    def is_clean(self) -> bool:
        return not self.findings


def _severity_text(severity: str) -> Text:
    color = _SEVERITY_COLORS.get(severity, "white")
    label = _SEVERITY_LABELS.get(severity, "")
    return Text(f"{label} {severity.upper()}", style=color)


def _relative(file_path: str, root: Path | None) -> str:
    if root is None:
        return file_path
    try:
        return str(Path(file_path).relative_to(root))
    except ValueError:
        return file_path


def print_report(report: ScanReport, root: Path | None = None) -> None:
    """Print a rich-formatted table of every finding, grouped by file."""
    if report.is_clean:
        _console.print("  [green][+][/green] No security issues found.")
        return

    table = Table(
        box=box.SIMPLE,
        show_header=True,
        header_style="bold dim",
        padding=(0, 1),
    )
    table.add_column("File", min_width=24)
    table.add_column("Sev", width=9)
    table.add_column("Message", min_width=30)

    for file_path, findings in report.by_file().items():
        for finding in findings:
            sev_color = _SEVERITY_COLORS.get(finding.severity, "white")
            table.add_row(
                Text(_relative(file_path, root)),
                Text(finding.severity.upper(), style=sev_color),
                Text(finding.message),
            )

    _console.print(table)


def print_summary(report: ScanReport, files_scanned: int, elapsed: float | None = None) -> None:
    """Print a final scan summary."""
    counts = report.counts()

    _console.print()
    _console.print("[bold]--- Scan Summary ---[/bold]")
    _console.print(f"  Files scanned : [bold]{files_scanned}[/bold]")
    _console.print(f"  Flagged files : [{'red' if report.findings else 'green'}]{len(report.by_file())}[/]")
    _console.print(f"  Errors        : [bold red]{counts['error']}[/bold red]")
    _console.print(f"  Warnings      : [yellow]{counts['warning']}[/yellow]")
    _console.print(f"  Notices       : [cyan]{counts['notice']}[/cyan]")
    _console.print("  Overall       : ", end="")
    _console.print(_severity_text(report.highest_severity))
    if elapsed is not None:
        _console.print(f"  Elapsed       : [dim]{elapsed:.2f}s[/dim]")
    _console.print()


def build_json_report(report: ScanReport, root: Path | None = None) -> dict:
    """Construct a serializable JSON report structure."""
    return {
        "extscan_version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "root": str(root) if root is not None else None,
        "overall_severity": report.highest_severity,
        "counts": report.counts(),
        "files": [
            {
                "file": file_path,
                "findings": [
                    {
                        "rule_id": f.rule_id,
                        "severity": f.severity,
                        "message": f.message,
                        **({"detail": f.detail} if f.detail is not None else {}),
                    }
                    for f in findings
                ],
            }
            for file_path, findings in report.by_file().items()
        ],
    }


def write_json_report(report: ScanReport, output_path: Path, root: Path | None = None) -> None:
    """Write the JSON report to a file."""
    data = build_json_report(report, root)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
