"""
High-level scan orchestrator for extscan.

Coordinates configuration, matcher compilation, tree walking and
per-file classification into a single scan pipeline that streams
findings to a report sink.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Generator, Iterable

from extscan.classifier import classify_file
from extscan.config_loader import ScanConfig
from extscan.file_loader import walk_files
from extscan.findings import Finding
from extscan.pattern_compiler import compile_patterns
from extscan.report import ReportSink

log = logging.getLogger(__name__)

Checker = Callable[[Path, ScanConfig], Iterable[Finding]]


def validate_root(root: Path) -> None:
    """Fail loudly on a root that cannot be scanned, so it is never reported as clean."""
    if not root.exists():
        raise FileNotFoundError(f"Scan root not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Scan root is not a directory: {root}")


def iter_file_findings(root: Path, config: ScanConfig) -> Generator[tuple[Path, list[Finding]], None, None]:
    """
    Yield (file, findings) for every file under root, one file at a time.

    The matcher is compiled once up front. Stopping iteration between
    files is a clean way to cut a scan short.
    """
    matcher = compile_patterns(config.obfuscated_patterns)
    for path in walk_files(root):
        yield path, classify_file(path, config, matcher)


def security_checker(root: Path, config: ScanConfig) -> Generator[Finding, None, None]:
    """Yield security findings for every file under root in walk order."""
    for _path, findings in iter_file_findings(root, config):
        yield from findings


CHECKERS: dict[str, Checker] = {
    "security": security_checker,
}


def deliver(finding: Finding, sink: ReportSink) -> None:
    """Forward one finding to the sink method matching its severity."""
    add_finding = getattr(sink, "add_finding", None)
    if add_finding is not None:
        add_finding(finding)
    elif finding.severity == "error":
        sink.add_error(finding.file_path, finding.message)
    elif finding.severity == "warning":
        sink.add_warning(finding.file_path, finding.message)
    else:
        sink.add_notice(finding.file_path, finding.message)


def check(root: Path, config: ScanConfig, sink: ReportSink) -> int:
    """
    Scan every file under root and stream findings to sink.

    Raises FileNotFoundError or NotADirectoryError before reporting anything
    if root is unusable. Returns the number of files visited.
    """
    root = Path(root)
    validate_root(root)
    log.info("Scanning %s", root)

    files_scanned = 0
    for _path, findings in iter_file_findings(root, config):
        files_scanned += 1
        for finding in findings:
            deliver(finding, sink)

    log.info("Scanned %d files under %s", files_scanned, root)
    return files_scanned


def run_checkers(
    root: Path,
    config: ScanConfig,
    sink: ReportSink,
    checkers: dict[str, Checker] | None = None,
) -> None:
    """Run each registered checker in order against root, forwarding all findings to sink."""
    root = Path(root)
    validate_root(root)
    for name, checker in (checkers if checkers is not None else CHECKERS).items():
        log.debug("Running checker %s on %s", name, root)
        for finding in checker(root, config):
            deliver(finding, sink)
