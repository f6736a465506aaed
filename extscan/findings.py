"""
Finding model and severity ordering for extscan.

Every check produces Finding objects; severities are ranked so a
report can be reduced to its most serious level.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

Severity = Literal["notice", "warning", "error"]

_SEVERITY_ORDER: dict[str, int] = {
    "clean": 0,
    "notice": 1,
    "warning": 2,
    "error": 3,
}


@dataclass(frozen=True)
class Finding:
    """A single issue reported against one file."""

    file_path: str
    severity: Severity
    message: str
    rule_id: str
    detail: str | None = None

    @property
    def severity_rank(self) -> int:
        return _SEVERITY_ORDER.get(self.severity, 0)


def severity_rank(severity: str) -> int:
    return _SEVERITY_ORDER.get(severity, 0)


def highest_severity(findings: Iterable[Finding]) -> str:
    """Return the highest severity across findings, or "clean" when there are none."""
    highest = "clean"
    for finding in findings:
        if finding.severity_rank > _SEVERITY_ORDER[highest]:
            highest = finding.severity
    return highest
