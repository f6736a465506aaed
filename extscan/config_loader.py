"""
Configuration loader for extscan.

Parses the loosely-typed security settings (from a JSON file or any
key-value mapping) into a single normalized ScanConfig consumed by
the classifier and the scan orchestrator.
"""

from __future__ import annotations

import json
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config" / "security.json"

CONFIG_KEYS = (
    "executable_extensions",
    "shell_extensions",
    "bad_filename_chars",
    "obfuscated_patterns",
)


def _normalize_extension_set(extensions: Iterable[str]) -> frozenset[str]:
    # An explicit "" stays, so extension-less files can still be targeted
    return frozenset(
        normalized
        for normalized, original in ((ext.strip().lstrip(".").lower(), ext) for ext in extensions)
        if normalized or original == ""
    )


@dataclass(frozen=True)
class ScanConfig:
    """Normalized settings for one scan."""

    executable_extensions: frozenset[str] = field(default_factory=frozenset)
    shell_extensions: frozenset[str] = field(default_factory=frozenset)
    bad_filename_chars: str = ""
    obfuscated_patterns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "executable_extensions", _normalize_extension_set(self.executable_extensions))
        object.__setattr__(self, "shell_extensions", _normalize_extension_set(self.shell_extensions))
        object.__setattr__(
            self,
            "obfuscated_patterns",
            tuple(p.strip() for p in self.obfuscated_patterns if p.strip()),
        )


def _split_list(key: str, value: object) -> list[str]:
    """Split a comma-separated string (or accept a list) into trimmed, non-empty items."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        warnings.warn(f"Ignoring setting '{key}': expected a string or list, got {type(value).__name__}")
        return []
    return [item.strip() for item in items if item.strip()]


def _normalize_extensions(key: str, value: object) -> frozenset[str]:
    return _normalize_extension_set(_split_list(key, value))


def parse_scan_config(params: Mapping[str, object]) -> ScanConfig:
    """
    Build a ScanConfig from key-value settings.

    Absent keys default to an empty value, which disables the related check.
    """
    bad_chars = params.get("bad_filename_chars", "")
    if bad_chars is None:
        bad_chars = ""
    elif not isinstance(bad_chars, str):
        warnings.warn(
            f"Ignoring setting 'bad_filename_chars': expected a string, got {type(bad_chars).__name__}"
        )
        bad_chars = ""

    return ScanConfig(
        executable_extensions=_normalize_extensions(
            "executable_extensions", params.get("executable_extensions", "")
        ),
        shell_extensions=_normalize_extensions("shell_extensions", params.get("shell_extensions", "")),
        # Not trimmed: a space is a meaningful forbidden character
        bad_filename_chars=bad_chars,
        obfuscated_patterns=tuple(_split_list("obfuscated_patterns", params.get("obfuscated_patterns", ""))),
    )


def read_settings(config_path: Path | None = None) -> dict[str, object]:
    """
    Read the raw "security" settings block from a JSON config file.

    Falls back to the bundled defaults if no path is provided.
    """
    path = config_path or _DEFAULT_CONFIG_PATH
    if not path.is_file():
        raise FileNotFoundError(f"Config not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Config {path} must contain a JSON object, got {type(raw).__name__}")
    security = raw.get("security", {})
    if not isinstance(security, dict):
        raise ValueError(f"Config {path}: 'security' must be an object, got {type(security).__name__}")
    return dict(security)


def load_config(config_path: Path | None = None) -> ScanConfig:
    """Load and normalize the scan configuration from a JSON file."""
    return parse_scan_config(read_settings(config_path))
