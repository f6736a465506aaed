"""
Per-file security checks for extscan.

Each check looks at a single file and returns at most one Finding.
classify_file runs them in a fixed order: bad filename characters,
then the executable / shell script / shebang chain, then obfuscated
code in PHP sources.
"""

from __future__ import annotations

import re
from pathlib import Path

from extscan.config_loader import ScanConfig
from extscan.file_loader import read_head, read_text
from extscan.findings import Finding

SHEBANG = b"#!"

MSG_BAD_FILENAME_CHAR = "Filename contains a forbidden character: {char}"
MSG_EXECUTABLE_FILE = "Executable file found; compiled binaries should not ship in an extension"
MSG_SHELL_SCRIPT = "Shell script found; shell scripts should not ship in an extension"
MSG_SHEBANG_FILE = "File starts with a shebang (#!) and may be an executable script"
MSG_OBFUSCATED_CODE = "Possible obfuscated or encoded code detected: {match}"


def file_extension(path: Path) -> str:
    """Return the lowercased text after the last dot of the filename, or ""."""
    name = path.name
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def is_php_file(path: Path) -> bool:
    return path.name.lower().endswith(".php")


def check_bad_filename(path: Path, config: ScanConfig) -> Finding | None:
    """Report the first character of the filename that is in bad_filename_chars."""
    if not config.bad_filename_chars:
        return None

    bad_chars = set(config.bad_filename_chars)
    char = next((c for c in path.name if c in bad_chars), None)
    if char is None:
        return None

    display_char = "space" if char == " " else char
    return Finding(
        file_path=str(path),
        severity="notice",
        message=MSG_BAD_FILENAME_CHAR.format(char=display_char),
        rule_id="bad_filename",
        detail=display_char,
    )


def check_shebang(path: Path) -> Finding | None:
    if read_head(path, len(SHEBANG)) != SHEBANG:
        return None
    return Finding(
        file_path=str(path),
        severity="warning",
        message=MSG_SHEBANG_FILE,
        rule_id="shebang",
    )


def check_executable(path: Path, config: ScanConfig) -> Finding | None:
    """
    Flag executables, shell scripts and shebang files.

    The three outcomes are exclusive: an executable extension wins over a
    shell extension, and either one skips the shebang probe.
    """
    extension = file_extension(path)

    if extension in config.executable_extensions:
        return Finding(
            file_path=str(path),
            severity="warning",
            message=MSG_EXECUTABLE_FILE,
            rule_id="executable_file",
            detail=extension,
        )

    if extension in config.shell_extensions:
        return Finding(
            file_path=str(path),
            severity="warning",
            message=MSG_SHELL_SCRIPT,
            rule_id="shell_script",
            detail=extension,
        )

    return check_shebang(path)


def check_obfuscated_code(path: Path, matcher: re.Pattern[str] | None) -> Finding | None:
    """Report the first obfuscation marker found in a PHP file's content."""
    if matcher is None or not is_php_file(path):
        return None

    content = read_text(path)
    if not content:
        return None

    match = matcher.search(content)
    if match is None:
        return None

    return Finding(
        file_path=str(path),
        severity="error",
        message=MSG_OBFUSCATED_CODE.format(match=match.group(0)),
        rule_id="obfuscated_code",
        detail=match.group(0),
    )


def classify_file(path: Path, config: ScanConfig, matcher: re.Pattern[str] | None) -> list[Finding]:
    """Run every check against one file and return findings in check order."""
    results = (
        check_bad_filename(path, config),
        check_executable(path, config),
        check_obfuscated_code(path, matcher),
    )
    return [finding for finding in results if finding is not None]
