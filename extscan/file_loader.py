"""
File discovery and best-effort reads for extscan.

Enumerates every regular file under a root directory and provides
single-attempt read helpers that treat any I/O failure as "nothing to read".
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Generator

log = logging.getLogger(__name__)


def _log_walk_error(exc: OSError) -> None:
    log.debug("Skipping unreadable directory %s: %s", exc.filename, exc)


def walk_files(root: Path) -> Generator[Path, None, None]:
    """
    Yield every regular file under root, recursively.

    Hidden files and directories are included. Order follows os.walk,
    which is stable for an unchanged tree but not sorted.
    """
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        current_dir = Path(dirpath)
        for filename in filenames:
            file_path = current_dir / filename
            # os.walk lists sockets, fifos and dangling links as files
            if not file_path.is_file():
                log.debug("Skipping non-regular file %s", file_path)
                continue
            yield file_path


def read_head(path: Path, size: int) -> bytes | None:
    """Read at most size bytes from the start of a file, or None if it cannot be opened."""
    try:
        with open(path, "rb") as f:
            return f.read(size)
    except OSError as exc:
        log.debug("Cannot read %s: %s", path, exc)
        return None


def read_text(path: Path) -> str | None:
    """Read a whole file as text, or None if it cannot be read."""
    for encoding in ("utf-8", "latin-1"):
        try:
            with open(path, encoding=encoding, newline="") as f:
                return f.read()
        except UnicodeDecodeError:
            continue
        except OSError as exc:
            log.debug("Cannot read %s: %s", path, exc)
            return None
    return None
