"""Tests for file discovery and best-effort reads."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from extscan.file_loader import read_head, read_text, walk_files


def _touch(root: Path, relative: str, content: bytes = b"x") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


# ── walk_files ─────────────────────────────────────────────────────────────


def test_walk_visits_every_file_once(tmp_path):
    expected = {
        _touch(tmp_path, "a.php"),
        _touch(tmp_path, "sub/b.txt"),
        _touch(tmp_path, "sub/deeper/c.sh"),
        _touch(tmp_path, "other/d"),
    }
    found = list(walk_files(tmp_path))
    assert len(found) == len(expected)
    assert set(found) == expected


def test_walk_includes_hidden_files_and_dirs(tmp_path):
    hidden_file = _touch(tmp_path, ".htaccess")
    hidden_dir_file = _touch(tmp_path, ".git/hooks/post-checkout")
    found = set(walk_files(tmp_path))
    assert hidden_file in found
    assert hidden_dir_file in found


def test_walk_excludes_directories(tmp_path):
    _touch(tmp_path, "sub/file.txt")
    (tmp_path / "empty").mkdir()
    found = list(walk_files(tmp_path))
    assert all(p.is_file() for p in found)
    assert found == [tmp_path / "sub" / "file.txt"]


def test_walk_empty_directory(tmp_path):
    assert list(walk_files(tmp_path)) == []


def test_walk_is_lazy(tmp_path):
    _touch(tmp_path, "a.txt")
    _touch(tmp_path, "b.txt")
    walker = walk_files(tmp_path)
    first = next(walker)
    assert first.parent == tmp_path
    walker.close()


def test_walk_order_is_stable(tmp_path):
    for name in ("z.txt", "a.txt", "m/n.txt", "m/o.txt"):
        _touch(tmp_path, name)
    assert list(walk_files(tmp_path)) == list(walk_files(tmp_path))


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
def test_walk_skips_dangling_symlink(tmp_path):
    real = _touch(tmp_path, "real.txt")
    try:
        os.symlink(tmp_path / "missing.txt", tmp_path / "dangling.txt")
    except OSError:
        pytest.skip("cannot create symlinks here")
    assert list(walk_files(tmp_path)) == [real]


# ── read_head / read_text ──────────────────────────────────────────────────


def test_read_head_limits_bytes(tmp_path):
    path = _touch(tmp_path, "script", b"#!/bin/sh\necho hi\n")
    assert read_head(path, 2) == b"#!"


def test_read_head_short_file(tmp_path):
    path = _touch(tmp_path, "short", b"#")
    assert read_head(path, 2) == b"#"


def test_read_head_missing_file(tmp_path):
    assert read_head(tmp_path / "nope", 2) is None


def test_read_text_utf8(tmp_path):
    path = _touch(tmp_path, "a.php", "<?php echo 'héllo';".encode("utf-8"))
    assert read_text(path) == "<?php echo 'héllo';"


def test_read_text_falls_back_to_latin1(tmp_path):
    path = _touch(tmp_path, "a.php", b"caf\xe9")
    assert read_text(path) == "café"


def test_read_text_preserves_line_endings(tmp_path):
    path = _touch(tmp_path, "a.php", b"a\r\nb")
    assert read_text(path) == "a\r\nb"


def test_read_text_directory_returns_none(tmp_path):
    assert read_text(tmp_path) is None


def test_walk_logs_and_continues_past_unreadable_directory(tmp_path, monkeypatch, caplog):
    readable = _touch(tmp_path, "ok/a.txt")
    real_walk = os.walk

    def walk_with_failure(top, onerror=None, **kwargs):
        onerror(PermissionError(13, "Permission denied", str(tmp_path / "locked")))
        yield from real_walk(top, onerror=onerror, **kwargs)

    monkeypatch.setattr(os, "walk", walk_with_failure)
    with caplog.at_level(logging.DEBUG, logger="extscan.file_loader"):
        found = list(walk_files(tmp_path))

    assert found == [readable]
    assert any("Skipping unreadable directory" in r.getMessage() and "locked" in r.getMessage()
               for r in caplog.records)
