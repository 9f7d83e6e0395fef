import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from debdots.core.io import atomic_copy, atomic_write_text


def test_atomic_write_calls_os_replace(tmp_path: Path):
    target = tmp_path / "target.txt"
    with patch("debdots.core.io.os.replace", wraps=os.replace) as mock_replace:
        atomic_write_text(target, "hello world")
    assert target.read_text() == "hello world"
    assert mock_replace.called
    assert Path(mock_replace.call_args.args[1]) == target


def test_atomic_write_failure_does_not_create_partial_destination(tmp_path: Path):
    target = tmp_path / "target.txt"
    with (
        patch("debdots.core.io.os.fdopen", side_effect=OSError("write failed")),
        pytest.raises(OSError, match="write failed"),
    ):
        atomic_write_text(target, "half written data")

    assert not target.exists()
    assert list(tmp_path.iterdir()) == []


def test_atomic_write_failure_does_not_corrupt_existing_file(tmp_path: Path):
    target = tmp_path / "target.txt"
    target.write_text("stable data")

    with (
        patch("debdots.core.io.os.fdopen", side_effect=OSError("write failed")),
        pytest.raises(OSError, match="write failed"),
    ):
        atomic_write_text(target, "new data")

    assert target.read_text() == "stable data"


def test_atomic_write_keeps_line_endings(tmp_path: Path):
    target = tmp_path / "crlf.txt"
    atomic_write_text(target, "a\r\nb\r\n")
    assert target.read_bytes() == b"a\r\nb\r\n"


@pytest.mark.skipif(os.name == "nt", reason="POSIX-only permission semantics")
def test_atomic_copy_applies_permissions(tmp_path: Path):
    source = tmp_path / "src"
    source.write_bytes(b"#!/bin/sh\n")
    target = tmp_path / "bin" / "tool"

    atomic_copy(source, target, perms=0o755)

    assert target.read_bytes() == b"#!/bin/sh\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o755
    assert sorted(p.name for p in target.parent.iterdir()) == ["tool"]
