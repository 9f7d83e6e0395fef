# debdots/core/io.py
"""Atomic file placement helpers shared by the config patcher and archive installer."""

import contextlib
import os
import shutil
import tempfile
from pathlib import Path


def _sync_directory(directory: Path) -> None:
    """Best-effort fsync of a directory so a rename survives a crash."""
    flags = os.O_RDONLY | getattr(os, "O_DIRECTORY", 0)
    try:
        dir_fd = os.open(str(directory), flags)
    except OSError:
        return
    try:
        os.fsync(dir_fd)
    except OSError:
        pass
    finally:
        os.close(dir_fd)


def _sibling_temp(final_path: Path) -> tuple[int, Path]:
    final_path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(
        dir=str(final_path.parent),
        prefix=f".{final_path.name}.",
        suffix=".tmp",
    )
    return fd, Path(temp_name)


def atomic_write_text(path: Path | str, content: str, perms: int | None = None) -> None:
    """
    Write text through a temp file in the destination directory, then
    os.replace() it over the target. Readers see either the old or the
    new content, never a partial file.
    """
    final_path = Path(path)
    fd, temp_path = _sibling_temp(final_path)

    try:
        try:
            temp_file = os.fdopen(fd, "w", encoding="utf-8", newline="")
        except BaseException:
            os.close(fd)
            raise

        with temp_file:
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        if perms is not None:
            os.chmod(temp_path, perms)  # noqa: PTH101

        os.replace(temp_path, final_path)  # noqa: PTH105
        _sync_directory(final_path.parent)
    except BaseException:
        with contextlib.suppress(OSError):
            temp_path.unlink()
        raise


def atomic_copy(source: Path | str, path: Path | str, perms: int | None = None) -> None:
    """Copy a file into place via a sibling temp file and os.replace()."""
    final_path = Path(path)
    fd, temp_path = _sibling_temp(final_path)
    os.close(fd)

    try:
        shutil.copyfile(source, temp_path)
        if perms is not None:
            os.chmod(temp_path, perms)  # noqa: PTH101
        os.replace(temp_path, final_path)  # noqa: PTH105
        _sync_directory(final_path.parent)
    except BaseException:
        with contextlib.suppress(OSError):
            temp_path.unlink()
        raise
