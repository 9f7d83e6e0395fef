# debdots/core/archive.py
"""
Download-extract-place installs for tools shipped as release archives.

All downloads land in a throwaway temp directory that is removed on every
exit path; nothing is written under the destination until the binary has
been found.
"""

import stat
import tarfile
import tempfile
import zipfile
from http.client import HTTPException
from pathlib import Path, PurePosixPath
from urllib.error import URLError
from urllib.parse import urlparse

from debdots.core import http
from debdots.core.command import privileged, run_checked
from debdots.core.errors import BinaryNotFoundError, DownloadError, ExtractError
from debdots.core.io import atomic_copy
from debdots.core.logger import LoggerProxy

log = LoggerProxy(__name__)

EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def _archive_filename(url: str) -> str:
    name = PurePosixPath(urlparse(url).path).name
    return name or "download.archive"


def fetch_archive(url: str, workdir: Path, timeout: float | None = None) -> Path:
    """Download `url` into `workdir`, raising DownloadError on any failure."""
    target = workdir / _archive_filename(url)
    log.info(f"Downloading {url}")
    try:
        http.download_file(url, target, timeout=timeout)
    except (URLError, HTTPException, OSError, ValueError) as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e
    return target


def extract_archive(archive: Path, dest: Path) -> None:
    """Unpack a tar (any compression) or zip archive into `dest`."""
    dest.mkdir(parents=True, exist_ok=True)
    try:
        if zipfile.is_zipfile(archive):
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(dest)
        elif tarfile.is_tarfile(archive):
            with tarfile.open(archive) as tf:
                tf.extractall(dest, filter="data")
        else:
            raise ExtractError(f"{archive.name} is not a tar or zip archive")
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        raise ExtractError(f"Failed to extract {archive.name}: {e}") from e


def locate_binary(root: Path, binary_name: str) -> Path:
    """Find `binary_name` anywhere below `root`; the shallowest match wins."""
    matches = [p for p in root.rglob(binary_name) if p.is_file() and not p.is_symlink()]
    if not matches:
        raise BinaryNotFoundError(f"'{binary_name}' not found in extracted archive")
    matches.sort(key=lambda p: (len(p.relative_to(root).parts), str(p)))
    return matches[0]


def install_binary(
    url: str,
    binary_name: str,
    dest_dir: Path,
    timeout: float | None = None,
) -> Path:
    """
    Download the archive at `url`, extract it, and place `binary_name` as an
    executable in `dest_dir`.

    Raises:
        DownloadError, ExtractError, BinaryNotFoundError
    """
    with tempfile.TemporaryDirectory(prefix=f"debdots-{binary_name}-") as tmp:
        workdir = Path(tmp)
        archive = fetch_archive(url, workdir, timeout=timeout)
        extracted = workdir / "extracted"
        extract_archive(archive, extracted)
        binary = locate_binary(extracted, binary_name)

        target = Path(dest_dir) / binary_name
        mode = binary.stat().st_mode | EXECUTABLE_BITS | stat.S_IRUSR
        atomic_copy(binary, target, perms=stat.S_IMODE(mode))

    log.info(f"Installed {binary_name} to {target}")
    return target


def _check_tree_layout(archive: Path, tree_name: str) -> None:
    try:
        with tarfile.open(archive) as tf:
            names = tf.getnames()
    except (tarfile.TarError, OSError) as e:
        raise ExtractError(f"Failed to read {archive.name}: {e}") from e

    roots = {PurePosixPath(name).parts[0] for name in names if PurePosixPath(name).parts}
    roots.discard(".")
    if roots != {tree_name}:
        raise ExtractError(
            f"{archive.name} does not unpack to a single '{tree_name}/' directory "
            f"(found: {', '.join(sorted(roots)) or 'nothing'})"
        )


def install_tree(
    url: str,
    parent_dir: Path,
    tree_name: str,
    use_sudo: bool = True,
    timeout: float | None = None,
) -> Path:
    """
    Replace `parent_dir/tree_name` with the top-level directory of the tarball
    at `url` (Go into /usr/local, Neovim into /opt).

    Raises:
        DownloadError, ExtractError, CommandError
    """
    target = Path(parent_dir) / tree_name
    with tempfile.TemporaryDirectory(prefix=f"debdots-{tree_name}-") as tmp:
        archive = fetch_archive(url, Path(tmp), timeout=timeout)
        _check_tree_layout(archive, tree_name)

        run_checked(privileged(["rm", "-rf", str(target)], use_sudo))
        run_checked(privileged(["tar", "-C", str(parent_dir), "-xzf", str(archive)], use_sudo))

    log.info(f"Installed {tree_name} to {target}")
    return target
