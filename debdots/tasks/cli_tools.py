# debdots/tasks/cli_tools.py
"""Modern CLI replacements shipped as GitHub release tarballs, plus Debian name fixups."""

from pathlib import Path

from debdots.core.actions import ArchiveInstall, Step, SymlinkInstall
from debdots.core.config import Settings
from debdots.core.probes import AllOf, CommandProbe, SymlinkProbe

EZA_URL = (
    "https://github.com/eza-community/eza/releases/latest/download/"
    "eza_x86_64-unknown-linux-gnu.tar.gz"
)
GLOW_URL = (
    "https://github.com/{repo}/releases/latest/download/glow_{version}_Linux_x86_64.tar.gz"
)
DELTA_URL = (
    "https://github.com/{repo}/releases/latest/download/"
    "delta-{version}-x86_64-unknown-linux-gnu.tar.gz"
)

# Debian ships these under different names to avoid collisions
DEBIAN_RENAMES = {"bat": Path("/usr/bin/batcat"), "fd": Path("/usr/bin/fdfind")}


def _release_step(
    settings: Settings, name: str, binary: str, url: str, repo: str | None = None
) -> Step:
    return Step(
        name=name,
        probe=CommandProbe(binary, fallbacks=(settings.local_bin / binary,)),
        action=ArchiveInstall(
            binary_name=binary,
            dest_dir=settings.local_bin,
            url_template=url,
            repo=repo,
            api_base=settings.github_api,
            timeout=settings.http_timeout,
        ),
    )


def eza_step(settings: Settings) -> Step:
    return _release_step(settings, "eza", "eza", EZA_URL)


def glow_step(settings: Settings) -> Step:
    return _release_step(settings, "glow", "glow", GLOW_URL, repo="charmbracelet/glow")


def delta_step(settings: Settings) -> Step:
    return _release_step(settings, "git-delta", "delta", DELTA_URL, repo="dandavison/delta")


def debian_symlinks_step(settings: Settings) -> Step:
    links = tuple((settings.local_bin / name, target) for name, target in DEBIAN_RENAMES.items())
    return Step(
        name="debian-symlinks",
        probe=AllOf(tuple(SymlinkProbe(link, target) for link, target in links)),
        action=SymlinkInstall(links),
    )
