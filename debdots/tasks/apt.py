# debdots/tasks/apt.py

from pathlib import Path

from debdots.core.actions import AptInstall, CommandSequence, Step
from debdots.core.command import privileged
from debdots.core.config import Settings
from debdots.core.probes import PackagesProbe, PathAbsentProbe

# Left behind by earlier attempts to install eza from its (now dead) apt repo
STALE_EZA_SOURCE = Path("/etc/apt/sources.list.d/gierens.list")
STALE_EZA_KEYRING = Path("/etc/apt/keyrings/gierens.gpg")


def apt_base_step(settings: Settings) -> Step:
    """Package index refresh, upgrade and base tool install. Always first."""
    return Step(
        name="apt-base",
        probe=PackagesProbe(settings.apt_packages),
        action=AptInstall(packages=settings.apt_packages, use_sudo=settings.use_sudo),
    )


def eza_apt_cleanup_step(settings: Settings) -> Step:
    sudo = settings.use_sudo
    return Step(
        name="eza-apt-cleanup",
        probe=PathAbsentProbe((STALE_EZA_SOURCE, STALE_EZA_KEYRING)),
        action=CommandSequence(
            commands=(
                tuple(privileged(["rm", "-f", str(STALE_EZA_SOURCE)], sudo)),
                tuple(privileged(["rm", "-f", str(STALE_EZA_KEYRING)], sudo)),
                tuple(privileged(["apt", "update", "-qq"], sudo)),
            ),
            description="remove stale eza apt source and keyring, then apt update",
        ),
    )
