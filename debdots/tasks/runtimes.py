# debdots/tasks/runtimes.py

from debdots.core.actions import GitClone, Step, TreeArchiveInstall
from debdots.core.config import Settings
from debdots.core.probes import CommandProbe, PathProbe

GO_VERSION_URL = "https://go.dev/VERSION?m=text"
GO_URL = "https://go.dev/dl/{version}.linux-amd64.tar.gz"

NVIM_TREE = "nvim-linux-x86_64"
NVIM_URL = f"https://github.com/neovim/neovim/releases/latest/download/{NVIM_TREE}.tar.gz"
KICKSTART_REPO = "https://github.com/nvim-lua/kickstart.nvim.git"


def go_step(settings: Settings) -> Step:
    # To upgrade, remove /usr/local/go and re-run.
    return Step(
        name="go",
        probe=CommandProbe("go", fallbacks=(settings.go_parent / "go" / "bin" / "go",)),
        action=TreeArchiveInstall(
            tree_name="go",
            parent_dir=settings.go_parent,
            url_template=GO_URL,
            version_url=GO_VERSION_URL,
            use_sudo=settings.use_sudo,
            timeout=settings.http_timeout,
        ),
    )


def neovim_step(settings: Settings) -> Step:
    return Step(
        name="neovim",
        probe=PathProbe(settings.opt_dir / NVIM_TREE, kind="dir"),
        action=TreeArchiveInstall(
            tree_name=NVIM_TREE,
            parent_dir=settings.opt_dir,
            url_template=NVIM_URL,
            pre_commands=(("apt", "remove", "-y", "neovim", "neovim-runtime"),),
            use_sudo=settings.use_sudo,
            timeout=settings.http_timeout,
        ),
    )


def kickstart_step(settings: Settings) -> Step:
    nvim_config = settings.xdg_config_home / "nvim"
    return Step(
        name="kickstart-nvim",
        probe=PathProbe(nvim_config, kind="dir"),
        action=GitClone(KICKSTART_REPO, nvim_config),
    )
