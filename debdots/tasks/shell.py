# debdots/tasks/shell.py
"""Zsh, Oh My Zsh and its plugins, fzf, Starship, and the ~/.zshrc patch."""

from debdots.core.actions import GitClone, LoginShellChange, ScriptInstall, Step
from debdots.core.config import Settings
from debdots.core.patcher import AppendOnce, ConfigFile, ReplaceLine
from debdots.core.probes import CommandProbe, LoginShellProbe, PathProbe

FZF_REPO = "https://github.com/junegunn/fzf.git"
STARSHIP_INSTALLER = "https://starship.rs/install.sh"
OMZ_INSTALLER = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"

# (name, repository, shallow clone)
ZSH_PLUGINS = (
    ("zsh-autosuggestions", "https://github.com/zsh-users/zsh-autosuggestions.git", False),
    ("zsh-syntax-highlighting", "https://github.com/zsh-users/zsh-syntax-highlighting.git", False),
    (
        "fast-syntax-highlighting",
        "https://github.com/zdharma-continuum/fast-syntax-highlighting.git",
        False,
    ),
    ("zsh-autocomplete", "https://github.com/marlonrichert/zsh-autocomplete.git", True),
)

PLUGINS_LINE = "plugins=(git " + " ".join(name for name, _, _ in ZSH_PLUGINS) + ")"
ZSHRC_MARKER = "zoxide init zsh"
ZSHRC_BLOCK = """
# =============================================================================
# Custom Config
# =============================================================================

# PATH: local bins, Neovim, Go toolchain
export PATH="$HOME/.local/bin:/opt/nvim-linux-x86_64/bin:/usr/local/go/bin:$HOME/go/bin:$PATH"

# Tool initialisation
eval "$(zoxide init zsh)"
eval "$(starship init zsh)"

# Aliases
alias ls='eza --icons=always'
alias ll='eza -lh --icons=always'
alias la='eza -lah --icons=always'
alias cat='bat --paging=never'
alias grep='rg'
alias find='fd'
"""


def fzf_step(settings: Settings) -> Step:
    fzf_dir = settings.home / ".fzf"
    return Step(
        name="fzf",
        probe=PathProbe(fzf_dir, kind="dir"),
        action=GitClone(
            FZF_REPO,
            fzf_dir,
            depth=1,
            post_commands=((str(fzf_dir / "install"), "--all"),),
        ),
    )


def starship_step(settings: Settings) -> Step:
    return Step(
        name="starship",
        probe=CommandProbe("starship"),
        action=ScriptInstall(STARSHIP_INSTALLER, args=("--yes",), timeout=settings.http_timeout),
    )


def oh_my_zsh_step(settings: Settings) -> Step:
    return Step(
        name="oh-my-zsh",
        probe=PathProbe(settings.home / ".oh-my-zsh", kind="dir"),
        action=ScriptInstall(
            OMZ_INSTALLER,
            env={"RUNZSH": "no", "CHSH": "no", "KEEP_ZSHRC": "yes"},
            mode="arg",
            timeout=settings.http_timeout,
        ),
    )


def zsh_plugin_steps(settings: Settings) -> list[Step]:
    plugin_root = settings.zsh_custom / "plugins"
    return [
        Step(
            name=name,
            probe=PathProbe(plugin_root / name, kind="dir"),
            action=GitClone(repo, plugin_root / name, depth=1 if shallow else None),
        )
        for name, repo, shallow in ZSH_PLUGINS
    ]


def default_shell_step(settings: Settings) -> Step:
    return Step(
        name="default-shell",
        probe=LoginShellProbe("zsh", settings.login_shell),
        action=LoginShellChange("zsh", settings.user, use_sudo=settings.use_sudo),
    )


def zshrc_config(settings: Settings) -> ConfigFile:
    return ConfigFile(
        path=settings.home / ".zshrc",
        directives=(
            # Rewritten every run; covers both Oh My Zsh's default and earlier runs.
            ReplaceLine(pattern=r"^plugins=", line=PLUGINS_LINE),
            AppendOnce(marker=ZSHRC_MARKER, block=ZSHRC_BLOCK),
        ),
    )
