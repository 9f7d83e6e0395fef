# debdots/tasks/plan.py
"""
The provisioning plan. Order matters and is fixed here:
* apt-base first (everything else needs git/curl/zsh/tmux)
* debian-symlinks before anything that calls `bat` or `fd`
* the config pass after every tool step, finalization after the config pass
"""

from debdots.core.config import Settings
from debdots.core.orchestrator import ProvisionPlan
from debdots.tasks import apt, cli_tools, runtimes, shell, tmux


def build_plan(settings: Settings) -> ProvisionPlan:
    steps = [
        apt.apt_base_step(settings),
        apt.eza_apt_cleanup_step(settings),
        cli_tools.eza_step(settings),
        cli_tools.debian_symlinks_step(settings),
        cli_tools.glow_step(settings),
        cli_tools.delta_step(settings),
        runtimes.go_step(settings),
        runtimes.neovim_step(settings),
        runtimes.kickstart_step(settings),
        shell.fzf_step(settings),
        shell.starship_step(settings),
        tmux.tpm_step(settings),
        shell.oh_my_zsh_step(settings),
        *shell.zsh_plugin_steps(settings),
    ]
    return ProvisionPlan(
        steps=tuple(steps),
        config_files=(tmux.tmux_config(settings), shell.zshrc_config(settings)),
        final_steps=(tmux.tmux_plugins_step(settings), shell.default_shell_step(settings)),
    )
