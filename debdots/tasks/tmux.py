# debdots/tasks/tmux.py

from debdots.core.actions import CommandSequence, GitClone, Step
from debdots.core.config import Settings
from debdots.core.patcher import ConfigFile, WriteContents
from debdots.core.probes import NeverSatisfied, PathProbe

TPM_REPO = "https://github.com/tmux-plugins/tpm"

TMUX_CONF = """\
set -g prefix C-a
unbind C-b
bind C-a send-prefix

set -g mouse on
set -g base-index 1
setw -g pane-base-index 1
set-option -g renumber-windows on

bind | split-window -h -c "#{pane_current_path}"
bind - split-window -v -c "#{pane_current_path}"
unbind '"'
unbind %

bind h select-pane -L
bind j select-pane -D
bind k select-pane -U
bind l select-pane -R
bind r source-file ~/.tmux.conf \\; display-message "tmux config reloaded!"

set -sg escape-time 10
set-option -g focus-events on
set-option -g default-terminal "screen-256color"
set-option -a terminal-features 'xterm-256color:RGB'

set-window-option -g mode-keys vi
bind-key -T copy-mode-vi v send-keys -X begin-selection
bind-key -T copy-mode-vi C-v send-keys -X rectangle-toggle
bind-key -T copy-mode-vi y send-keys -X copy-selection-and-cancel

set -g @plugin 'tmux-plugins/tpm'
set -g @plugin 'tmux-plugins/tmux-sensible'
set -g @plugin 'tmux-plugins/tmux-resurrect'

run '~/.tmux/plugins/tpm/tpm'
"""


def tpm_dir(settings: Settings):
    return settings.home / ".tmux" / "plugins" / "tpm"


def tpm_step(settings: Settings) -> Step:
    return Step(
        name="tpm",
        probe=PathProbe(tpm_dir(settings), kind="dir"),
        action=GitClone(TPM_REPO, tpm_dir(settings)),
    )


def tmux_plugins_step(settings: Settings) -> Step:
    """Headless plugin install; needs ~/.tmux.conf, so it runs after the config pass."""
    installer = tpm_dir(settings) / "bin" / "install_plugins"
    return Step(
        name="tmux-plugins",
        probe=NeverSatisfied(),
        action=CommandSequence(
            commands=((str(installer),),),
            description=f"run {installer}",
            tolerate_failure=frozenset({0}),
        ),
    )


def tmux_config(settings: Settings) -> ConfigFile:
    return ConfigFile(path=settings.home / ".tmux.conf", directives=(WriteContents(TMUX_CONF),))
