import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from debdots.core.errors import ConfigWriteError
from debdots.core.patcher import (
    AppendOnce,
    ConfigDocument,
    ConfigFile,
    ReplaceLine,
    WriteContents,
    apply_config,
)

BLOCK = "\n# custom\neval \"$(zoxide init zsh)\"\nalias ls='eza'\n"


def _zshrc(path: Path) -> ConfigFile:
    return ConfigFile(
        path=path,
        directives=(
            ReplaceLine(pattern=r"^plugins=", line="plugins=(git zsh-autosuggestions)"),
            AppendOnce(marker="zoxide init zsh", block=BLOCK),
        ),
    )


def test_append_once_is_idempotent(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("export ZSH=~/.oh-my-zsh\nplugins=(git)\n")
    config_file = _zshrc(rc)

    apply_config(config_file)
    once = rc.read_bytes()
    second = apply_config(config_file)

    assert rc.read_bytes() == once
    assert second.changed is False
    assert once.decode().count("zoxide init zsh") == 1


def test_replace_line_rewrites_matching_line_only(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("# plugins=(commented)\nplugins=(git)\nsource $ZSH/oh-my-zsh.sh\n")

    apply_config(ConfigFile(rc, (ReplaceLine(r"^plugins=", "plugins=(git fzf)"),)))

    assert rc.read_text() == "# plugins=(commented)\nplugins=(git fzf)\nsource $ZSH/oh-my-zsh.sh\n"


def test_replace_line_without_match_inserts_nothing(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("export EDITOR=nvim\n")

    result = apply_config(ConfigFile(rc, (ReplaceLine(r"^plugins=", "plugins=(git)"),)))

    assert rc.read_text() == "export EDITOR=nvim\n"
    assert result.changed is False


def test_append_adds_separator_when_file_lacks_trailing_newline():
    doc = ConfigDocument("alias x=y")
    doc.append_block("# marker\n")
    assert doc.render() == "alias x=y\n# marker\n"


def test_backup_holds_pre_run_content_and_is_overwritten(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("plugins=(git)\n")
    config_file = _zshrc(rc)
    config_file.backup_path.write_text("stale backup from an older run\n")

    result = apply_config(config_file)

    assert result.backup_path == tmp_path / ".zshrc.bak"
    assert result.backup_path.read_text() == "plugins=(git)\n"


def test_rerun_refreshes_backup_identical_to_live_file(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("plugins=(git)\n")
    config_file = _zshrc(rc)
    apply_config(config_file)

    apply_config(config_file)

    assert config_file.backup_path.read_bytes() == rc.read_bytes()


def test_missing_file_is_created_without_backup(tmp_path: Path):
    rc = tmp_path / ".zshrc"

    result = apply_config(_zshrc(rc))

    assert rc.read_text() == BLOCK
    assert result.backup_path is None
    assert not (tmp_path / ".zshrc.bak").exists()


def test_simulation_touches_nothing(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("plugins=(git)\n")
    tmux = tmp_path / ".tmux.conf"

    results = [
        apply_config(_zshrc(rc), simulate=True),
        apply_config(ConfigFile(tmux, (WriteContents("set -g mouse on\n"),)), simulate=True),
    ]

    assert rc.read_text() == "plugins=(git)\n"
    assert not tmux.exists()
    assert sorted(p.name for p in tmp_path.iterdir()) == [".zshrc"]
    assert all(r.changed for r in results)


def test_write_contents_is_stable(tmp_path: Path):
    conf = tmp_path / ".tmux.conf"
    conf.write_text("old\n")
    config_file = ConfigFile(conf, (WriteContents("set -g mouse on\n"),))

    assert apply_config(config_file).changed is True
    assert apply_config(config_file).changed is False
    assert conf.read_text() == "set -g mouse on\n"


@pytest.mark.skipif(os.name == "nt", reason="POSIX-only permission semantics")
def test_file_mode_is_preserved(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("plugins=(git)\n")
    rc.chmod(0o600)

    apply_config(_zshrc(rc))

    assert stat.S_IMODE(rc.stat().st_mode) == 0o600


def test_write_failure_raises_config_write_error_and_keeps_file(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("plugins=(git)\n")

    with (
        patch("debdots.core.io.os.fdopen", side_effect=OSError("disk full")),
        pytest.raises(ConfigWriteError, match="disk full"),
    ):
        apply_config(_zshrc(rc))

    assert rc.read_text() == "plugins=(git)\n"


def test_invalid_pattern_is_a_config_write_error(tmp_path: Path):
    rc = tmp_path / ".zshrc"
    rc.write_text("x\n")
    with pytest.raises(ConfigWriteError):
        apply_config(ConfigFile(rc, (ReplaceLine("([", "y"),)))


def test_append_block_must_carry_its_marker():
    with pytest.raises(ValueError):
        AppendOnce(marker="zoxide init zsh", block="alias ls=eza\n")
