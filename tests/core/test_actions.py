from pathlib import Path

import pytest

from debdots.core.actions import (
    AptInstall,
    ArchiveInstall,
    CommandSequence,
    GitClone,
    LoginShellChange,
    ScriptInstall,
    SymlinkInstall,
    TreeArchiveInstall,
)
from debdots.core.command import CommandResult
from debdots.core.errors import CommandError, DownloadError


@pytest.fixture
def recorded(monkeypatch):
    """Capture every checked command instead of running it."""
    calls: list[dict] = []

    def fake_run_checked(cmd, **kwargs):
        calls.append({"cmd": cmd, **kwargs})
        return CommandResult(0, "", "", True)

    monkeypatch.setattr("debdots.core.actions.run_checked", fake_run_checked)
    return calls


def test_apt_install_sequence(recorded):
    AptInstall(packages=("git", "zsh")).install()
    assert [c["cmd"] for c in recorded] == [
        ["sudo", "apt", "update"],
        ["sudo", "apt", "upgrade", "-y"],
        ["sudo", "apt", "install", "-y", "git", "zsh"],
    ]
    assert recorded[0]["env"]["DEBIAN_FRONTEND"] == "noninteractive"


def test_command_sequence_tolerates_marked_failures(recorded, monkeypatch):
    monkeypatch.setattr(
        "debdots.core.actions.run_command",
        lambda cmd, check=False: CommandResult(1, "", "no server running", False),
    )
    CommandSequence(
        commands=(("install_plugins",), ("true",)),
        description="x",
        tolerate_failure=frozenset({0}),
    ).install()
    assert [c["cmd"] for c in recorded] == [["true"]]


def test_command_sequence_stops_on_failure(monkeypatch):
    def failing(cmd, **kwargs):
        raise CommandError(cmd, 100, "E: Unable to locate package")

    monkeypatch.setattr("debdots.core.actions.run_checked", failing)
    with pytest.raises(CommandError, match="exited with 100"):
        CommandSequence(commands=(("apt", "update"),), description="x").install()


def test_archive_install_resolves_version_only_for_templates(monkeypatch, tmp_path):
    installs = []
    monkeypatch.setattr(
        "debdots.core.actions.archive.install_binary",
        lambda url, name, dest, timeout=None: installs.append((url, name, dest)),
    )
    monkeypatch.setattr("debdots.core.actions.resolve_latest", lambda repo, **kw: "0.18.2")

    ArchiveInstall(
        "delta",
        tmp_path,
        "https://github.com/{repo}/releases/latest/download/delta-{version}-x86_64.tar.gz",
        repo="dandavison/delta",
    ).install()
    ArchiveInstall("eza", tmp_path, "https://example.invalid/eza.tar.gz").install()

    assert installs[0][0].endswith("/dandavison/delta/releases/latest/download/delta-0.18.2-x86_64.tar.gz")
    assert installs[1] == ("https://example.invalid/eza.tar.gz", "eza", tmp_path)


def test_tree_install_runs_best_effort_pre_commands(monkeypatch, tmp_path):
    pre = []
    monkeypatch.setattr(
        "debdots.core.actions.run_command",
        lambda cmd, check=False: pre.append(cmd) or CommandResult(100, "", "", False),
    )
    monkeypatch.setattr("debdots.core.actions.resolve_text_version", lambda url, **kw: "go1.22.3")
    trees = []
    monkeypatch.setattr(
        "debdots.core.actions.archive.install_tree",
        lambda url, parent, name, use_sudo, timeout: trees.append(url),
    )

    TreeArchiveInstall(
        "go",
        tmp_path,
        "https://go.dev/dl/{version}.linux-amd64.tar.gz",
        version_url="https://go.dev/VERSION?m=text",
        pre_commands=(("apt", "remove", "-y", "golang"),),
        use_sudo=False,
    ).install()

    assert pre == [["apt", "remove", "-y", "golang"]]
    assert trees == ["https://go.dev/dl/go1.22.3.linux-amd64.tar.gz"]


def test_git_clone_with_depth_and_post_commands(recorded, tmp_path):
    dest = tmp_path / "home" / ".fzf"
    GitClone("https://github.com/junegunn/fzf.git", dest, depth=1,
             post_commands=((str(dest / "install"), "--all"),)).install()

    assert dest.parent.is_dir()
    assert recorded[0]["cmd"] == [
        "git", "clone", "--depth", "1", "https://github.com/junegunn/fzf.git", str(dest)
    ]
    assert recorded[1]["cmd"] == [str(dest / "install"), "--all"]


def test_script_install_pipes_script_on_stdin(recorded, monkeypatch):
    monkeypatch.setattr("debdots.core.actions.http.fetch_text", lambda url, timeout=None: "echo hi")
    ScriptInstall("https://starship.rs/install.sh", args=("--yes",)).install()
    assert recorded[0]["cmd"] == ["sh", "-s", "--", "--yes"]
    assert recorded[0]["input_text"] == "echo hi"


def test_script_install_inline_mode_passes_env(recorded, monkeypatch):
    monkeypatch.setattr("debdots.core.actions.http.fetch_text", lambda url, timeout=None: "exit 0")
    ScriptInstall("https://example.invalid/install.sh", env={"RUNZSH": "no"}, mode="arg").install()
    assert recorded[0]["cmd"] == ["sh", "-c", "exit 0"]
    assert recorded[0]["env"]["RUNZSH"] == "no"


def test_script_download_failure_is_download_error(monkeypatch):
    def boom(url, timeout=None):
        raise OSError("connection reset")

    monkeypatch.setattr("debdots.core.actions.http.fetch_text", boom)
    with pytest.raises(DownloadError):
        ScriptInstall("https://starship.rs/install.sh").install()


def test_symlink_install_replaces_existing_links(tmp_path):
    link = tmp_path / "bin" / "bat"
    link.parent.mkdir()
    link.symlink_to("/somewhere/else")

    SymlinkInstall(((link, Path("/usr/bin/batcat")), (tmp_path / "bin" / "fd", Path("/usr/bin/fdfind")))).install()

    assert link.readlink() == Path("/usr/bin/batcat")
    assert (tmp_path / "bin" / "fd").readlink() == Path("/usr/bin/fdfind")


def test_login_shell_change(recorded, monkeypatch):
    monkeypatch.setattr("debdots.core.actions.shutil.which", lambda name: "/usr/bin/zsh")
    LoginShellChange("zsh", "dev").install()
    assert recorded[0]["cmd"] == ["sudo", "chsh", "-s", "/usr/bin/zsh", "dev"]


def test_login_shell_change_without_zsh(monkeypatch):
    monkeypatch.setattr("debdots.core.actions.shutil.which", lambda name: None)
    with pytest.raises(CommandError):
        LoginShellChange("zsh", "dev").install()
