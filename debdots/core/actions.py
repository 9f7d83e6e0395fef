# debdots/core/actions.py
"""
Install actions and the Step record that pairs one with its probe.

Every action exposes describe() (what a dry run announces) and install()
(the side effects). install() signals failure by raising; the executor
decides whether that failure is contained.
"""

from __future__ import annotations

import os
import shlex
import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from urllib.error import URLError

from debdots.core import archive, http
from debdots.core.command import privileged, run_checked, run_command
from debdots.core.errors import CommandError, DownloadError
from debdots.core.logger import LoggerProxy
from debdots.core.probes import Probe
from debdots.core.release import (
    GITHUB_API,
    RemoteRelease,
    resolve_latest,
    resolve_text_version,
)

log = LoggerProxy(__name__)


class InstallAction:
    def describe(self) -> str:
        raise NotImplementedError("describe() must be implemented by the action.")

    def install(self) -> None:
        raise NotImplementedError("install() must be implemented by the action.")


@dataclass(frozen=True)
class Step:
    name: str
    probe: Probe
    action: InstallAction
    critical: bool = False


@dataclass(frozen=True)
class AptInstall(InstallAction):
    packages: tuple[str, ...]
    update: bool = True
    upgrade: bool = True
    use_sudo: bool = True

    def describe(self) -> str:
        verbs = [v for v, on in (("update", self.update), ("upgrade", self.upgrade)) if on]
        prefix = f"apt {' + '.join(verbs)}, then " if verbs else ""
        return f"{prefix}apt install {' '.join(self.packages)}"

    def install(self) -> None:
        env = {**os.environ, "DEBIAN_FRONTEND": "noninteractive"}
        if self.update:
            run_checked(privileged(["apt", "update"], self.use_sudo), env=env)
        if self.upgrade:
            run_checked(privileged(["apt", "upgrade", "-y"], self.use_sudo), env=env)
        run_checked(
            privileged(["apt", "install", "-y", *self.packages], self.use_sudo), env=env
        )


@dataclass(frozen=True)
class CommandSequence(InstallAction):
    commands: tuple[tuple[str, ...], ...]
    description: str
    tolerate_failure: frozenset[int] = frozenset()  # indexes allowed to fail

    def describe(self) -> str:
        return self.description

    def install(self) -> None:
        for index, cmd in enumerate(self.commands):
            if index in self.tolerate_failure:
                result = run_command(list(cmd), check=False)
                if result.returncode != 0:
                    log.debug(f"Ignoring failure of {shlex.join(cmd)} (RC={result.returncode})")
            else:
                run_checked(list(cmd))


@dataclass(frozen=True)
class ArchiveInstall(InstallAction):
    """A single binary from a release archive, e.g. eza, glow, delta."""

    binary_name: str
    dest_dir: Path
    url_template: str
    repo: str | None = None
    api_base: str = GITHUB_API
    timeout: float | None = None

    def describe(self) -> str:
        source = self.repo or self.url_template
        return f"download {self.binary_name} release archive from {source} into {self.dest_dir}"

    def release(self) -> RemoteRelease:
        if "{version}" in self.url_template:
            if not self.repo:
                raise ValueError(f"{self.binary_name}: versioned template needs a repo")
            version = resolve_latest(self.repo, api_base=self.api_base, timeout=self.timeout)
        else:
            version = "latest"
        return RemoteRelease.from_template(self.url_template, version, repo=self.repo)

    def install(self) -> None:
        release = self.release()
        archive.install_binary(
            release.url, self.binary_name, Path(self.dest_dir), timeout=self.timeout
        )


@dataclass(frozen=True)
class TreeArchiveInstall(InstallAction):
    """A whole release tree unpacked under a system prefix (Go, Neovim)."""

    tree_name: str
    parent_dir: Path
    url_template: str
    version_url: str | None = None
    pre_commands: tuple[tuple[str, ...], ...] = ()  # best effort, failures ignored
    use_sudo: bool = True
    timeout: float | None = None

    def describe(self) -> str:
        return f"unpack {self.tree_name} release into {Path(self.parent_dir) / self.tree_name}"

    def release(self) -> RemoteRelease:
        if self.version_url:
            version = resolve_text_version(self.version_url, timeout=self.timeout)
        else:
            version = "latest"
        return RemoteRelease.from_template(self.url_template, version)

    def install(self) -> None:
        for cmd in self.pre_commands:
            run_command(privileged(list(cmd), self.use_sudo), check=False)
        release = self.release()
        archive.install_tree(
            release.url,
            Path(self.parent_dir),
            self.tree_name,
            use_sudo=self.use_sudo,
            timeout=self.timeout,
        )
        log.info(f"{self.tree_name} {release.version} installed")


@dataclass(frozen=True)
class GitClone(InstallAction):
    repo_url: str
    dest: Path
    depth: int | None = None
    post_commands: tuple[tuple[str, ...], ...] = ()

    def describe(self) -> str:
        return f"git clone {self.repo_url} {self.dest}"

    def install(self) -> None:
        dest = Path(self.dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        cmd = ["git", "clone"]
        if self.depth:
            cmd += ["--depth", str(self.depth)]
        run_checked([*cmd, self.repo_url, str(dest)])
        for post in self.post_commands:
            run_checked(list(post))


@dataclass(frozen=True)
class ScriptInstall(InstallAction):
    """
    Fetch an installer script and run it with `sh`.

    mode="stdin" pipes the script (`curl ... | sh -s -- args`);
    mode="arg" passes it inline (`sh -c "$(curl ...)"`).
    """

    script_url: str
    args: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    mode: str = "stdin"
    timeout: float | None = None

    def describe(self) -> str:
        env = " ".join(f"{k}={v}" for k, v in self.env.items())
        return f"run installer {self.script_url}" + (f" with {env}" if env else "")

    def install(self) -> None:
        try:
            script = http.fetch_text(self.script_url, timeout=self.timeout)
        except (URLError, OSError, ValueError) as e:
            raise DownloadError(f"Failed to fetch installer {self.script_url}: {e}") from e

        env = {**os.environ, **self.env}
        if self.mode == "arg":
            run_checked(["sh", "-c", script, *self.args], env=env, capture=False)
        else:
            run_checked(["sh", "-s", "--", *self.args], input_text=script, env=env)


@dataclass(frozen=True)
class SymlinkInstall(InstallAction):
    """`ln -sf target link` for each pair."""

    links: tuple[tuple[Path, Path], ...]

    def describe(self) -> str:
        return ", ".join(f"ln -sf {target} {link}" for link, target in self.links)

    def install(self) -> None:
        for link, target in self.links:
            link = Path(link)
            link.parent.mkdir(parents=True, exist_ok=True)
            if link.is_symlink() or link.is_file():
                link.unlink()
            link.symlink_to(target)
            log.debug(f"Linked {link} -> {target}")


@dataclass(frozen=True)
class LoginShellChange(InstallAction):
    shell_name: str
    user: str
    use_sudo: bool = True

    def describe(self) -> str:
        return f"chsh -s $(command -v {self.shell_name}) {self.user}"

    def install(self) -> None:
        shell_path = shutil.which(self.shell_name)
        if shell_path is None:
            raise CommandError(["command", "-v", self.shell_name], 1, "shell not found")
        run_checked(privileged(["chsh", "-s", shell_path, self.user], self.use_sudo))
