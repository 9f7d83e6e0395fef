# debdots/core/probes.py
"""
Existence probes: cheap, local, side-effect-free checks answering
"is this step's end state already in place?".

A probe that reports present when the thing is absent means the step is
never installed, so when in doubt a probe answers False.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path

DPKG_INFO_DIR = Path("/var/lib/dpkg/info")


class Probe:
    def __call__(self) -> bool:
        raise NotImplementedError("probe must be implemented by subclasses.")

    def describe(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class CommandProbe(Probe):
    """Satisfied when `command` resolves on PATH or at one of `fallbacks`."""

    command: str
    fallbacks: tuple[Path, ...] = ()

    def __call__(self) -> bool:
        if shutil.which(self.command) is not None:
            return True
        return any(Path(p).is_file() for p in self.fallbacks)

    def describe(self) -> str:
        return f"'{self.command}' on PATH"


@dataclass(frozen=True)
class PathProbe(Probe):
    path: Path
    kind: str = "any"  # any | dir | file

    def __call__(self) -> bool:
        path = Path(self.path)
        if self.kind == "dir":
            return path.is_dir()
        if self.kind == "file":
            return path.is_file()
        return path.exists()

    def describe(self) -> str:
        return f"{self.path} exists"


@dataclass(frozen=True)
class PathAbsentProbe(Probe):
    """Satisfied when none of `paths` exist (stale files already cleaned up)."""

    paths: tuple[Path, ...]

    def __call__(self) -> bool:
        return not any(Path(p).exists() for p in self.paths)

    def describe(self) -> str:
        return "absent: " + ", ".join(str(p) for p in self.paths)


@dataclass(frozen=True)
class SymlinkProbe(Probe):
    link: Path
    target: Path

    def __call__(self) -> bool:
        link = Path(self.link)
        return link.is_symlink() and link.readlink() == Path(self.target)

    def describe(self) -> str:
        return f"{self.link} -> {self.target}"


@dataclass(frozen=True)
class PackagesProbe(Probe):
    """Satisfied when every Debian package has a dpkg file list."""

    packages: tuple[str, ...]
    info_dir: Path = DPKG_INFO_DIR

    def __call__(self) -> bool:
        return all(self._installed(pkg) for pkg in self.packages)

    def _installed(self, package: str) -> bool:
        info = Path(self.info_dir)
        return (info / f"{package}.list").is_file() or any(info.glob(f"{package}:*.list"))

    def describe(self) -> str:
        return f"{len(self.packages)} apt packages installed"


@dataclass(frozen=True)
class LoginShellProbe(Probe):
    """Satisfied when the current login shell already is `shell_name`."""

    shell_name: str
    current_shell: str

    def __call__(self) -> bool:
        resolved = shutil.which(self.shell_name)
        return resolved is not None and self.current_shell == resolved

    def describe(self) -> str:
        return f"login shell is {self.shell_name}"


@dataclass(frozen=True)
class AllOf(Probe):
    probes: tuple[Probe, ...] = field(default_factory=tuple)

    def __call__(self) -> bool:
        return all(probe() for probe in self.probes)

    def describe(self) -> str:
        return " and ".join(probe.describe() for probe in self.probes)


class NeverSatisfied(Probe):
    """For steps that should run on every invocation."""

    def __call__(self) -> bool:
        return False

    def describe(self) -> str:
        return "always runs"
