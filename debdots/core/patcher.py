# debdots/core/patcher.py
"""
Idempotent patching of user configuration files (~/.zshrc, ~/.tmux.conf).

Directives are applied to an in-memory ConfigDocument first; the file is
backed up and rewritten atomically only afterwards, so a failure never
leaves a half-patched file behind. Any I/O problem is a ConfigWriteError.
"""

from __future__ import annotations

import re
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path

from debdots.core.errors import ConfigWriteError
from debdots.core.io import atomic_write_text
from debdots.core.logger import LoggerProxy

log = LoggerProxy(__name__)

BACKUP_SUFFIX = ".bak"


class ConfigDocument:
    """A text file as an ordered list of lines (line endings kept)."""

    def __init__(self, text: str = ""):
        self.lines: list[str] = text.splitlines(keepends=True)

    def render(self) -> str:
        return "".join(self.lines)

    def contains(self, marker: str) -> bool:
        return marker in self.render()

    def replace_lines(self, pattern: re.Pattern[str], literal: str) -> int:
        replaced = 0
        for index, line in enumerate(self.lines):
            body = line.rstrip("\r\n")
            if pattern.search(body):
                self.lines[index] = literal + line[len(body):]
                replaced += 1
        return replaced

    def append_block(self, block: str) -> None:
        text = self.render()
        if text and not text.endswith("\n"):
            block = "\n" + block
        if not block.endswith("\n"):
            block += "\n"
        self.lines.extend(block.splitlines(keepends=True))

    def reset(self, contents: str) -> None:
        self.lines = contents.splitlines(keepends=True)


class Directive:
    def apply(self, doc: ConfigDocument) -> str | None:
        """Mutate `doc`; return a description of the change, or None if nothing changed."""
        raise NotImplementedError


@dataclass(frozen=True)
class ReplaceLine(Directive):
    """Replace every line matching `pattern` with `line`. No match means no insertion."""

    pattern: str
    line: str

    def apply(self, doc: ConfigDocument) -> str | None:
        try:
            regex = re.compile(self.pattern)
        except re.error as e:
            raise ConfigWriteError(f"Invalid line pattern {self.pattern!r}: {e}") from e
        before = doc.render()
        count = doc.replace_lines(regex, self.line)
        if count == 0:
            log.debug(f"No line matches {self.pattern!r}; leaving file as is")
            return None
        if doc.render() == before:
            return None
        return f"replace line matching {self.pattern!r} with {self.line!r}"


@dataclass(frozen=True)
class AppendOnce(Directive):
    """Append `block` unless `marker` already occurs anywhere in the file."""

    marker: str
    block: str

    def __post_init__(self) -> None:
        if self.marker not in self.block:
            raise ValueError(f"Append block must contain its own marker {self.marker!r}")

    def apply(self, doc: ConfigDocument) -> str | None:
        if doc.contains(self.marker):
            log.debug(f"Marker {self.marker!r} already present; not appending")
            return None
        doc.append_block(self.block)
        return f"append block guarded by {self.marker!r}"


@dataclass(frozen=True)
class WriteContents(Directive):
    """Make the whole file equal `contents`."""

    contents: str

    def apply(self, doc: ConfigDocument) -> str | None:
        if doc.render() == self.contents:
            return None
        doc.reset(self.contents)
        return "write managed contents"


@dataclass(frozen=True)
class ConfigFile:
    path: Path
    directives: tuple[Directive, ...] = field(default_factory=tuple)

    @property
    def backup_path(self) -> Path:
        path = Path(self.path)
        return path.with_name(path.name + BACKUP_SUFFIX)


@dataclass
class PatchResult:
    path: Path
    changed: bool
    backup_path: Path | None = None
    changes: list[str] = field(default_factory=list)


def render_patched(config_file: ConfigFile, current: str) -> tuple[str, list[str]]:
    """Apply all directives to `current` in order; pure apart from logging."""
    doc = ConfigDocument(current)
    changes = [desc for d in config_file.directives if (desc := d.apply(doc)) is not None]
    return doc.render(), changes


def apply_config(config_file: ConfigFile, simulate: bool = False) -> PatchResult:
    """
    Back up and patch one configuration file.

    In simulation mode the intended changes are only logged: no backup, no write.

    Raises:
        ConfigWriteError: if the file cannot be read, backed up or written.
    """
    path = Path(config_file.path)
    exists = path.is_file()
    try:
        current = path.read_text(encoding="utf-8") if exists else ""
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigWriteError(f"Cannot read {path}: {e}") from e

    new_text, changes = render_patched(config_file, current)
    changed = new_text != current

    if simulate:
        for desc in changes:
            log.info(f"    [dry-run] {path}: {desc}")
        if not changes:
            log.info(f"{path} already up to date.")
        return PatchResult(path=path, changed=changed, changes=changes)

    backup = None
    try:
        if exists:
            backup = config_file.backup_path
            shutil.copy2(path, backup)
            log.debug(f"Backed up {path} to {backup}")

        if changed:
            perms = stat.S_IMODE(path.stat().st_mode) if exists else None
            atomic_write_text(path, new_text, perms=perms)
            for desc in changes:
                log.info(f"{path}: {desc}")
        else:
            log.info(f"{path} already up to date.")
    except OSError as e:
        raise ConfigWriteError(f"Cannot update {path}: {e}") from e

    return PatchResult(path=path, changed=changed, backup_path=backup, changes=changes)
