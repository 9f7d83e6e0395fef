import logging
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from debdots.core.actions import InstallAction, Step
from debdots.core.config import Settings, default_config
from debdots.core.probes import Probe


@dataclass
class FakeProbe(Probe):
    present: bool = False
    calls: int = 0

    def __call__(self) -> bool:
        self.calls += 1
        return self.present

    def describe(self) -> str:
        return "fake probe"


@dataclass
class FakeAction(InstallAction):
    """Records install() calls; raises `error` when set."""

    error: Exception | None = None
    calls: list[str] = field(default_factory=list)
    label: str = "fake"

    def describe(self) -> str:
        return f"install {self.label}"

    def install(self) -> None:
        self.calls.append(self.label)
        if self.error is not None:
            raise self.error


def make_step(name, present=False, error=None, critical=False, calls=None):
    action = FakeAction(error=error, label=name)
    if calls is not None:
        action.calls = calls
    return Step(name=name, probe=FakeProbe(present=present), action=action, critical=critical)


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def settings(home: Path, tmp_path: Path) -> Settings:
    config = default_config()
    config["paths"]["opt_dir"] = str(tmp_path / "opt")
    config["paths"]["go_parent"] = str(tmp_path / "usr-local")
    config["privilege"]["use_sudo"] = False
    environ = {"HOME": str(home), "USER": "dev", "SHELL": "/bin/bash"}
    return Settings.from_config(config, environ)


@pytest.fixture
def ctx():
    return {"config": {}, "simulate": False, "verbose": False}


@pytest.fixture(autouse=True)
def reset_root_logger():
    """setup_logging() replaces root handlers; keep tests independent of each other."""
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    yield
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])


@pytest.fixture
def step_factory():
    return make_step
