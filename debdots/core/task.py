# debdots/core/task.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypedDict


class StepContext(TypedDict):
    """Runtime context passed to every step."""

    config: dict[str, Any]
    simulate: bool
    verbose: bool


class Severity(Enum):
    """
    Represents the severity levels for step messages.

    Provides a mapping between severity levels and their corresponding
    logger method names.
    """

    DEBUG = "debug"
    HINT = "hint"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def log_method(self) -> str:
        """
        Determine the appropriate logger method name based on the severity level.

        Returns:
            str: The logger method name corresponding to the severity level.
        """
        if self in (Severity.INFO, Severity.HINT):
            return "info"
        return self.value


class StepOutcome(Enum):
    SKIPPED = "skipped"
    SIMULATED = "simulated"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass
class StepResult:
    name: str
    outcome: StepOutcome
    messages: list[tuple[Severity, str]] = field(default_factory=list)
    error: str | None = None  # failure reason, only set for FAILED

    @property
    def success(self) -> bool:
        return self.outcome is not StepOutcome.FAILED

    @property
    def changed(self) -> bool:
        return self.outcome is StepOutcome.INSTALLED

