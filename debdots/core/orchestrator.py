# debdots/core/orchestrator.py
"""
Runs a provisioning plan end to end: tool steps in declared order, then
the configuration pass, then the finalization steps.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from debdots.core.actions import Step
from debdots.core.executor import run_step
from debdots.core.logger import LoggerProxy
from debdots.core.patcher import ConfigFile, PatchResult, apply_config
from debdots.core.task import StepContext, StepOutcome, StepResult

log = LoggerProxy(__name__)

RULE = "=" * 70


@dataclass(frozen=True)
class ProvisionPlan:
    steps: tuple[Step, ...]
    config_files: tuple[ConfigFile, ...] = ()
    final_steps: tuple[Step, ...] = ()

    def all_steps(self) -> tuple[Step, ...]:
        return self.steps + self.final_steps

    def step_names(self) -> list[str]:
        return [step.name for step in self.all_steps()]


@dataclass
class RunSummary:
    results: list[StepResult] = field(default_factory=list)
    patches: list[PatchResult] = field(default_factory=list)

    @property
    def failures(self) -> list[tuple[str, str]]:
        return collect_failures(self.results)

    def outcome_of(self, name: str) -> StepOutcome | None:
        return next((r.outcome for r in self.results if r.name == name), None)


def collect_failures(results: Iterable[StepResult]) -> list[tuple[str, str]]:
    """Fold step results into the ordered (step_name, reason) list of failures."""
    failures: list[tuple[str, str]] = []
    seen: set[str] = set()
    for result in results:
        if result.outcome is StepOutcome.FAILED and result.name not in seen:
            seen.add(result.name)
            failures.append((result.name, result.error or "unknown error"))
    return failures


def _run_steps(
    steps: Iterable[Step], ctx: StepContext, only: set[str] | None
) -> list[StepResult]:
    results = []
    for step in steps:
        if only and step.name not in only:
            log.debug(f"Skipping {step.name} - not selected via --only.")
            continue
        results.append(run_step(step, ctx))
    return results


def run_plan(
    plan: ProvisionPlan, ctx: StepContext, only: set[str] | None = None
) -> RunSummary:
    """
    Execute the plan. Contained step failures end up in the summary;
    ConfigWriteError and critical step failures propagate.
    """
    summary = RunSummary()
    summary.results.extend(_run_steps(plan.steps, ctx, only))

    log.info("--- Patching configuration files ---")
    for config_file in plan.config_files:
        summary.patches.append(apply_config(config_file, simulate=ctx["simulate"]))

    summary.results.extend(_run_steps(plan.final_steps, ctx, only))
    return summary


def render_summary(summary: RunSummary, simulate: bool = False) -> list[str]:
    """Build the end-of-run report as lines of text."""
    lines = [RULE]
    for result in summary.results:
        if not result.success:
            continue
        lines.append(f"  * {result.name:<26} : {result.outcome.value}")
    for patch in summary.patches:
        state = "changed" if patch.changed else "unchanged"
        if simulate and patch.changed:
            state = "would change"
        lines.append(f"  * {str(patch.path):<26} : {state}")
    lines.append("")
    lines.append("  Dry run complete - nothing was changed." if simulate else "  Setup complete!")

    failures = summary.failures
    if failures:
        lines.append("")
        lines.append("  The following tools failed to install and were skipped:")
        lines.extend(f"    - {name}" for name, _ in failures)
        lines.append("")
        lines.append("  Re-run with --only <step> or install the above tools manually.")

    lines.append("")
    lines.append("  Run 'exec zsh' or log out/in to apply all changes.")
    lines.append("  Then run 'nvim' to let Kickstart initialize your plugins.")
    lines.append(RULE)
    return lines
