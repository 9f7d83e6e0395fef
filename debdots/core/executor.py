# debdots/core/executor.py

from debdots.core.actions import Step
from debdots.core.logger import LoggerProxy
from debdots.core.task import Severity, StepContext, StepOutcome, StepResult

log = LoggerProxy(__name__)


def _log_with_severity(sev: Severity, msg: str) -> None:
    getattr(log, sev.log_method())(msg)


def is_satisfied(step: Step) -> bool:
    """Run the step's probe. A probe that raises counts as 'not present'."""
    try:
        return bool(step.probe())
    except Exception as exc:
        log.debug(f"Probe for {step.name} raised {exc!r}; treating as absent.")
        return False


def run_step(step: Step, ctx: StepContext) -> StepResult:
    """
    Run one step: skip it if its probe is satisfied, announce it in
    simulation mode, otherwise install it.

    Failures of non-critical steps are contained: logged as a warning and
    returned as a FAILED result. Critical steps re-raise.
    """
    if is_satisfied(step):
        result = StepResult(
            name=step.name,
            outcome=StepOutcome.SKIPPED,
            messages=[(Severity.INFO, f"already satisfied ({step.probe.describe()}). Skipping.")],
        )
    elif ctx["simulate"]:
        result = StepResult(
            name=step.name,
            outcome=StepOutcome.SIMULATED,
            messages=[(Severity.INFO, f"[dry-run] {step.action.describe()}")],
        )
    else:
        log.info(f"--- Installing {step.name} ---")
        try:
            step.action.install()
        except Exception as exc:
            if step.critical:
                log.error(f"{step.name} is a critical step and failed: {exc}")
                raise
            log.warning(f"{step.name} installation failed - skipping and continuing: {exc}")
            log.debug("Failure details", exc_info=True)
            return StepResult(
                name=step.name,
                outcome=StepOutcome.FAILED,
                messages=[(Severity.ERROR, str(exc))],
                error=str(exc) or type(exc).__name__,
            )
        result = StepResult(
            name=step.name,
            outcome=StepOutcome.INSTALLED,
            messages=[(Severity.INFO, "installed.")],
        )

    for sev, msg in result.messages:
        _log_with_severity(sev, f"{step.name}: {msg}")
    return result
