#!/usr/bin/env python3
"""
debdots - Debian 12 development environment provisioner
=======================================================

CLI entry point that wires up:
* Logging & configuration
* The declared provisioning plan
* Step execution with per-step failure containment
"""

from __future__ import annotations

# ── Standard library ────────────────────────────────────────────────────────
import json
import os
from pathlib import Path
from typing import Annotated

# ── Third-party ─────────────────────────────────────────────────────────────
import typer

# ── Local imports ───────────────────────────────────────────────────────────
from debdots.core import config as config_loader
from debdots.core.actions import Step
from debdots.core.errors import ConfigWriteError, ProvisionError
from debdots.core.executor import is_satisfied
from debdots.core.logger import LoggerProxy, setup_logging
from debdots.core.orchestrator import render_summary, run_plan
from debdots.core.task import StepContext
from debdots.tasks.plan import build_plan

DEFAULT_CONFIG_PATH = config_loader.DEFAULT_CONFIG_PATH
DRY_RUN_PREAMBLE = ">>> DRY RUN mode - no changes will be made."

# ── Typer CLI app ───────────────────────────────────────────────────────────
app = typer.Typer(
    help="debdots - Debian 12 development environment provisioner.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


# ── CLI commands ────────────────────────────────────────────────────────────
@app.command()
def run(
    config_file: Annotated[
        Path,
        typer.Option(help="Path to JSON configuration file.", envvar="DEBDOTS_CONFIG_FILE"),
    ] = DEFAULT_CONFIG_PATH,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", "-n", help="Report intended actions without performing them.")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable verbose (DEBUG) output.")
    ] = False,
    only: Annotated[
        list[str] | None,
        typer.Option(
            "--only",
            "-o",
            help="Run only the named step(s). May be supplied multiple times - e.g. -o glow -o go",
        ),
    ] = None,
) -> None:
    """
    Provision the machine.

    Steps run in their fixed order. A step whose end state already exists is
    skipped; a step that fails is reported and the run continues. The shell
    and tmux configuration files are patched after all tool steps.
    """
    if dry_run:
        typer.echo(DRY_RUN_PREAMBLE)

    config = config_loader.load_config(config_file)
    setup_logging(config, verbose=verbose, simulate=dry_run)
    log = LoggerProxy(__name__)
    log.debug("Configuration loaded: %s", json.dumps(config, indent=2))

    plan = build_plan(config_loader.Settings.from_config(config, os.environ))

    only_set: set[str] = {name.strip() for name in only} if only else set()
    unknown = only_set - set(plan.step_names())
    if unknown:
        typer.echo(f"ERROR: Unknown step(s) in --only: {', '.join(sorted(unknown))}", err=True)
        raise typer.Exit(code=1)

    ctx: StepContext = {"config": config, "simulate": dry_run, "verbose": verbose}

    log.info("Starting Debian 12 dotfiles setup...")
    try:
        summary = run_plan(plan, ctx, only=only_set or None)
    except ConfigWriteError as exc:
        log.error("Aborting: configuration file could not be patched: %s", exc)
        raise typer.Exit(code=1) from None
    except ProvisionError as exc:
        log.error("Aborting: a critical step failed: %s", exc)
        raise typer.Exit(code=1) from None

    for line in render_summary(summary, simulate=dry_run):
        log.info(line)

    # Contained step failures still count as a completed run.
    raise typer.Exit(code=0)


@app.command(name="steps")
def steps_command(
    config_file: Annotated[
        Path,
        typer.Option(help="Path to JSON configuration file.", envvar="DEBDOTS_CONFIG_FILE"),
    ] = DEFAULT_CONFIG_PATH,
) -> None:
    """
    List the provisioning steps in execution order and whether each is already satisfied.
    """
    config = config_loader.load_config(config_file)
    plan = build_plan(config_loader.Settings.from_config(config, os.environ))

    for index, step in enumerate(plan.steps, start=1):
        _echo_step(index, step)
    for config_patch in plan.config_files:
        typer.echo(f"  -  {'config':<26} patch {config_patch.path}")
    for index, step in enumerate(plan.final_steps, start=len(plan.steps) + 1):
        _echo_step(index, step)


def _echo_step(index: int, step: Step) -> None:
    state = "present" if is_satisfied(step) else "missing"
    typer.echo(f"{index:>3}. {step.name:<26} [{state}] {step.action.describe()}")
    typer.echo(f"     {'':<26} check: {step.probe.describe()}")


@app.command(name="generate-config")
def generate_config_command(
    force: Annotated[bool, typer.Option("--force", help="Overwrite existing config file.")] = False,
    config_file: Annotated[
        Path,
        typer.Option(help="Where to write the config.", envvar="DEBDOTS_CONFIG_FILE"),
    ] = DEFAULT_CONFIG_PATH,
) -> None:
    """
    Write the default configuration to ~/.config/debdots/config.json.
    """
    if config_file.exists() and not force:
        typer.echo("Config already exists - use --force to overwrite.", err=True)
        raise typer.Exit(code=1)

    if config_loader.generate_default_config(config_file):
        typer.echo(f"Default config written to {config_file}")
    else:
        typer.echo("Failed to create default config", err=True)
        raise typer.Exit(code=1)


# ── Main guard ──────────────────────────────────────────────────────────────
if __name__ == "__main__":
    app()
