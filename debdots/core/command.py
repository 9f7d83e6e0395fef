# debdots/core/command.py

import shlex
import subprocess

from debdots.core.errors import CommandError
from debdots.core.logger import LoggerProxy

log = LoggerProxy(__name__)


class CommandResult:
    """Holds the result of a command execution."""

    def __init__(self, returncode: int, stdout: str, stderr: str, success: bool):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.success = success

    def __bool__(self) -> bool:
        """Allows treating the result object as boolean for success."""
        return self.success


def privileged(cmd_list: list[str], use_sudo: bool = True) -> list[str]:
    """Prefix a command with sudo when privilege escalation is enabled."""
    return ["sudo", *cmd_list] if use_sudo else list(cmd_list)


def run_command(
    cmd_list: list[str],
    check: bool = True,  # If True, non-zero exit code is considered failure
    capture: bool = True,
    input_text: str | None = None,  # Fed to the command's stdin
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """
    Runs an external command using subprocess.

    Args:
        cmd_list: Command and arguments as a list of strings.
        check: If True, non-zero exit codes indicate failure.
        capture: If True, capture stdout and stderr.
        input_text: Optional text passed on stdin (installer scripts).
        cwd: Directory to run the command in.
        env: Full environment for the subprocess.

    Returns:
        CommandResult object with success status, return code, stdout, stderr.
    """
    cmd_str = shlex.join(cmd_list)
    log.info(f"Running: {cmd_str}" + (f" in {cwd}" if cwd else ""))

    try:
        process = subprocess.run(
            cmd_list,
            check=False,
            capture_output=capture,
            text=True,
            input=input_text,
            cwd=cwd,
            env=env,
        )
    except FileNotFoundError:
        log.error(f"Command not found: {cmd_list[0]}")
        return CommandResult(
            returncode=-1,
            stdout="",
            stderr=f"Command not found: {cmd_list[0]}",
            success=False,
        )
    except OSError as e:
        log.error(f"An unexpected error occurred running command: {cmd_str}", exc_info=True)
        return CommandResult(returncode=-1, stdout="", stderr=str(e), success=False)

    stdout = process.stdout.strip() if process.stdout else ""
    stderr = process.stderr.strip() if process.stderr else ""

    if stdout:
        log.debug(f"STDOUT: {stdout}")
    if stderr:
        if process.returncode == 0:
            log.debug(f"STDERR (RC=0): {stderr}")
        else:
            log.error(f"STDERR (RC={process.returncode}): {stderr}")

    success = process.returncode == 0 or not check
    if not success:
        log.error(f"Command failed with exit code {process.returncode}: {cmd_str}")
    else:
        log.debug(f"Command finished with exit code {process.returncode}.")
    return CommandResult(process.returncode, stdout, stderr, success=success)


def run_checked(cmd_list: list[str], **kwargs) -> CommandResult:
    """Run a command and raise CommandError unless it exits zero."""
    result = run_command(cmd_list, check=True, **kwargs)
    if not result.success:
        raise CommandError(cmd_list, result.returncode, result.stderr)
    return result
