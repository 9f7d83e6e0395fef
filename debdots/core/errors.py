# debdots/core/errors.py
"""
Error taxonomy for provisioning.

Everything raised from inside a step's install action derives from
ProvisionError so the executor can contain it. ConfigWriteError is the
one error the orchestrator lets escape.
"""


class ProvisionError(Exception):
    """Base class for all provisioning failures."""


class ResolutionError(ProvisionError):
    """Latest-version lookup failed (network, malformed payload, missing tag)."""


class DownloadError(ProvisionError):
    """A release artifact or installer script could not be fetched."""


class ExtractError(ProvisionError):
    """A downloaded archive could not be unpacked."""


class BinaryNotFoundError(ProvisionError):
    """The expected executable was not found in an extracted archive."""


class CommandError(ProvisionError):
    """An external command exited non-zero."""

    def __init__(self, cmd: list[str], returncode: int, stderr: str = ""):
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr}" if stderr else ""
        super().__init__(f"'{' '.join(cmd)}' exited with {returncode}{detail}")


class ConfigWriteError(ProvisionError):
    """A user configuration file could not be read, backed up or written."""
