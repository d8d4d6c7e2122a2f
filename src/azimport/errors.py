"""Error kinds raised across an import run."""


class AzImportError(Exception):
    """Base class for all errors that terminate an import run."""


class ConfigValidationError(AzImportError):
    """The run configuration is invalid. Raised before anything is touched."""


class InitializationError(AzImportError):
    """Backend, auth or workspace setup failed. No resource has been imported."""


class PerResourceImportError(AzImportError):
    """A single resource failed to import.

    Recorded on the owning entry by the orchestrator. Only raised by a driver
    that decides the failure should abort the run.
    """

    def __init__(self, resource_id: str, address: str, cause: Exception):
        self.resource_id = resource_id
        self.address = address
        self.cause = cause
        super().__init__(f"Failed to import {resource_id} as {address}: {cause}")


class GenerationError(AzImportError):
    """Emitting the Terraform configuration failed."""


class TerraformError(AzImportError):
    """A terraform invocation exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"terraform {' '.join(command)} exited with code {returncode}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
