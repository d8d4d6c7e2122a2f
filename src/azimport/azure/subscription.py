"""Subscription id discovery."""

import logging
import os
import subprocess

from azimport.errors import ConfigValidationError

logger = logging.getLogger(__name__)

SUBSCRIPTION_ENV = "AZIMPORT_SUBSCRIPTION_ID"
ARM_SUBSCRIPTION_ENV = "ARM_SUBSCRIPTION_ID"
AZ_CLI_COMMAND = ["az", "account", "show", "--query", "id", "-o", "tsv"]


def resolve_subscription_id(explicit: str | None = None, timeout: int = 30) -> str:
    """Find the subscription id to work against.

    Sources, highest priority first:

    - ``explicit`` (the command line option)
    - ``AZIMPORT_SUBSCRIPTION_ID``
    - ``ARM_SUBSCRIPTION_ID``, honored the same way the AzureRM provider does
    - the active subscription of the Azure CLI
    """
    for source, value in (
        ("command line", explicit),
        (SUBSCRIPTION_ENV, os.environ.get(SUBSCRIPTION_ENV)),
        (ARM_SUBSCRIPTION_ENV, os.environ.get(ARM_SUBSCRIPTION_ENV)),
    ):
        if value and value.strip():
            logger.debug("Using subscription id from %s", source)
            return value.strip()

    return _subscription_from_az_cli(timeout)


def _subscription_from_az_cli(timeout: int) -> str:
    try:
        proc = subprocess.run(
            AZ_CLI_COMMAND,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ConfigValidationError(f"failed to run azure cli: {e}") from e

    if proc.returncode != 0:
        msg = f"failed to run azure cli: exit code {proc.returncode}"
        if proc.stderr.strip():
            msg = f"{msg}: {proc.stderr.strip()}"
        raise ConfigValidationError(msg)

    subscription_id = proc.stdout.strip().strip('"')
    if not subscription_id:
        raise ConfigValidationError("subscription id is not specified")
    return subscription_id
