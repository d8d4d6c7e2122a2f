"""Terraform CLI wrapper: workspace setup, state import, configuration output."""

import json
import logging
import os
import shutil
import subprocess
from pathlib import Path

from azimport.config import LOCAL_BACKEND
from azimport.errors import TerraformError

logger = logging.getLogger(__name__)

PROVIDER_FILE = "provider.tf"
MAIN_FILE = "main.tf"
STUB_FILE = "azimport-import-stub.tf"
PROVIDER_SOURCE = "hashicorp/azurerm"
PROVIDER_VERSION = "~> 3.0"


def render_provider(backend_type: str = LOCAL_BACKEND, dev_provider: bool = False) -> str:
    """Render the terraform/provider blocks for the workspace."""
    lines = ["terraform {"]
    if backend_type != LOCAL_BACKEND:
        lines.append(f'  backend "{backend_type}" {{}}')
    lines += [
        "  required_providers {",
        "    azurerm = {",
        f'      source = "{PROVIDER_SOURCE}"',
    ]
    if not dev_provider:
        lines.append(f'      version = "{PROVIDER_VERSION}"')
    lines += [
        "    }",
        "  }",
        "}",
        "",
        'provider "azurerm" {',
        "  features {}",
        "}",
        "",
    ]
    return "\n".join(lines)


class TerraformWorkspace:
    """Runs terraform commands inside an output directory.

    Imports are not safe to run concurrently against the same state, so a
    workspace must only be driven from one thread.
    """

    def __init__(
        self,
        workdir: str | Path,
        subscription_id: str,
        terraform_bin: str = "terraform",
        timeout: int = 300,
    ):
        self.workdir = Path(workdir)
        self.subscription_id = subscription_id
        self._terraform_bin = terraform_bin
        self._timeout = timeout

    def check_installed(self) -> None:
        if shutil.which(self._terraform_bin) is None:
            raise TerraformError([self._terraform_bin], 127, "terraform not found in PATH")

    def write_provider(self, backend_type: str = LOCAL_BACKEND, dev_provider: bool = False) -> Path:
        path = self.workdir / PROVIDER_FILE
        path.write_text(render_provider(backend_type, dev_provider))
        return path

    def init(self, backend_config: dict[str, str] | None = None) -> None:
        args = ["init", "-input=false", "-no-color"]
        for key, value in (backend_config or {}).items():
            args.append(f"-backend-config={key}={value}")
        self._run(args)

    def bind(self, address: str, resource_id: str) -> None:
        """Import ``resource_id`` into the state under ``address``.

        ``terraform import`` needs the address declared, so an empty resource
        block is written for the duration of the call.
        """
        tf_type, _, tf_name = address.partition(".")
        stub = self.workdir / STUB_FILE
        stub.write_text(f'resource "{tf_type}" "{tf_name}" {{}}\n')
        try:
            self._run(["import", "-input=false", "-no-color", address, resource_id])
        finally:
            stub.unlink(missing_ok=True)

    def state_json(self) -> dict:
        """Return the current state as ``terraform show -json`` reports it."""
        return self._run_json(["show", "-json", "-no-color"])

    def provider_schema(self) -> dict:
        return self._run_json(["providers", "schema", "-json"])

    def fmt(self) -> None:
        self._run(["fmt", "-no-color", MAIN_FILE])

    def write_config(self, blocks: list[str], append: bool = False) -> Path:
        path = self.workdir / MAIN_FILE
        text = "\n".join(block.rstrip() + "\n" for block in blocks)
        if append and path.exists():
            if text:
                existing = path.read_text().rstrip("\n")
                path.write_text(f"{existing}\n\n{text}" if existing else text)
        else:
            path.write_text(text)
        return path

    def _run_json(self, args: list[str]) -> dict:
        proc = self._run(args)
        try:
            return json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            raise TerraformError(args, proc.returncode, f"invalid JSON output: {e}") from e

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        env = dict(os.environ)
        env["ARM_SUBSCRIPTION_ID"] = self.subscription_id
        env.setdefault("TF_IN_AUTOMATION", "1")
        logger.debug("Running terraform %s", " ".join(args))
        try:
            proc = subprocess.run(
                [self._terraform_bin, *args],
                cwd=self.workdir,
                env=env,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise TerraformError(args, -1, f"timed out after {self._timeout}s") from e
        except OSError as e:
            raise TerraformError(args, 127, str(e)) from e

        if proc.returncode != 0:
            raise TerraformError(args, proc.returncode, proc.stderr)
        return proc
