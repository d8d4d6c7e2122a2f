"""Import orchestrator shared by the batch and interactive drivers."""

import logging
import shutil
from pathlib import Path
from typing import Protocol

from azure.core.exceptions import AzureError

from azimport.azure.client import MockResourceClient, ResourceGroupClient, SingleResourceLister
from azimport.config import Config, RgConfig, validate_config
from azimport.errors import (
    ConfigValidationError,
    GenerationError,
    InitializationError,
    PerResourceImportError,
    TerraformError,
)
from azimport.hcl import find_resource_schema, find_resource_state, render_resource
from azimport.models import ImportStatus, ResolvedResource, RunState, Scope
from azimport.resmap import dump_mapping, load_mapping
from azimport.resolver import AddressResolver
from azimport.terraform import PROVIDER_FILE, TerraformWorkspace

MAPPING_EXPORT_FILE = "azimport-mapping.json"


class ResourceLister(Protocol):
    def check_access(self, resource_group: str | None) -> None: ...

    def list_resource_ids(self, resource_group: str | None) -> list[str]: ...


class Meta:
    """Owns the resource registry and drives one run through its lifecycle.

    ``init`` -> ``list_resource`` -> ``import_resource`` per entry ->
    ``generate_cfg``. A failed import is recorded on the entry and never
    aborts the run here; whether to keep going is the driver's decision.
    """

    def __init__(
        self,
        cfg: Config,
        lister: ResourceLister,
        workspace: TerraformWorkspace,
        logger: logging.Logger | None = None,
    ):
        self._cfg = validate_config(cfg)
        self._lister = lister
        self._workspace = workspace
        self._logger = logger or logging.getLogger(__name__)
        self._resources: list[ResolvedResource] = []
        self.state = RunState.CREATED

        if cfg.scope == Scope.RESOURCE_GROUP:
            self._target = cfg.resource_group_name
            self._resolver = AddressResolver(cfg.resource_name_pattern, cfg.resource_mapping)
        else:
            self._target = None
            self._resolver = AddressResolver(fixed_address=cfg.resource_name)

    @property
    def config(self) -> Config:
        return self._cfg

    @property
    def resources(self) -> list[ResolvedResource]:
        return self._resources

    def init(self) -> None:
        """Prepare the output directory, check Azure access and run ``terraform init``."""
        self._expect(RunState.CREATED)
        common = self._cfg.common
        try:
            self._prepare_output_dir()
            self._lister.check_access(self._target)
            self._workspace.check_installed()
            if not (common.append and (self._workspace.workdir / PROVIDER_FILE).exists()):
                self._workspace.write_provider(common.backend_type, common.dev_provider)
            self._workspace.init(common.backend_settings())
        except InitializationError:
            raise
        except (AzureError, TerraformError, OSError) as e:
            raise InitializationError(f"initializing: {e}") from e
        self.state = RunState.INITIALIZED

    def list_resource(self) -> list[ResolvedResource]:
        """Enumerate the scope and resolve every resource's address.

        The returned list is the registry itself, so outcomes recorded later
        are visible through it.
        """
        self._expect(RunState.INITIALIZED)
        try:
            resource_ids = self._lister.list_resource_ids(self._target)
        except AzureError as e:
            raise InitializationError(f"listing resources: {e}") from e

        for resource_id in resource_ids:
            address, status = self._resolver.resolve(resource_id)
            self._resources.append(ResolvedResource(resource_id, address, status))

        self.state = RunState.LISTED
        return self._resources

    def import_resource(self, entry: ResolvedResource) -> None:
        """Import one registry entry and record the outcome on it."""
        self._expect(RunState.LISTED, RunState.IMPORTING)
        if not any(entry is r for r in self._resources):
            raise RuntimeError(f"{entry.resource_id} is not part of this run")
        if entry.skip():
            raise RuntimeError(f"{entry.resource_id} has no mapping and cannot be imported")
        if entry.import_status != ImportStatus.PENDING:
            raise RuntimeError(f"{entry.resource_id} has already been imported")

        self.state = RunState.IMPORTING
        try:
            self._workspace.bind(entry.tf_addr, entry.resource_id)
        except Exception as e:
            self._logger.debug("Import of %s failed", entry.resource_id, exc_info=True)
            entry.record_failure(PerResourceImportError(entry.resource_id, entry.tf_addr, e))
        else:
            entry.record_success()

    def generate_cfg(self, entries: list[ResolvedResource]) -> None:
        """Write configuration for every successfully imported entry. Runs once."""
        self._expect(RunState.LISTED, RunState.IMPORTING)
        append = self._cfg.common.append
        imported = [e for e in entries if e.import_status == ImportStatus.IMPORTED]
        mapping_path = self._workspace.workdir / MAPPING_EXPORT_FILE
        try:
            mapping = self._merged_mapping(mapping_path, imported, append)
            blocks = self._render_blocks(imported) if imported else []
            self._workspace.write_config(blocks, append=append)
            if blocks:
                self._workspace.fmt()
            dump_mapping(mapping, mapping_path)
        except (TerraformError, ConfigValidationError, OSError) as e:
            raise GenerationError(f"generating Terraform configuration: {e}") from e
        self.state = RunState.GENERATED

    def imported(self) -> list[ResolvedResource]:
        return [r for r in self._resources if r.import_status == ImportStatus.IMPORTED]

    def failed(self) -> list[ResolvedResource]:
        return [r for r in self._resources if r.import_status == ImportStatus.FAILED]

    def skipped(self) -> list[ResolvedResource]:
        return [r for r in self._resources if r.skip()]

    def _expect(self, *states: RunState) -> None:
        if self.state not in states:
            expected = " or ".join(s.value for s in states)
            raise RuntimeError(f"invalid run state {self.state.value}, expected {expected}")

    def _prepare_output_dir(self) -> None:
        common = self._cfg.common
        outdir = self._workspace.workdir
        outdir.mkdir(parents=True, exist_ok=True)
        if not any(outdir.iterdir()) or common.append:
            return
        if not common.overwrite:
            raise InitializationError(
                f"the output directory {outdir} is not empty, "
                "use overwrite or append to proceed"
            )
        self._logger.info("Cleaning up output directory %s", outdir)
        for child in outdir.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()

    def _render_blocks(self, imported: list[ResolvedResource]) -> list[str]:
        state = self._workspace.state_json()
        schemas = self._workspace.provider_schema()
        blocks = []
        for entry in imported:
            resource = find_resource_state(state, entry.tf_addr)
            if resource is None:
                raise GenerationError(f"{entry.tf_addr} is not in the Terraform state")
            block = find_resource_schema(schemas, entry.tf_type)
            if block is None:
                raise GenerationError(f"no provider schema for resource type {entry.tf_type}")
            blocks.append(
                render_resource(
                    entry.tf_addr,
                    resource.get("values") or {},
                    block,
                    resource.get("sensitive_values"),
                )
            )
        return blocks

    @staticmethod
    def _merged_mapping(
        path: Path, imported: list[ResolvedResource], append: bool
    ) -> dict[str, str]:
        mapping = dict(load_mapping(path)) if append and path.exists() else {}
        mapping.update({e.resource_id: e.tf_addr for e in imported})
        return mapping


def new_meta(cfg: Config, logger: logging.Logger | None = None) -> Meta:
    """Build a :class:`Meta` wired to the Azure API and the terraform CLI."""
    common = cfg.common
    lister: ResourceLister
    if isinstance(cfg, RgConfig):
        if cfg.mock_client:
            lister = MockResourceClient.from_mapping(
                cfg.resource_group_name, cfg.resource_mapping or {}
            )
        else:
            lister = ResourceGroupClient(common.subscription_id)
    else:
        lister = SingleResourceLister(cfg.resource_id, ResourceGroupClient(common.subscription_id))

    workspace = TerraformWorkspace(Path(common.output_dir), common.subscription_id)
    return Meta(cfg, lister, workspace, logger=logger)
