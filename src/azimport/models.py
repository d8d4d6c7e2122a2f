"""Core data models for an import run."""

from dataclasses import dataclass, field
from enum import StrEnum


class Scope(StrEnum):
    """Which kind of target a run covers."""

    RESOURCE_GROUP = "resource_group"
    RESOURCE = "resource"


class MappingStatus(StrEnum):
    """Whether a resource has a confirmed Terraform address."""

    MAPPED = "MAPPED"
    UNMAPPED = "UNMAPPED"


class ImportStatus(StrEnum):
    """Outcome of the import step for a single resource."""

    PENDING = "PENDING"
    IMPORTED = "IMPORTED"
    FAILED = "FAILED"


class RunState(StrEnum):
    """Lifecycle of the import orchestrator."""

    CREATED = "CREATED"
    INITIALIZED = "INITIALIZED"
    LISTED = "LISTED"
    IMPORTING = "IMPORTING"
    GENERATED = "GENERATED"


_IMMUTABLE_FIELDS = frozenset({"resource_id", "tf_addr", "mapping_status"})


@dataclass(eq=False)
class ResolvedResource:
    """One discovered Azure resource and its Terraform address.

    The id and its resolution are fixed at construction. The import outcome
    is recorded at most once through :meth:`record_success` or :meth:`record_failure`.
    """

    resource_id: str
    tf_addr: str
    mapping_status: MappingStatus
    import_status: ImportStatus = field(default=ImportStatus.PENDING, init=False)
    import_error: Exception | None = field(default=None, init=False)

    def __setattr__(self, name, value):
        if name in _IMMUTABLE_FIELDS and name in self.__dict__:
            raise AttributeError(f"{name} cannot be changed once set")
        super().__setattr__(name, value)

    def skip(self) -> bool:
        """Unmapped resources are never imported, even with a synthesized address."""
        return self.mapping_status == MappingStatus.UNMAPPED

    @property
    def tf_type(self) -> str:
        return self.tf_addr.partition(".")[0]

    @property
    def tf_name(self) -> str:
        return self.tf_addr.partition(".")[2]

    def record_success(self) -> None:
        self._record(ImportStatus.IMPORTED, None)

    def record_failure(self, error: Exception) -> None:
        self._record(ImportStatus.FAILED, error)

    def _record(self, status: ImportStatus, error: Exception | None) -> None:
        if self.import_status != ImportStatus.PENDING:
            raise RuntimeError(f"import outcome for {self.resource_id} is already recorded")
        self.import_status = status
        self.import_error = error
