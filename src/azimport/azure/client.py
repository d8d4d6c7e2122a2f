"""Thin Azure SDK wrappers that enumerate the resources of a scope."""

import logging
from collections.abc import Iterable

from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential
from azure.mgmt.resource import ResourceManagementClient

logger = logging.getLogger(__name__)


class ResourceGroupClient:
    """Lists the resources of a resource group through the ARM API."""

    def __init__(self, subscription_id: str, credential=None, client_factory=None):
        self.subscription_id = subscription_id
        self._credential = credential
        self._client_factory = client_factory or ResourceManagementClient
        self._client: ResourceManagementClient | None = None

    @property
    def client(self) -> ResourceManagementClient:
        """Lazily built so that constructing the wrapper never touches the network."""
        if self._client is None:
            credential = self._credential or DefaultAzureCredential()
            self._client = self._client_factory(credential, self.subscription_id)
        return self._client

    def check_access(self, resource_group: str) -> None:
        """Fetch the resource group. Raises ``AzureError`` on auth or lookup failure."""
        self.client.resource_groups.get(resource_group)

    def list_resource_ids(self, resource_group: str) -> list[str]:
        """Return the resource group id followed by the id of every resource in it.

        Order is the order the API returns them in.
        """
        group = self.client.resource_groups.get(resource_group)
        ids = [group.id]
        for resource in self.client.resources.list_by_resource_group(resource_group):
            ids.append(resource.id)
        logger.debug("Listed %d resources in %s", len(ids), resource_group)
        return ids


class MockResourceClient:
    """Offline stand-in for :class:`ResourceGroupClient` returning canned ids."""

    def __init__(self, resource_ids: Iterable[str] = ()):
        self._resource_ids = list(resource_ids)

    def check_access(self, resource_group: str) -> None:
        return None

    def list_resource_ids(self, resource_group: str) -> list[str]:
        return list(self._resource_ids)

    @classmethod
    def from_mapping(cls, resource_group: str, resource_ids: Iterable[str]) -> "MockResourceClient":
        """Keep only the ids that live under ``resource_group``, preserving order."""
        return cls(rid for rid in resource_ids if in_resource_group(rid, resource_group))


class SingleResourceLister:
    """Enumeration for single-resource scope: the configured id, nothing else."""

    def __init__(self, resource_id: str, client: ResourceGroupClient | None = None):
        self._resource_id = resource_id
        self._client = client

    def check_access(self, resource_group: str | None = None) -> None:
        if self._client is None:
            return
        api_version = self._api_version()
        self._client.client.resources.get_by_id(self._resource_id, api_version)

    def list_resource_ids(self, resource_group: str | None = None) -> list[str]:
        return [self._resource_id]

    def _api_version(self) -> str:
        """Pick the newest API version the resource's provider offers for its type."""
        namespace, resource_type = provider_and_type(self._resource_id)
        provider = self._client.client.providers.get(namespace)
        for rt in provider.resource_types:
            if rt.resource_type.lower() == resource_type.lower() and rt.api_versions:
                stable = [v for v in rt.api_versions if "preview" not in v.lower()]
                return (stable or rt.api_versions)[0]
        raise AzureError(f"No API version found for {namespace}/{resource_type}")


def in_resource_group(resource_id: str, resource_group: str) -> bool:
    """Whether ``resource_id`` is the group itself or lives inside it (case-insensitive)."""
    marker = f"/resourcegroups/{resource_group.lower()}"
    lowered = resource_id.lower()
    idx = lowered.find(marker)
    if idx < 0:
        return False
    rest = lowered[idx + len(marker) :]
    return rest == "" or rest.startswith("/")


def provider_and_type(resource_id: str) -> tuple[str, str]:
    """Split an ARM id into its provider namespace and (nested) resource type.

    ``/subscriptions/s/resourceGroups/rg`` maps to
    ``("Microsoft.Resources", "resourceGroups")``.
    """
    parts = [p for p in resource_id.split("/") if p]
    lowered = [p.lower() for p in parts]
    if "providers" not in lowered:
        return "Microsoft.Resources", "resourceGroups"
    idx = len(lowered) - 1 - lowered[::-1].index("providers")
    namespace = parts[idx + 1]
    # type segments alternate with names after the namespace
    type_segments = parts[idx + 2 :: 2]
    return namespace, "/".join(type_segments)
