"""Assigns Terraform addresses to resource ids."""

from collections.abc import Mapping

from azimport.config import NamePattern
from azimport.models import MappingStatus


class AddressResolver:
    """Resolves each resource id to a unique Terraform address.

    Explicit mapping entries win. In single-resource scope the fixed address
    is used. Anything else gets a name synthesized from the pattern and is
    reported as unmapped, so it is never imported without the operator's say.

    One resolver covers one run: the synthesis counter starts at 1 and only
    moves forward.
    """

    def __init__(
        self,
        pattern: NamePattern | None = None,
        mapping: Mapping[str, str] | None = None,
        fixed_address: str | None = None,
    ):
        self._pattern = pattern or NamePattern()
        self._mapping = mapping or {}
        self._fixed_address = fixed_address
        self._reserved = set(self._mapping.values())
        self._counter = 1

    def resolve(self, resource_id: str) -> tuple[str, MappingStatus]:
        address = self._mapping.get(resource_id)
        if address is not None:
            return address, MappingStatus.MAPPED

        if self._fixed_address is not None:
            return self._fixed_address, MappingStatus.MAPPED

        return self._synthesize(), MappingStatus.UNMAPPED

    def _synthesize(self) -> str:
        while True:
            candidate = self._pattern.render(self._counter)
            self._counter += 1
            if candidate not in self._reserved:
                self._reserved.add(candidate)
                return candidate
