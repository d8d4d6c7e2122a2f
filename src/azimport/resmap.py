"""Resource mapping file: Azure resource id -> Terraform address."""

import json
import re
from collections.abc import Iterator, Mapping
from pathlib import Path

from azimport.errors import ConfigValidationError

ADDRESS_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*\.[A-Za-z_][A-Za-z0-9_-]*$")


def is_valid_address(address: str) -> bool:
    """Check that ``address`` has the ``<type>.<name>`` shape."""
    return bool(ADDRESS_PATTERN.match(address))


class ResourceMapping(Mapping[str, str]):
    """Read-only id -> address mapping.

    Azure resource ids are case-insensitive, so lookups ignore case while
    iteration yields the ids as written in the file.
    """

    def __init__(self, entries: Mapping[str, str] | None = None):
        self._entries: dict[str, str] = {}
        self._keys: dict[str, str] = {}
        seen: dict[str, str] = {}
        for resource_id, address in (entries or {}).items():
            if not isinstance(resource_id, str) or not isinstance(address, str):
                raise ConfigValidationError(
                    f"Invalid mapping entry {resource_id!r}: keys and values must be strings"
                )
            if not is_valid_address(address):
                raise ConfigValidationError(
                    f"Invalid Terraform address {address!r} for {resource_id} "
                    "(expected '<resource type>.<name>')"
                )
            key = resource_id.lower()
            if key in self._entries:
                raise ConfigValidationError(f"Resource {resource_id} is mapped more than once")
            if address in seen:
                raise ConfigValidationError(
                    f"Address {address!r} is used by both {seen[address]} and {resource_id}"
                )
            seen[address] = resource_id
            self._entries[key] = address
            self._keys[key] = resource_id

    def __getitem__(self, resource_id: str) -> str:
        return self._entries[resource_id.lower()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys.values())

    def __len__(self) -> int:
        return len(self._entries)

    def addresses(self) -> set[str]:
        return set(self._entries.values())


def load_mapping(path: str | Path) -> ResourceMapping:
    """Load a mapping file. The file holds a single JSON object."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigValidationError(f"Reading mapping file {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigValidationError(f"Parsing mapping file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigValidationError(f"Mapping file {path} must contain a JSON object")

    return ResourceMapping(data)


def dump_mapping(mapping: Mapping[str, str], path: str | Path) -> None:
    """Write ``mapping`` in the format :func:`load_mapping` reads."""
    Path(path).write_text(json.dumps(dict(mapping), indent=2) + "\n")
