"""Render Terraform configuration from imported state and the provider schema."""

import re
from typing import Any

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

# Present in every azurerm resource schema but never part of a written config.
TOP_LEVEL_ATTRIBUTES_SKIPPED = {"id"}
TOP_LEVEL_BLOCKS_SKIPPED = {"timeouts"}


def hcl_string(value: str) -> str:
    """Escape and quote a string for HCL, including template sequences."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("${", "$${")
        .replace("%{", "%%{")
    )
    return f'"{escaped}"'


def hcl_key(key: str) -> str:
    return key if IDENTIFIER.match(key) else hcl_string(key)


def hcl_value(value: Any, indent: int = 2) -> str:
    """Convert a JSON-decoded state value to its HCL form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return hcl_string(value)
    if isinstance(value, list):
        return "[" + ", ".join(hcl_value(v, indent) for v in value) + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        pad = " " * (indent + 2)
        lines = [f"{pad}{hcl_key(k)} = {hcl_value(v, indent + 2)}" for k, v in value.items()]
        return "{\n" + "\n".join(lines) + "\n" + " " * indent + "}"
    if value is None:
        return "null"
    return hcl_string(str(value))


def is_settable(attribute: dict) -> bool:
    """Computed-only and deprecated attributes cannot go into a config."""
    if attribute.get("deprecated"):
        return False
    return bool(attribute.get("required") or attribute.get("optional"))


def _sensitive_child(sensitive: Any, name: str) -> Any:
    if isinstance(sensitive, dict):
        return sensitive.get(name)
    return None


def _sensitive_item(sensitive: Any, index: int) -> Any:
    if isinstance(sensitive, list) and index < len(sensitive):
        return sensitive[index]
    return None


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, dict)) and not value)


def render_body(
    values: dict,
    block: dict,
    sensitive: Any = None,
    indent: int = 2,
    top_level: bool = False,
) -> list[str]:
    """Render the attributes and nested blocks of one block body."""
    pad = " " * indent
    lines = []

    for name, attribute in sorted(block.get("attributes", {}).items()):
        if top_level and name in TOP_LEVEL_ATTRIBUTES_SKIPPED:
            continue
        if not is_settable(attribute) or attribute.get("sensitive"):
            continue
        if _sensitive_child(sensitive, name) is True:
            continue
        value = values.get(name)
        if _is_empty(value) and not attribute.get("required"):
            continue
        lines.append(f"{pad}{name} = {hcl_value(value, indent)}")

    for name, block_type in sorted(block.get("block_types", {}).items()):
        if top_level and name in TOP_LEVEL_BLOCKS_SKIPPED:
            continue
        value = values.get(name)
        if _is_empty(value):
            continue
        nested = block_type.get("block", {})
        child_sensitive = _sensitive_child(sensitive, name)
        mode = block_type.get("nesting_mode", "list")

        if mode in ("single", "group"):
            labelled = [(None, value, child_sensitive)]
        elif mode == "map":
            labelled = [
                (label, item, _sensitive_child(child_sensitive, label))
                for label, item in value.items()
            ]
        else:
            labelled = [
                (None, item, _sensitive_item(child_sensitive, i)) for i, item in enumerate(value)
            ]

        for label, item, item_sensitive in labelled:
            if label is None:
                lines.append(f"{pad}{name} {{")
            else:
                lines.append(f"{pad}{name} {hcl_string(label)} {{")
            lines.extend(render_body(item or {}, nested, item_sensitive, indent + 2))
            lines.append(f"{pad}}}")

    return lines


def render_resource(address: str, values: dict, block: dict, sensitive: Any = None) -> str:
    """Render a single resource block for ``address``."""
    tf_type, _, tf_name = address.partition(".")
    lines = [f'resource "{tf_type}" "{tf_name}" {{']
    lines.extend(render_body(values, block, sensitive, top_level=True))
    lines.append("}")
    return "\n".join(lines) + "\n"


def find_resource_state(state: dict, address: str) -> dict | None:
    """Locate a managed root-module resource in ``terraform show -json`` output."""
    resources = state.get("values", {}).get("root_module", {}).get("resources", [])
    for resource in resources:
        if resource.get("address") == address and resource.get("mode", "managed") == "managed":
            return resource
    return None


def find_resource_schema(schemas: dict, tf_type: str) -> dict | None:
    """Locate the block schema of ``tf_type`` in ``terraform providers schema -json`` output."""
    for provider in schemas.get("provider_schemas", {}).values():
        resource_schema = provider.get("resource_schemas", {}).get(tf_type)
        if resource_schema is not None:
            return resource_schema.get("block", {})
    return None
