"""Shared test fixtures."""

import re
from unittest.mock import MagicMock

import pytest

from azimport.config import CommonConfig, NamePattern, ResConfig, RgConfig
from azimport.meta import Meta
from azimport.resmap import ResourceMapping

SUBSCRIPTION_ID = "00000000-0000-0000-0000-000000000000"
RG_ID = f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/rg"
VM1_ID = f"{RG_ID}/providers/Microsoft.Compute/virtualMachines/vm1"
VM2_ID = f"{RG_ID}/providers/Microsoft.Compute/virtualMachines/vm2"
VNET_ID = f"{RG_ID}/providers/Microsoft.Network/virtualNetworks/vnet1"


def make_rg_config(
    output_dir=".",
    mapping=None,
    pattern="res-*",
    batch_mode=True,
    continue_on_error=False,
    **common,
) -> RgConfig:
    return RgConfig(
        common=CommonConfig(
            subscription_id=SUBSCRIPTION_ID,
            output_dir=str(output_dir),
            batch_mode=batch_mode,
            continue_on_error=continue_on_error,
            **common,
        ),
        resource_group_name="rg",
        resource_name_pattern=NamePattern(pattern),
        resource_mapping=ResourceMapping(mapping) if mapping is not None else None,
    )


def make_res_config(output_dir=".", resource_id=VM1_ID, name="azurerm_virtual_machine.vm1"):
    return ResConfig(
        common=CommonConfig(subscription_id=SUBSCRIPTION_ID, output_dir=str(output_dir)),
        resource_id=resource_id,
        resource_name=name,
    )


VM_SCHEMA = {
    "attributes": {
        "id": {"type": "string", "computed": True},
        "name": {"type": "string", "required": True},
        "location": {"type": "string", "required": True},
        "vm_id": {"type": "string", "computed": True},
        "admin_password": {"type": "string", "optional": True, "sensitive": True},
        "tags": {"type": ["map", "string"], "optional": True},
    },
    "block_types": {
        "timeouts": {
            "nesting_mode": "single",
            "block": {"attributes": {"create": {"type": "string", "optional": True}}},
        },
    },
}

SCHEMA = {
    "format_version": "1.0",
    "provider_schemas": {
        "registry.terraform.io/hashicorp/azurerm": {
            "resource_schemas": {
                "azurerm_virtual_machine": {"version": 0, "block": VM_SCHEMA},
                "azurerm_virtual_network": {"version": 0, "block": VM_SCHEMA},
            }
        }
    },
}


def state_resource(address, resource_id):
    tf_type, _, tf_name = address.partition(".")
    return {
        "address": address,
        "mode": "managed",
        "type": tf_type,
        "name": tf_name,
        "values": {
            "id": resource_id,
            "name": resource_id.rsplit("/", 1)[-1],
            "location": "westeurope",
            "vm_id": "8d1f2a6e-0b4c-4c1a-9f00-2f6a1c0e5b11",
            "admin_password": "hunter2",
            "tags": {},
            "timeouts": None,
        },
        "sensitive_values": {"admin_password": True},
    }


def _state_of(ws):
    resources = [state_resource(*c.args) for c in ws.bind.call_args_list]
    return {"format_version": "1.0", "values": {"root_module": {"resources": resources}}}


def emitted_addresses(workspace):
    """Addresses of the resource blocks passed to ``write_config``."""
    blocks = workspace.write_config.call_args.args[0]
    return [
        ".".join(m)
        for block in blocks
        for m in re.findall(r'^resource "([^"]+)" "([^"]+)"', block, re.M)
    ]


@pytest.fixture
def workspace(tmp_path):
    """A terraform workspace stand-in rooted at a real temporary directory."""
    ws = MagicMock()
    ws.workdir = tmp_path / "out"
    ws.state_json.side_effect = lambda: _state_of(ws)
    ws.provider_schema.return_value = SCHEMA
    return ws


@pytest.fixture
def lister():
    mock = MagicMock()
    mock.list_resource_ids.return_value = [VM1_ID, VM2_ID]
    return mock


@pytest.fixture
def scenario_meta(tmp_path, workspace, lister):
    """vm1 is mapped, vm2 is not; imports fail only when told to."""
    cfg = make_rg_config(
        output_dir=tmp_path / "out",
        mapping={VM1_ID: "azurerm_virtual_machine.vm1"},
    )
    return Meta(cfg, lister, workspace)
