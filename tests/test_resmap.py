"""Tests for the resource mapping file."""

import json

import pytest

from azimport.errors import ConfigValidationError
from azimport.resmap import ResourceMapping, dump_mapping, is_valid_address, load_mapping
from tests.conftest import VM1_ID, VM2_ID


@pytest.mark.parametrize(
    "address,valid",
    [
        ("azurerm_virtual_machine.vm1", True),
        ("azurerm_resource_group.my-rg", True),
        ("res-1", False),
        ("azurerm_virtual_machine.", False),
        (".vm1", False),
        ("a.b.c", False),
    ],
)
def test_is_valid_address(address, valid):
    assert is_valid_address(address) is valid


def test_load_mapping(tmp_path):
    path = tmp_path / "mapping.json"
    path.write_text(json.dumps({VM1_ID: "azurerm_virtual_machine.vm1"}))

    mapping = load_mapping(path)

    assert mapping[VM1_ID] == "azurerm_virtual_machine.vm1"
    assert list(mapping) == [VM1_ID]
    assert len(mapping) == 1


def test_lookup_ignores_case():
    mapping = ResourceMapping({VM1_ID: "azurerm_virtual_machine.vm1"})

    assert mapping.get(VM1_ID.upper()) == "azurerm_virtual_machine.vm1"
    assert VM1_ID.lower() in mapping
    assert VM2_ID not in mapping


def test_duplicate_address_rejected():
    with pytest.raises(ConfigValidationError, match="used by both"):
        ResourceMapping(
            {
                VM1_ID: "azurerm_virtual_machine.vm",
                VM2_ID: "azurerm_virtual_machine.vm",
            }
        )


def test_duplicate_id_differing_in_case_rejected():
    with pytest.raises(ConfigValidationError, match="mapped more than once"):
        ResourceMapping(
            {
                VM1_ID: "azurerm_virtual_machine.a",
                VM1_ID.upper(): "azurerm_virtual_machine.b",
            }
        )


def test_malformed_address_rejected():
    with pytest.raises(ConfigValidationError, match="Invalid Terraform address"):
        ResourceMapping({VM1_ID: "vm1"})


def test_non_object_file_rejected(tmp_path):
    path = tmp_path / "mapping.json"
    path.write_text(json.dumps([VM1_ID]))

    with pytest.raises(ConfigValidationError, match="JSON object"):
        load_mapping(path)


def test_invalid_json_rejected(tmp_path):
    path = tmp_path / "mapping.json"
    path.write_text("{not json")

    with pytest.raises(ConfigValidationError, match="Parsing mapping file"):
        load_mapping(path)


def test_undecodable_file_rejected(tmp_path):
    path = tmp_path / "mapping.json"
    path.write_bytes(b"\xff\xfe{}")

    with pytest.raises(ConfigValidationError, match="Parsing mapping file"):
        load_mapping(path)


def test_missing_file_rejected(tmp_path):
    with pytest.raises(ConfigValidationError, match="Reading mapping file"):
        load_mapping(tmp_path / "missing.json")


def test_dump_then_load(tmp_path):
    path = tmp_path / "mapping.json"
    dump_mapping({VM1_ID: "azurerm_virtual_machine.vm1"}, path)

    assert dict(load_mapping(path)) == {VM1_ID: "azurerm_virtual_machine.vm1"}
