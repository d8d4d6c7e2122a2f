"""Tests for Terraform address resolution."""

from azimport.config import NamePattern
from azimport.models import MappingStatus
from azimport.resmap import ResourceMapping
from azimport.resolver import AddressResolver
from tests.conftest import RG_ID, VM1_ID, VM2_ID, VNET_ID


def test_explicit_mapping_used_verbatim():
    resolver = AddressResolver(
        NamePattern("res-*"), ResourceMapping({VM1_ID: "azurerm_virtual_machine.vm1"})
    )

    assert resolver.resolve(VM1_ID) == ("azurerm_virtual_machine.vm1", MappingStatus.MAPPED)


def test_unmapped_resources_get_increasing_names():
    resolver = AddressResolver(NamePattern("res-*"), ResourceMapping({}))

    results = [resolver.resolve(rid) for rid in (RG_ID, VM1_ID, VM2_ID)]

    assert results == [
        ("res-1", MappingStatus.UNMAPPED),
        ("res-2", MappingStatus.UNMAPPED),
        ("res-3", MappingStatus.UNMAPPED),
    ]


def test_counter_only_advances_on_synthesis():
    resolver = AddressResolver(
        NamePattern("res-"), ResourceMapping({VM1_ID: "azurerm_virtual_machine.vm1"})
    )

    assert resolver.resolve(VM1_ID)[0] == "azurerm_virtual_machine.vm1"
    assert resolver.resolve(VM2_ID)[0] == "res-1"
    assert resolver.resolve(VNET_ID)[0] == "res-2"


def test_synthesized_name_skips_mapped_addresses():
    resolver = AddressResolver(
        NamePattern("azurerm_virtual_machine.vm*"),
        ResourceMapping({VM1_ID: "azurerm_virtual_machine.vm1"}),
    )

    address, status = resolver.resolve(VM2_ID)

    assert address == "azurerm_virtual_machine.vm2"
    assert status == MappingStatus.UNMAPPED


def test_fixed_address_for_single_resource():
    resolver = AddressResolver(fixed_address="azurerm_virtual_machine.main")

    assert resolver.resolve(VM1_ID) == ("azurerm_virtual_machine.main", MappingStatus.MAPPED)


def test_resolution_is_repeatable_across_runs():
    mapping = ResourceMapping({VM2_ID: "azurerm_virtual_machine.vm2"})
    ids = [RG_ID, VM1_ID, VM2_ID, VNET_ID]

    run_a = AddressResolver(NamePattern("res-"), mapping)
    run_b = AddressResolver(NamePattern("res-"), mapping)

    assert [run_a.resolve(rid) for rid in ids] == [run_b.resolve(rid) for rid in ids]


def test_addresses_are_unique():
    resolver = AddressResolver(
        NamePattern("res-*"), ResourceMapping({VM2_ID: "azurerm_virtual_machine.vm2"})
    )
    ids = [f"{RG_ID}/providers/Microsoft.Network/publicIPAddresses/ip{i}" for i in range(20)]

    addresses = [resolver.resolve(rid)[0] for rid in [VM2_ID, *ids]]

    assert len(set(addresses)) == len(addresses)
