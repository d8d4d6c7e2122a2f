"""Step-by-step import driver for terminal sessions."""

import click

from azimport.formatter import format_summary, format_table
from azimport.meta import Meta
from azimport.models import ResolvedResource


def interactive_import(
    meta: Meta, *, confirm=click.confirm, echo=click.echo
) -> list[ResolvedResource]:
    """Walk through the run, asking before each import and before generation.

    A failed import is reported and the walk carries on; the operator decides
    at the end whether the configuration is written.
    """
    echo("Initializing...")
    meta.init()

    resources = meta.list_resource()
    echo(format_table(resources, title="Discovered resources"))

    for entry in resources:
        if entry.skip():
            echo(f"Skipping {entry.resource_id}: no mapping ({entry.tf_addr})")
            continue
        if not confirm(f"Import {entry.resource_id} as {entry.tf_addr}?", default=True):
            continue

        meta.import_resource(entry)
        if entry.import_error is not None:
            echo(f"Error: {entry.import_error}", err=True)
        else:
            echo(f"Imported {entry.tf_addr}")

    if meta.imported() and confirm("Generate Terraform configuration?", default=True):
        meta.generate_cfg(resources)
        echo(f"Terraform configuration written to {meta.config.common.output_dir}")

    echo(format_table(resources, title="Import result"))
    echo(format_summary(resources))
    return resources
