"""CLI entrypoint for azimport."""

import sys
from dataclasses import replace

import click

from azimport.azure.subscription import resolve_subscription_id
from azimport.batch import batch_import
from azimport.config import (
    DEFAULT_PATTERN,
    CommonConfig,
    Config,
    NamePattern,
    ResConfig,
    RgConfig,
    validate_config,
)
from azimport.errors import AzImportError
from azimport.formatter import format_summary, format_table
from azimport.interactive import interactive_import
from azimport.log import run_logger
from azimport.meta import new_meta
from azimport.resmap import load_mapping

_COMMON_OPTIONS = [
    click.option("-s", "--subscription-id", default=None, help="The subscription id."),
    click.option(
        "-o",
        "--output-dir",
        default=".",
        type=click.Path(file_okay=False),
        help="Output directory. Defaults to the current working directory.",
    ),
    click.option(
        "-f",
        "--overwrite",
        is_flag=True,
        help="Clear the output directory if it is not empty. Use with caution.",
    ),
    click.option(
        "--append",
        is_flag=True,
        help="Keep existing files and state in the output directory and add to them.",
    ),
    click.option("-b", "--batch", "batch_mode", is_flag=True, help="Batch (non-interactive) mode."),
    click.option(
        "-k",
        "--continue",
        "continue_on_error",
        is_flag=True,
        help="Continue on import error (batch mode only).",
    ),
    click.option(
        "--backend-type",
        default="local",
        show_default=True,
        help="The Terraform backend used to store the state.",
    ),
    click.option(
        "--backend-config",
        multiple=True,
        help="Terraform backend config as KEY=VALUE. May be repeated.",
    ),
    click.option(
        "--dev-provider",
        is_flag=True,
        envvar="AZIMPORT_DEV_PROVIDER",
        help="Do not pin the azurerm provider version (for a locally built provider).",
    ),
    click.option(
        "--logfile",
        default=None,
        envvar="AZIMPORT_LOGFILE",
        type=click.Path(dir_okay=False),
        help="Append batch mode logs to this file instead of stderr.",
    ),
]


def common_options(func):
    for option in reversed(_COMMON_OPTIONS):
        func = option(func)
    return func


def _common_config(
    subscription_id,
    output_dir,
    overwrite,
    append,
    batch_mode,
    continue_on_error,
    backend_type,
    backend_config,
    dev_provider,
    logfile,
) -> CommonConfig:
    return CommonConfig(
        subscription_id=subscription_id or "",
        output_dir=output_dir,
        overwrite=overwrite,
        append=append,
        batch_mode=batch_mode,
        continue_on_error=continue_on_error,
        backend_type=backend_type,
        backend_config=tuple(backend_config),
        dev_provider=dev_provider,
        logfile=logfile,
    )


def _with_subscription(cfg: Config) -> Config:
    """Validate the flags, then fill in the subscription id when it was not given."""
    cfg.validate(require_subscription=False)
    subscription_id = resolve_subscription_id(cfg.common.subscription_id or None)
    common = replace(cfg.common, subscription_id=subscription_id)
    return validate_config(replace(cfg, common=common))


def _run(cfg: Config) -> None:
    cfg = _with_subscription(cfg)
    common = cfg.common

    if not common.batch_mode:
        interactive_import(new_meta(cfg))
        return

    with run_logger(common.logfile) as logger:
        meta = new_meta(cfg, logger=logger)
        try:
            batch_import(meta, continue_on_error=common.continue_on_error, logger=logger)
        finally:
            if meta.resources:
                click.echo(format_table(meta.resources, title="Import result"))
                click.echo(format_summary(meta.resources))


@click.group()
@click.version_option(package_name="azimport")
def main():
    """Import existing Azure resources into Terraform state and configuration."""


@main.command("resource-group")
@click.argument("resource_group")
@click.option(
    "-m",
    "--mapping-file",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file mapping resource ids to Terraform addresses. Required in batch mode.",
)
@click.option(
    "-p",
    "--pattern",
    default=DEFAULT_PATTERN,
    show_default=True,
    help="Name pattern for resources without a mapping. An incrementing integer replaces "
    'the "*" in the pattern, or is appended when there is none.',
)
@click.option(
    "--mock-client",
    is_flag=True,
    envvar="AZIMPORT_MOCK_CLIENT",
    hidden=True,
    help="List resources from the mapping file instead of calling Azure.",
)
@common_options
def resource_group(resource_group, mapping_file, pattern, mock_client, **common):
    """Import every resource in RESOURCE_GROUP."""
    try:
        cfg = RgConfig(
            common=_common_config(**common),
            resource_group_name=resource_group,
            resource_name_pattern=NamePattern(pattern),
            resource_mapping=load_mapping(mapping_file) if mapping_file else None,
            mock_client=mock_client,
        )
        _run(cfg)
    except AzImportError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("resource")
@click.argument("resource_id")
@click.option(
    "-n",
    "--name",
    "resource_name",
    required=True,
    help="Terraform address for the resource, e.g. azurerm_resource_group.main.",
)
@common_options
def resource(resource_id, resource_name, **common):
    """Import the single resource RESOURCE_ID."""
    try:
        cfg = ResConfig(
            common=_common_config(**common),
            resource_id=resource_id,
            resource_name=resource_name,
        )
        _run(cfg)
    except AzImportError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
