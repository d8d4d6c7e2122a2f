"""Unattended import driver."""

import logging
from dataclasses import dataclass

from azimport.meta import Meta
from azimport.models import ResolvedResource


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a batch run, split by what happened to each resource."""

    imported: list[ResolvedResource]
    skipped: list[ResolvedResource]
    failed: list[ResolvedResource]


def batch_import(
    meta: Meta,
    *,
    continue_on_error: bool = False,
    logger: logging.Logger | None = None,
) -> BatchResult:
    """Import every mapped resource, then generate the configuration.

    Unmapped resources are skipped. The first import failure aborts the run
    (no configuration is generated) unless ``continue_on_error`` is set, in
    which case it is logged and the configuration covers what succeeded.
    """
    logger = logger or logging.getLogger(__name__)

    logger.info("Initialize")
    meta.init()

    logger.info("List resources")
    resources = meta.list_resource()

    logger.info("Import resources")
    for entry in resources:
        if entry.skip():
            logger.warning("No mapping information for resource: %s, skip it", entry.resource_id)
            continue

        logger.info("Importing %s as %s", entry.resource_id, entry.tf_addr)
        meta.import_resource(entry)
        if entry.import_error is not None:
            if not continue_on_error:
                raise entry.import_error
            logger.error("%s", entry.import_error)

    logger.info("Generate Terraform configurations")
    meta.generate_cfg(resources)

    return BatchResult(
        imported=meta.imported(),
        skipped=meta.skipped(),
        failed=meta.failed(),
    )
