"""Human-readable views of the resource registry."""

from rich.console import Console
from rich.table import Table

from azimport.models import ImportStatus, ResolvedResource

STATUS_STYLES = {
    "IMPORTED": "green",
    "FAILED": "bold red",
    "PENDING": "dim",
    "SKIPPED": "yellow",
}


def resource_status(entry: ResolvedResource) -> str:
    if entry.skip():
        return "SKIPPED"
    return entry.import_status.value


def format_table(resources: list[ResolvedResource], title: str = "Resources") -> str:
    """Render the registry as a Rich table, returned as a string."""
    if not resources:
        return "No resources found."

    console = Console(record=True, width=120)
    table = Table(title=title)
    table.add_column("Resource ID", overflow="fold")
    table.add_column("Terraform Address", no_wrap=True)
    table.add_column("Status", no_wrap=True)

    for entry in resources:
        status = resource_status(entry)
        style = STATUS_STYLES.get(status, "")
        table.add_row(entry.resource_id, entry.tf_addr, f"[{style}]{status}[/{style}]")

    console.print(table)
    return console.export_text()


def format_summary(resources: list[ResolvedResource]) -> str:
    """One-line tally of the run outcome."""
    imported = sum(1 for r in resources if r.import_status == ImportStatus.IMPORTED)
    failed = sum(1 for r in resources if r.import_status == ImportStatus.FAILED)
    skipped = sum(1 for r in resources if r.skip())
    return (
        f"{len(resources)} resources: {imported} imported, "
        f"{failed} failed, {skipped} skipped"
    )
