# deploy_sync/cli/utils/output.py
"""Output formatting utilities"""

from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from ...constants import EMOJI_ERROR, EMOJI_SUCCESS, EMOJI_WARNING
from ...models import (
    CommandResult,
    DeleteReport,
    DeploymentMetadata,
    DeploymentResult,
    DeployReport,
    PackResult,
)
from ...utils.file_utils import format_size

console = Console()

# Maximum output lines shown under a command
COMMAND_OUTPUT_PREVIEW = 3


def print_header(title: str) -> None:
    console.print(Panel(f"[bold]{title}[/bold]", border_style="blue", box=box.HEAVY))


def print_step(title: str) -> None:
    console.print(f"\n[yellow]▸[/yellow] [bold]{title}[/bold]")


def print_error(message: Any, label: str = "Error") -> None:
    console.print(f"[red]{label}:[/red] {escape(str(message))}")


def create_pack_progress() -> Progress:
    """Progress display for packaging"""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def format_changes(changes: Dict[str, Any]) -> None:
    """Display the detected change set summary"""
    table = Table(show_header=False, box=box.SIMPLE)
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Detection method", changes.get("method", "-"))
    table.add_row("Git available", "Yes" if changes.get("vcs_available") else "No")
    table.add_row("Added", f"[green]{changes.get('added', 0)}[/green]")
    table.add_row("Modified", f"[yellow]{changes.get('modified', 0)}[/yellow]")
    table.add_row("Deleted", f"[red]{changes.get('deleted', 0)}[/red]")
    table.add_row("Vendor included", "Yes" if changes.get("include_vendor") else "No")
    if changes.get("include_bootstrap"):
        table.add_row("Bootstrap dirs", "Yes")

    console.print(table)


def format_pack_result(pack: PackResult) -> None:
    console.print(
        f"   [green]{EMOJI_SUCCESS}[/green] {pack.metadata.deployment_type.capitalize()} package: "
        f"[cyan]{pack.files_added}[/cyan] entries, [cyan]{format_size(pack.archive_size)}[/cyan] "
        f"[dim]({pack.duration}s)[/dim]"
    )
    if pack.files_skipped:
        console.print(f"   [yellow]{EMOJI_WARNING}[/yellow] {len(pack.files_skipped)} missing file(s) skipped")


def format_delete_report(title: str, report: Optional[DeleteReport]) -> None:
    if report is None:
        return

    console.print(f"   {title}: [cyan]{report.message}[/cyan]")
    for failed in report.failed:
        console.print(f"     [red]{EMOJI_ERROR} {escape(str(failed))}[/red]")
    for skipped in report.skipped:
        console.print(f"     [dim]skipped {escape(str(skipped))}[/dim]")


def format_remote_result(result: DeploymentResult) -> None:
    """Display the extraction part of a receiver response"""
    extraction = result.extraction
    icon = f"[green]{EMOJI_SUCCESS}[/green]" if extraction.success else f"[red]{EMOJI_ERROR}[/red]"
    console.print(f"   {icon} {escape(extraction.message)}")

    if extraction.files_total:
        console.print(
            f"     [dim]{extraction.files_extracted}/{extraction.files_total} entries, "
            f"{extraction.errors_count} error(s), {extraction.duration_seconds}s, "
            f"type {extraction.deployment_type}[/dim]"
        )

    format_delete_report("Requested deletions", result.deletions)
    format_delete_report("Reconciled deletions", result.auto_deletions)


def format_command_result(result: CommandResult, preview: Optional[int] = COMMAND_OUTPUT_PREVIEW) -> None:
    """Display one command outcome with a short output preview"""
    icon = f"[green]{EMOJI_SUCCESS}[/green]" if result.success else f"[red]{EMOJI_ERROR}[/red]"
    console.print(f"   {icon} {result.command} [dim]({result.duration_ms}ms)[/dim]")

    if not result.success and result.error:
        console.print(f"     [red]Error: {escape(result.error)}[/red]")

    lines = [line for line in result.output.splitlines() if line.strip()]
    shown = lines if preview is None else lines[:preview]
    for line in shown:
        console.print(f"     [dim]{escape(line)}[/dim]", highlight=False)
    if len(lines) > len(shown):
        console.print(f"     [dim]... +{len(lines) - len(shown)} more lines[/dim]")


def format_deploy_report(report: DeployReport) -> None:
    """Display the final deployment summary"""
    if report.success:
        lines = [
            f"[green]{EMOJI_SUCCESS}[/green] Deployment to [bold]{report.environment}[/bold] completed",
            "",
            f"[bold]Total time:[/bold] {report.duration}s",
        ]
        if report.commands:
            failed = len(report.failed_commands)
            lines.append(f"[bold]Commands:[/bold] {len(report.commands) - failed} ok, {failed} failed")

        border = "yellow" if report.failed_commands else "green"
        console.print(Panel("\n".join(lines), title="Deploy Result", border_style=border))
    else:
        lines = [f"[red]{EMOJI_ERROR} Deployment failed:[/red] {escape(str(report.error))}"]
        if report.error_code:
            lines.append(f"[dim]Error code: {report.error_code}[/dim]")
        console.print(Panel("\n".join(lines), title="Deploy Error", border_style="red"))


def format_metadata(environment: str, metadata: Optional[DeploymentMetadata]) -> None:
    """Display the last deployment recorded on an environment"""
    if metadata is None:
        console.print(Panel(
            f"[yellow]{EMOJI_WARNING}[/yellow] No deployment recorded on [bold]{environment}[/bold]",
            title="Remote Status",
            border_style="yellow"
        ))
        return

    table = Table(title=f"Remote Status: {environment}", box=box.ROUNDED)
    table.add_column("Property", style="bold")
    table.add_column("Value")

    table.add_row("Deployed at", metadata.deployed_at)
    table.add_row("Type", metadata.deployment_type)
    if metadata.method:
        table.add_row("Method", metadata.method)
    table.add_row("Files deployed", str(metadata.deployed_files_count))
    table.add_row("Files deleted", str(len(metadata.deleted_files)))

    if metadata.vcs.available:
        table.add_row("Branch", metadata.vcs.branch or "-")
        table.add_row("Commit", (metadata.vcs.commit_hash or "-")[:12])
    else:
        table.add_row("Git", "not recorded")

    if metadata.dependencies:
        table.add_row("Vendor included", "Yes" if metadata.dependencies.vendor_included else "No")
    if metadata.files is not None:
        table.add_row("Tracked files", str(len(metadata.files)))

    console.print(table)


def render_log_line(line: str) -> None:
    """Print a log line colored by severity"""
    if "ERROR" in line:
        style = "red"
    elif "WARNING" in line:
        style = "yellow"
    elif "INFO" in line:
        style = "cyan"
    else:
        style = None
    console.print(line, style=style, markup=False, highlight=False)
