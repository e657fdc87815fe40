"""Remote log access"""

import sys

import click

from ..utils.output import console, print_error, render_log_line
from ...api.exceptions import DeploySyncError
from ...constants import DEFAULT_LOG_FILE, DEFAULT_TAIL_LINES, LARGE_LOG_WARNING_SIZE
from ...services.logs_service import LogsService
from ...transport.factory import create_transport
from ...utils.async_utils import run_async
from ...utils.file_utils import format_size


async def _tail(service: LogsService, path: str, lines: int) -> None:
    async with service.transport:
        tail_lines, _ = await service.tail(path, lines)
        if not tail_lines:
            console.print("[dim]Log file has no text payload.[/dim]")
        for line in tail_lines:
            render_log_line(line)


async def _watch(service: LogsService, path: str, lines: int) -> None:
    async with service.transport:
        async for line in service.follow(path, lines):
            render_log_line(line)


async def _download(service: LogsService, path: str) -> None:
    async with service.transport:
        size = await service.size(path)

        if size > LARGE_LOG_WARNING_SIZE:
            console.print(f"[yellow]The remote log file is large: {format_size(size)}[/yellow]")
            if not click.confirm("Download it anyway?", default=False):
                console.print("Download cancelled.")
                return
        else:
            console.print(f"Downloading remote log file ({format_size(size)})...")

        target = await service.download(path)
        console.print(f"[green]✓[/green] Saved to [cyan]{target}[/cyan]")


@click.command()
@click.option('--env', 'env_name', default='default', show_default=True,
              help='Environment to read logs from')
@click.option('--path', 'log_path', default=DEFAULT_LOG_FILE, show_default=True,
              help='Log file relative to storage/logs/')
@click.option('--tail', 'lines', default=DEFAULT_TAIL_LINES, show_default=True,
              type=click.IntRange(min=1), help='Number of lines to show from the end')
@click.option('--watch', is_flag=True, help='Keep polling for new entries')
@click.option('--download', is_flag=True, help='Download the whole log file')
@click.pass_context
def logs(ctx, env_name, log_path, lines, watch, download):
    """Tail, watch or download a remote log file

    Examples:

        deploy-sync logs --env production --tail 50

        deploy-sync logs --env production --watch

        deploy-sync logs --env production --path worker.log --download
    """
    try:
        env_config = ctx.obj.environment(env_name)
        if env_config.transport is None:
            print_error(f"No transport configured for environment {env_name}")
            sys.exit(1)

        service = LogsService(create_transport(env_config.transport), ctx.obj.project_root)

        if download:
            run_async(_download(service, log_path))
        elif watch:
            console.print(f"Watching [cyan]{log_path}[/cyan] (Ctrl+C to stop)...")
            run_async(_watch(service, log_path, lines))
        else:
            run_async(_tail(service, log_path, lines))

    except DeploySyncError as e:
        print_error(e)
        sys.exit(1)
