"""Deploy command implementation"""

import sys
from pathlib import Path

import click

from ..utils.output import (
    console,
    create_pack_progress,
    format_changes,
    format_command_result,
    format_deploy_report,
    format_pack_result,
    format_remote_result,
    print_error,
    print_header,
    print_step,
)
from ...api.exceptions import AuthError, DeploySyncError
from ...constants import DEFAULT_ZIP_NAME, EMOJI_PACKAGE, EMOJI_ROCKET
from ...services.deploy_service import DeployOptions, DeployService
from ...utils.async_utils import run_async


@click.command()
@click.option('--env', 'env_name', default='default', show_default=True,
              help='Target environment')
@click.option('--full', is_flag=True, help='Force full deployment (ignore incremental)')
@click.option('--init', is_flag=True,
              help='First-time deployment: full package with storage directories, no commands')
@click.option('--skip-upload', is_flag=True, help='Skip the transport upload')
@click.option('--zipname', default=DEFAULT_ZIP_NAME, show_default=True,
              help='Name of the deployment package')
@click.option('--delete', 'delete', multiple=True,
              help='File or folder to delete on the server (repeatable)')
@click.option('--dry-run', is_flag=True, help='Only show what would be deployed')
@click.option('--output-dir', type=click.Path(file_okay=False, path_type=Path),
              help='Keep the built package in this directory')
@click.pass_context
def deploy(ctx, env_name, full, init, skip_upload, zipname, delete, dry_run, output_dir):
    """Deploy the project to an environment

    The previous deployment's metadata decides what changed (git diff when
    enabled, file hashes otherwise). The package is uploaded, extracted by
    the receiver, and each post-deploy command runs as its own request.

    Examples:

        # Incremental deployment
        deploy-sync deploy --env production

        # First deployment of a fresh server
        deploy-sync deploy --env production --init

        # Remove stale files while deploying
        deploy-sync deploy --delete public/old.js --delete storage/tmp
    """
    try:
        env_config = ctx.obj.environment(env_name)
        config = ctx.obj.config

        title = "INITIAL DEPLOYMENT" if init else "DEPLOYMENT"
        print_header(f"{EMOJI_ROCKET} {title} TO {env_name.upper()}")

        if output_dir:
            output_dir.mkdir(parents=True, exist_ok=True)

        options = DeployOptions(
            full=full,
            init=init,
            skip_upload=skip_upload,
            dry_run=dry_run,
            zipname=zipname,
            delete=list(delete),
            output_dir=output_dir
        )
        service = DeployService(config, env_config, ctx.obj.project_root)

        with create_pack_progress() as progress:
            task = progress.add_task("Packaging", total=None)

            def on_progress(done: int, total: int) -> None:
                progress.update(task, completed=done, total=total)

            report = run_async(service.deploy(options, on_progress=on_progress))

    except AuthError as e:
        print_error(e, "Authentication failed")
        sys.exit(1)
    except DeploySyncError as e:
        print_error(e)
        sys.exit(1)

    if report.changes:
        print_step("Changes")
        format_changes(report.changes)

    if report.pack:
        print_step(f"{EMOJI_PACKAGE} Package")
        format_pack_result(report.pack)

    if report.remote:
        print_step("Remote Deployment")
        format_remote_result(report.remote)

    if report.commands:
        print_step("Commands")
        for result in report.commands:
            format_command_result(result)

    if dry_run and report.success:
        console.print("\n[yellow]Dry run: nothing was packaged or uploaded[/yellow]")
        return

    console.print()
    format_deploy_report(report)

    if not report.success or report.failed_commands:
        sys.exit(1)
