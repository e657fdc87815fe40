"""Receiver server command"""

import sys

import click
import uvicorn

from ..utils.output import console, print_error
from ...api.exceptions import DeploySyncError
from ...receiver.app import create_app


@click.command()
@click.option('--host', default='127.0.0.1', show_default=True, help='Bind address')
@click.option('--port', default=8000, show_default=True, type=int, help='Bind port')
@click.option('--target-root', type=click.Path(file_okay=False, exists=True),
              help='Directory deployments are applied to (overrides receiver.target_root)')
@click.pass_context
def serve(ctx, host, port, target_root):
    """Run the deployment receiver

    Serves POST /deployer/run and GET /deployer/metadata for the
    environments configured with a deploy_token.
    """
    try:
        app = create_app(ctx.obj.config, target_root=target_root)
    except DeploySyncError as e:
        print_error(e)
        sys.exit(1)

    log_level = "debug" if ctx.obj.debug else "info" if ctx.obj.verbose else "warning"
    console.print(f"Receiver listening on [cyan]http://{host}:{port}[/cyan]")
    uvicorn.run(app, host=host, port=port, log_level=log_level)
