"""Remote deployment status"""

import sys

import click

from ..utils.output import format_metadata, print_error
from ...api.client import DeployerApiClient
from ...api.exceptions import AuthError, DeploySyncError
from ...utils.async_utils import run_async


async def _fetch(client: DeployerApiClient):
    async with client:
        return await client.fetch_metadata()


@click.command()
@click.option('--env', 'env_name', default='default', show_default=True,
              help='Environment to query')
@click.pass_context
def status(ctx, env_name):
    """Show the last deployment recorded on an environment"""
    try:
        client = DeployerApiClient(ctx.obj.environment(env_name))
        metadata = run_async(_fetch(client))
    except AuthError as e:
        print_error(e, "Authentication failed")
        sys.exit(1)
    except DeploySyncError as e:
        print_error(e)
        sys.exit(1)

    format_metadata(env_name, metadata)
