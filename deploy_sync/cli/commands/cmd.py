"""Remote command execution"""

import sys

import click

from ..utils.output import console, format_command_result, print_error, print_header
from ...api.exceptions import AuthError, DeploySyncError
from ...services.remote_service import RemoteCommandService
from ...utils.async_utils import run_async


@click.command()
@click.option('--env', 'env_name', default='default', show_default=True,
              help='Target environment')
@click.option('--cmd', 'commands', multiple=True, required=True,
              help='Command to run on the server (repeatable)')
@click.pass_context
def cmd(ctx, env_name, commands):
    """Run commands on the server without deploying

    Examples:

        deploy-sync cmd --env production --cmd "cache:clear" --cmd "queue:restart"
    """
    try:
        service = RemoteCommandService(ctx.obj.environment(env_name))

        print_header(f"REMOTE COMMAND EXECUTION ON {env_name.upper()}")
        console.print(f"   Commands: [cyan]{len(commands)}[/cyan]\n")

        results = run_async(service.run(
            list(commands),
            on_command=lambda result: format_command_result(result, preview=None)
        ))

    except AuthError as e:
        print_error(e, "Authentication failed")
        sys.exit(1)
    except DeploySyncError as e:
        print_error(e)
        sys.exit(1)

    if any(not result.success for result in results):
        sys.exit(1)
