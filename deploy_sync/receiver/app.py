"""HTTP endpoints of the deployment receiver"""

import logging
import traceback
from typing import List, Optional

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .command_runner import CommandRunner, SubprocessCommandRunner
from .receiver import DeploymentReceiver, RunRequest
from ..__version__ import __version__
from ..api.exceptions import AuthError
from ..constants import DEFAULT_ZIP_NAME, METADATA_ENDPOINT, RUN_ENDPOINT, TOKEN_HEADER
from ..models.config import DeployerConfig

logger = logging.getLogger(__name__)


# Request models
class RunPayload(BaseModel):
    env: str = "default"
    commands: Optional[List[str]] = None
    zipname: str = DEFAULT_ZIP_NAME
    delete: List[str] = Field(default_factory=list)


def fatal_response(exc: Exception) -> JSONResponse:
    """500 envelope naming where an unhandled fault was raised"""
    frames = traceback.extract_tb(exc.__traceback__)
    location = frames[-1] if frames else None

    logger.exception(f"Unhandled receiver error: {exc}", exc_info=exc)

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": str(exc) or exc.__class__.__name__,
            "file": location.filename if location else None,
            "line": location.lineno if location else None
        }
    )


def create_app(config: DeployerConfig,
               runner: Optional[CommandRunner] = None,
               target_root: Optional[str] = None) -> FastAPI:
    """
    Build the receiver application

    Args:
        config: Deployer configuration
        runner: Command backend; defaults to a subprocess runner using the
            configured prefix in the target root
        target_root: Overrides config.receiver.target_root

    Returns:
        FastAPI application
    """
    root = target_root or config.receiver.target_root
    if runner is None:
        runner = SubprocessCommandRunner(
            prefix=config.receiver.command_prefix,
            cwd=root,
            timeout=config.receiver.command_timeout
        )

    receiver = DeploymentReceiver(config, runner, root)

    app = FastAPI(
        title="deploy-sync receiver",
        description="Applies incremental deployment packages",
        version=__version__
    )
    app.state.receiver = receiver

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc)}
        )

    @app.post(RUN_ENDPOINT)
    def run_endpoint(payload: RunPayload,
                     token: Optional[str] = Header(None, alias=TOKEN_HEADER)):
        """Apply the uploaded package and run commands"""
        request = RunRequest(
            env=payload.env,
            token=token,
            commands=payload.commands,
            zipname=payload.zipname,
            delete=payload.delete
        )
        try:
            result = receiver.run(request)
        except AuthError:
            raise
        except Exception as e:
            return fatal_response(e)

        return result.to_dict()

    @app.get(METADATA_ENDPOINT)
    def metadata_endpoint(env: str = "default",
                          token: Optional[str] = Header(None, alias=TOKEN_HEADER)):
        """Return the last deployment record of an environment"""
        try:
            metadata = receiver.fetch_metadata(env, token)
        except AuthError:
            raise
        except Exception as e:
            return fatal_response(e)

        if metadata is None:
            return {"exists": False, "environment": env}

        return {"exists": True, **metadata.to_dict()}

    return app
