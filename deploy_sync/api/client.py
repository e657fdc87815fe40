"""HTTP client for the deployment receiver"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from .exceptions import (
    ConfigError,
    InvalidEnvironmentError,
    RemoteError,
    TransportError,
    UnauthorizedError,
)
from ..constants import (
    DEFAULT_ZIP_NAME,
    METADATA_ENDPOINT,
    METADATA_TIMEOUT,
    RUN_ENDPOINT,
    RUN_TIMEOUT,
    TOKEN_HEADER,
)
from ..models.config import EnvironmentConfig
from ..models.metadata import DeploymentMetadata
from ..models.result import DeploymentResult

logger = logging.getLogger(__name__)


class DeployerApiClient:
    """Talks to the run and metadata endpoints of one environment

    Requests are never retried: a deployment step that did not answer may
    still have been applied.
    """

    def __init__(self,
                 env_config: EnvironmentConfig,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            env_config: Environment with remote_base_url and deploy_token
            transport: Custom httpx transport (tests)

        Raises:
            ConfigError: If URL or token is missing
        """
        issues = env_config.validate_client()
        if issues:
            raise ConfigError("; ".join(issues))

        self.env_config = env_config
        self.base_url = env_config.remote_base_url.rstrip("/")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def environment(self) -> str:
        return self.env_config.name

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the httpx client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={TOKEN_HEADER: self.env_config.deploy_token, "Accept": "application/json"},
                timeout=httpx.Timeout(RUN_TIMEOUT),
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the client and release connections"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _error_message(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text[:200] or f"HTTP {response.status_code}"

        if isinstance(data, dict):
            message = data.get("error") or data.get("message") or data.get("detail")
            if message:
                location = ""
                if data.get("file"):
                    location = f" ({data['file']}:{data.get('line')})"
                return f"{message}{location}"
        return f"HTTP {response.status_code}"

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> Dict[str, Any]:
        """
        Make a request and decode its JSON body

        Raises:
            InvalidEnvironmentError: Receiver does not know the environment (400)
            UnauthorizedError: Token rejected (401)
            RemoteError: Any other non-2xx status or a non-object body
            TransportError: Connection failure or timeout
        """
        client = self._get_client()

        try:
            response = await client.request(method, endpoint, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {self.base_url}{endpoint} timed out") from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}") from e

        status_code = response.status_code
        if status_code == 400:
            raise InvalidEnvironmentError(self.environment)
        if status_code == 401:
            raise UnauthorizedError(self._error_message(response))
        if not response.is_success:
            raise RemoteError(
                f"Request failed with status {status_code}: {self._error_message(response)}",
                status_code=status_code,
                raw=response.text
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteError("Invalid JSON response from receiver", status_code, response.text) from e

        if not isinstance(data, dict):
            raise RemoteError("Unexpected response shape from receiver", status_code, response.text)

        return data

    async def fetch_metadata(self) -> Optional[DeploymentMetadata]:
        """
        Fetch the last deployment record

        Returns:
            DeploymentMetadata, or None if the target was never deployed
        """
        data = await self._request(
            "GET",
            METADATA_ENDPOINT,
            params={"env": self.environment},
            timeout=METADATA_TIMEOUT
        )

        if not data.get("exists"):
            logger.info(f"No previous deployment recorded for {self.environment}")
            return None

        return DeploymentMetadata.from_dict(data)

    async def run(self,
                  commands: Optional[List[str]] = None,
                  zipname: str = DEFAULT_ZIP_NAME,
                  delete: Optional[List[str]] = None) -> DeploymentResult:
        """
        Ask the receiver to apply a package and run commands

        Args:
            commands: Commands to run; None lets the receiver pick its
                configured list, an empty list runs none
            zipname: Uploaded package name
            delete: Paths to remove before extraction

        Returns:
            DeploymentResult
        """
        payload = {
            "env": self.environment,
            "commands": commands,
            "zipname": zipname,
            "delete": list(delete or []),
        }
        data = await self._request("POST", RUN_ENDPOINT, json=payload, timeout=RUN_TIMEOUT)
        return DeploymentResult.from_dict(data)
