"""Docker Registry HTTP API v2 client implementation."""
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
import aiohttp
from registry_lister.domain.errors import AuthError, DecodeError, TransportError
from registry_lister.domain.models import RepositoryInfo, ScopeRequest
from registry_lister.domain.registry_interface import IRegistryClient
from registry_lister.domain.token_interface import ITokenProvider


logger = logging.getLogger(__name__)


class RegistryHttpClient(IRegistryClient):
    """Registry client for the catalog and tag-list endpoints.

    Implements the IRegistryClient port. Every call makes exactly one
    attempt; retrying is left to the caller's schedule.
    """

    def __init__(
        self,
        base_url: str,
        token_provider: ITokenProvider,
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """Initialize registry client.

        Args:
            base_url: Registry root URL, e.g. `http://localhost:8080`
            token_provider: Source of bearer tokens
            timeout: Total seconds allowed per request
            session: Optional externally owned aiohttp session
        """
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_session(self) -> aiohttp.ClientSession:
        """Return the HTTP session (lazy initialization)."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def _acquire_token(self, *scopes: str) -> str:
        try:
            return await self._token_provider.acquire(*scopes)
        except AuthError:
            raise
        except Exception as e:
            raise AuthError(f"error obtaining access token: {e}") from e

    async def _get_json(self, path: str, *scopes: str) -> Dict[str, Any]:
        """Perform one authenticated GET and decode the JSON object body.

        Raises:
            AuthError: Token could not be obtained; no request is sent
            TransportError: Connection failure, timeout or non-2xx status
            DecodeError: Body is not a JSON object
        """
        token = await self._acquire_token(*scopes)
        url = f"{self._base_url}{path}"
        headers = {"Authorization": f"Bearer {token}"}

        try:
            async with self._get_session().get(url, headers=headers, timeout=self._timeout) as response:
                body = await response.read()
                status = response.status
        except asyncio.TimeoutError as e:
            raise TransportError(f"request to {url} timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"unable to perform request to {url}: {e}") from e

        if not 200 <= status < 300:
            raise TransportError(f"{url} answered with status {status}", status=status)

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise DecodeError(f"unable to decode response from {url}") from e

        if not isinstance(payload, dict):
            raise DecodeError(f"expected a JSON object from {url}")
        return payload

    @staticmethod
    def _string_list(payload: Dict[str, Any], key: str) -> List[str]:
        # Registries send null for empty lists
        values = payload.get(key)
        if values is None:
            return []
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise DecodeError(f"'{key}' is not a list of strings")
        return values

    async def fetch_catalog(self) -> List[str]:
        """Fetch every repository name from `/v2/_catalog`.

        Returns:
            Repository names in registry order
        """
        payload = await self._get_json("/v2/_catalog")
        repositories = self._string_list(payload, "repositories")
        logger.info(f"Catalog lists {len(repositories)} repositories")
        return repositories

    async def fetch_tags(self, name: str) -> RepositoryInfo:
        """Fetch the tags of one repository from `/v2/<name>/tags/list`.

        The returned entity always carries the requested name; any name
        echoed back by the registry is ignored.
        """
        scope = ScopeRequest.for_pull(name).to_scope()
        payload = await self._get_json(f"/v2/{name}/tags/list", scope)
        tags = self._string_list(payload, "tags")
        return RepositoryInfo(name=name, tags=tuple(tags))

    async def ping(self) -> bool:
        """Check that the registry API answers on `/v2/`.

        A 401 counts as reachable since the registry requires a token.

        Raises:
            TransportError: If the registry cannot be reached
        """
        url = f"{self._base_url}/v2/"
        try:
            async with self._get_session().get(url, timeout=self._timeout) as response:
                status = response.status
        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            raise TransportError(f"unable to reach {url}: {e}") from e

        if status in (200, 401):
            return True
        raise TransportError(f"{url} answered with status {status}", status=status)

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None
