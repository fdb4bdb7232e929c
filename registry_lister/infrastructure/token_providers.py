"""Bearer token providers for registry authentication."""
import asyncio
import json
import logging
from typing import List, Optional, Tuple
import aiohttp
from registry_lister.domain.errors import AuthError
from registry_lister.domain.token_interface import ITokenProvider


logger = logging.getLogger(__name__)


class StaticTokenProvider(ITokenProvider):
    """Returns one preconfigured token for every scope."""

    def __init__(self, token: str):
        if not token:
            raise ValueError("token must not be empty")
        self._token = token

    async def acquire(self, *scopes: str) -> str:
        return self._token


class TokenServiceProvider(ITokenProvider):
    """Requests tokens from a Docker token-auth endpoint.

    Sends `GET <realm>?service=<service>&scope=<scope>...` with optional
    basic auth and reads `token` (or `access_token`) from the response.
    """

    def __init__(
        self,
        realm: str,
        service: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0
    ):
        """Initialize token provider.

        Args:
            realm: Token endpoint URL
            service: Service name expected by the token endpoint
            username: Optional basic-auth user
            password: Optional basic-auth password
            timeout: Total seconds allowed per token request
        """
        self._realm = realm
        self._service = service
        self._auth = aiohttp.BasicAuth(username, password or "") if username else None
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    def _query(self, scopes: Tuple[str, ...]) -> List[Tuple[str, str]]:
        params = []
        if self._service:
            params.append(("service", self._service))
        for scope in scopes:
            params.append(("scope", scope))
        return params

    async def acquire(self, *scopes: str) -> str:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)

        try:
            async with self._session.get(
                self._realm,
                params=self._query(scopes),
                auth=self._auth
            ) as response:
                body = await response.read()
                status = response.status
        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            raise AuthError(f"token request to {self._realm} failed: {e}") from e

        if status != 200:
            raise AuthError(f"token endpoint {self._realm} answered with status {status}")

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise AuthError(f"token endpoint {self._realm} returned invalid JSON") from e

        token = None
        if isinstance(payload, dict):
            token = payload.get("token") or payload.get("access_token")
        if not isinstance(token, str) or not token:
            raise AuthError(f"token endpoint {self._realm} returned no token")

        logger.debug(f"Obtained token from {self._realm} for {len(scopes)} scope(s)")
        return token

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None


def token_provider_from_config(config) -> ITokenProvider:
    """Pick the token provider for a ListerConfig.

    A token realm takes precedence over a static token.

    Raises:
        ValueError: If neither a token nor a token realm is configured
    """
    if config.token_realm:
        return TokenServiceProvider(
            realm=config.token_realm,
            service=config.token_service,
            username=config.registry_username,
            password=config.registry_password,
            timeout=config.request_timeout
        )
    if config.registry_token:
        return StaticTokenProvider(config.registry_token)
    raise ValueError("Either TOKEN_REALM or REGISTRY_TOKEN must be set")
