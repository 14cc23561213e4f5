"""Bearer token providers for the Log Analytics query API.

Supports a static token (injected by the host) and the OAuth2
client-credentials flow for a service principal.
"""

import time

import httpx
from loguru import logger

from transfer_report.lib.telemetry.base import BackendQueryError, UnknownQueryError

LOG_ANALYTICS_SCOPE = "https://api.loganalytics.io/.default"

# Refresh this many seconds before the token actually expires
_EXPIRY_MARGIN_SECONDS = 120


class StaticTokenProvider:
    """Returns the same pre-issued token on every call."""

    def __init__(self, token: str) -> None:
        self._token = token

    async def get_token(self) -> str:
        return self._token


class ClientCredentialsTokenProvider:
    """Acquires tokens with the OAuth2 client-credentials grant.

    The token is cached in memory and reissued shortly before it expires.

    Args:
        tenant_id: Directory (tenant) id of the service principal.
        client_id: Application (client) id.
        client_secret: Client secret.
        authority_url: Identity platform base URL.
        scope: Resource scope requested for the token.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        *,
        authority_url: str = "https://login.microsoftonline.com",
        scope: str = LOG_ANALYTICS_SCOPE,
        timeout: float = 30.0,
    ) -> None:
        self._token_url = f"{authority_url.rstrip('/')}/{tenant_id}/oauth2/v2.0/token"
        self._client_id = client_id
        self._client_secret = client_secret
        self._scope = scope
        self._timeout = timeout
        self._token: str | None = None
        self._expires_at = 0.0

    async def get_token(self) -> str:
        """Return a cached token, requesting a new one when it is near expiry.

        Raises:
            BackendQueryError: If the identity platform rejects the request.
            UnknownQueryError: On transport failure or an unreadable response.
        """
        if self._token is not None and time.monotonic() < self._expires_at:
            return self._token

        form = {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "scope": self._scope,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._token_url, data=form)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            msg = f"HTTP {exc.response.status_code} acquiring telemetry access token"
            logger.error(msg)
            raise BackendQueryError(msg, status_code=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            msg = f"HTTP error acquiring telemetry access token: {exc}"
            logger.error(msg)
            raise UnknownQueryError(msg) from exc

        try:
            payload = response.json()
            token = payload["access_token"]
            expires_in = float(payload.get("expires_in", 3600))
        except (ValueError, KeyError, TypeError) as exc:
            msg = "Invalid token response from identity platform"
            logger.error(msg)
            raise UnknownQueryError(msg) from exc

        self._token = token
        self._expires_at = time.monotonic() + max(expires_in - _EXPIRY_MARGIN_SECONDS, 0)
        logger.debug("Acquired telemetry access token (expires in {}s)", int(expires_in))
        return token
