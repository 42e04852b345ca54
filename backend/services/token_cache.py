"""
OAuth2 client-credentials token cache for the Amadeus API
"""
import asyncio
import logging
import time
from typing import Callable, Optional

import httpx

from .exceptions import AuthError
from .models import AccessCredential

logger = logging.getLogger(__name__)

TOKEN_ENDPOINT = "/v1/security/oauth2/token"
DEFAULT_EXPIRY_BUFFER_SECONDS = 300


class AmadeusTokenProvider:
    """
    Single-slot bearer token cache

    Reads are lock-free; refreshes are serialized so concurrent callers that
    find the slot empty wait for one fetch instead of each issuing their own.
    A failed fetch raises AuthError and leaves the slot empty.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        expiry_buffer_seconds: int = DEFAULT_EXPIRY_BUFFER_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._http_client = http_client
        self._client_id = client_id
        self._client_secret = client_secret
        self._expiry_buffer_seconds = expiry_buffer_seconds
        self._clock = clock
        self._credential: Optional[AccessCredential] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def credential(self) -> Optional[AccessCredential]:
        return self._credential

    def _valid(self, credential: Optional[AccessCredential]) -> bool:
        return credential is not None and self._clock() < credential.expires_at

    async def get_token(self) -> str:
        """Return a cached token, fetching a new one when the slot is empty or stale"""
        credential = self._credential
        if self._valid(credential):
            return credential.token

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited for the lock
            credential = self._credential
            if self._valid(credential):
                return credential.token

            self._credential = None
            credential = await self._fetch_credential()
            self._credential = credential
            return credential.token

    def invalidate(self) -> None:
        """Drop the cached token, e.g. after the API rejected it"""
        self._credential = None

    async def _fetch_credential(self) -> AccessCredential:
        try:
            response = await self._http_client.post(
                TOKEN_ENDPOINT,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"[AUTH] Token request failed: {e}")
            raise AuthError(f"Amadeus authentication failed: {e}")

        if not response.is_success:
            body = response.text[:500]
            logger.error(f"[AUTH] Token request rejected {response.status_code}: {body}")
            raise AuthError(
                f"Amadeus authentication failed with status {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        try:
            token_data = response.json()
            token = token_data["access_token"]
            expires_in = float(token_data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"[AUTH] Malformed token response: {e}")
            raise AuthError(
                "Amadeus authentication returned a malformed body",
                status_code=response.status_code,
                body=response.text[:500],
            )
        if not isinstance(token, str) or not token:
            raise AuthError("Amadeus authentication returned an empty token", status_code=response.status_code)

        # Expire early to absorb clock skew and in-flight request latency
        expires_at = self._clock() + expires_in - self._expiry_buffer_seconds
        logger.info("[AUTH] Amadeus access token refreshed successfully")
        return AccessCredential(token=token, expires_at=expires_at)
