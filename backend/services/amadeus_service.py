"""
Amadeus API Service for flight offer search
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings
from .exceptions import SearchError
from .token_cache import AmadeusTokenProvider

logger = logging.getLogger(__name__)

FLIGHT_OFFERS_ENDPOINT = "/v2/shopping/flight-offers"


class AmadeusService:
    """
    Service class for Amadeus API integration
    Issues authenticated flight offer searches and returns the raw offers
    """

    def __init__(self, http_client: httpx.AsyncClient, token_provider: AmadeusTokenProvider):
        self._client = http_client
        self._token_provider = token_provider

    @classmethod
    def from_settings(cls, settings: Settings) -> "AmadeusService":
        client = httpx.AsyncClient(
            base_url=settings.amadeus_api_base,
            timeout=settings.http_timeout_seconds,
        )
        token_provider = AmadeusTokenProvider(
            client,
            settings.amadeus_api_key,
            settings.amadeus_api_secret,
            expiry_buffer_seconds=settings.token_expiry_buffer_seconds,
        )
        logger.info(f"[AMADEUS] Initialized with base URL: {settings.amadeus_api_base}")
        return cls(client, token_provider)

    async def _get(self, endpoint: str, params: Dict[str, Any], token: str) -> httpx.Response:
        try:
            return await self._client.get(
                endpoint,
                headers={"Authorization": f"Bearer {token}"},
                params=params,
            )
        except httpx.HTTPError as e:
            logger.error(f"[AMADEUS] API request failed: {e}")
            raise SearchError(f"Amadeus API request failed: {e}")

    async def _make_request(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Make authenticated request to Amadeus API, retrying once if the token is rejected"""
        logger.info(f"[AMADEUS] Making request to: {endpoint}")
        logger.info(f"[AMADEUS] Request params: {params}")

        token = await self._token_provider.get_token()
        response = await self._get(endpoint, params, token)

        if response.status_code == 401:
            logger.warning("[AMADEUS] Access token rejected, refreshing and retrying once")
            self._token_provider.invalidate()
            token = await self._token_provider.get_token()
            response = await self._get(endpoint, params, token)

        logger.info(f"[AMADEUS] Response status: {response.status_code}")
        if not response.is_success:
            body = response.text[:500]
            logger.error(f"[AMADEUS] API error {response.status_code}: {body}")
            raise SearchError(
                f"Amadeus API error: {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        try:
            result = response.json()
        except ValueError:
            raise SearchError("Amadeus API returned invalid JSON", status_code=response.status_code, body=response.text[:500])
        if not isinstance(result, dict):
            raise SearchError("Amadeus API returned an unexpected payload", status_code=response.status_code)
        return result

    async def search_flights(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        adults: int = 1,
        max_results: int = 10,
        return_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """
        Search for flight offers

        Returns the raw offers; an empty list means no flights on that route
        and date. Raises AuthError if no token can be obtained and SearchError
        for any transport or non-2xx failure.
        """
        params = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date.isoformat(),
            "adults": adults,
            "max": max_results,
        }
        if return_date:
            params["returnDate"] = return_date.isoformat()

        response = await self._make_request(FLIGHT_OFFERS_ENDPOINT, params)
        offers = response.get("data") or []
        if not isinstance(offers, list):
            raise SearchError("Amadeus API returned a non-list 'data' field")

        logger.info(f"[AMADEUS] {len(offers)} offers for {origin} -> {destination} on {params['departureDate']}")
        return offers

    async def close(self):
        """Close HTTP client"""
        await self._client.aclose()
