"""
Scryfall card lookup.

Resolves the Cardmarket product id of a printing from its Scryfall id:

    GET https://api.scryfall.com/cards/{id}?format=json
    {"id": "...", "name": "...", "cardmarket_id": 12345, ...}

Scryfall rate-limits clients; requests go through an AsyncRateLimiter.
API docs: https://scryfall.com/docs/api
"""

import logging
from typing import Any

import httpx

from cardledger.config import USER_AGENT, settings
from cardledger.models.errors import ExternalServiceError
from cardledger.services.ports import CardmarketIdSource
from cardledger.services.rate_limit import AsyncRateLimiter

logger = logging.getLogger(__name__)

SERVICE_NAME = "Scryfall"


def extract_cardmarket_id(payload: Any) -> int | None:
    """Cardmarket id of a Scryfall card object, None if absent or unusable."""
    if not isinstance(payload, dict):
        return None

    value = payload.get("cardmarket_id")
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class ScryfallClient(CardmarketIdSource):
    """Rate-limited Scryfall API client."""

    def __init__(
        self,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        rate_limiter: AsyncRateLimiter | None = None,
    ):
        self.base_url = (base_url or settings.scryfall_base_url).rstrip("/")
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=settings.http_timeout_seconds,
        )
        self.rate_limiter = rate_limiter or AsyncRateLimiter(settings.scryfall_requests_per_second)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ScryfallClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def get_cardmarket_id(self, scryfall_id: str) -> int | None:
        """
        Look up the Cardmarket product id of a card.

        Returns:
            The product id, or None if Scryfall does not know one.

        Raises:
            ExternalServiceError: If the request fails
        """
        url = f"{self.base_url}/cards/{scryfall_id}"

        await self.rate_limiter.acquire()

        try:
            response = await self._client.get(url, params={"format": "json"})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                SERVICE_NAME, f"card {scryfall_id} lookup failed", str(e)
            ) from e
        except ValueError:
            logger.warning("Scryfall returned invalid JSON for %s", scryfall_id)
            return None

        return extract_cardmarket_id(payload)
