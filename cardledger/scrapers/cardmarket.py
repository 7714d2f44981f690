"""
Cardmarket price guide client.

Cardmarket publishes one JSON price guide per day for the whole Magic
catalog (~100k products). Prices are euro floats, null when there is no
quote; foil prices use a "-foil" suffix:

    {
      "version": 1,
      "createdAt": "2025-12-23T02:47:26+0100",
      "priceGuides": [
        {"idProduct": 1, "avg": 0.06, "low": 0.02, ..., "avg-foil": null, ...}
      ]
    }
"""

import logging
import time
from datetime import date, datetime, timezone
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cardledger.config import USER_AGENT, settings
from cardledger.models.errors import ExternalServiceError
from cardledger.models.money import FullPriceGuide, PriceGuide

logger = logging.getLogger(__name__)

SERVICE_NAME = "Cardmarket"

CREATED_AT_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class CardmarketPriceGuideEntry(BaseModel):
    """One product of the price guide."""

    model_config = ConfigDict(populate_by_name=True)

    id_product: int = Field(alias="idProduct")
    low: float | None = None
    avg: float | None = None
    trend: float | None = None
    avg1: float | None = None
    avg7: float | None = None
    avg30: float | None = None
    low_foil: float | None = Field(default=None, alias="low-foil")
    avg_foil: float | None = Field(default=None, alias="avg-foil")
    trend_foil: float | None = Field(default=None, alias="trend-foil")
    avg1_foil: float | None = Field(default=None, alias="avg1-foil")
    avg7_foil: float | None = Field(default=None, alias="avg7-foil")
    avg30_foil: float | None = Field(default=None, alias="avg30-foil")

    def to_model(self) -> FullPriceGuide:
        return FullPriceGuide(
            product_id=self.id_product,
            normal=PriceGuide.from_euros(
                low=self.low,
                avg=self.avg,
                trend=self.trend,
                avg1=self.avg1,
                avg7=self.avg7,
                avg30=self.avg30,
            ),
            foil=PriceGuide.from_euros(
                low=self.low_foil,
                avg=self.avg_foil,
                trend=self.trend_foil,
                avg1=self.avg1_foil,
                avg7=self.avg7_foil,
                avg30=self.avg30_foil,
            ),
        )


class CardmarketPriceGuides(BaseModel):
    """The whole price guide document."""

    created_at: str = Field(alias="createdAt")
    price_guides: list[CardmarketPriceGuideEntry] = Field(alias="priceGuides")


def parse_created_at(value: str) -> date:
    """
    Date of publication, in UTC.

    "2025-12-23T00:30:00+0100" was published on 2025-12-22 UTC.
    """
    try:
        created_at = datetime.strptime(value, CREATED_AT_FORMAT)
    except ValueError:
        created_at = datetime.fromisoformat(value)

    if created_at.tzinfo is None:
        return created_at.date()
    return created_at.astimezone(timezone.utc).date()


def parse_price_guides(payload: Any) -> tuple[date, list[FullPriceGuide]]:
    """
    Decode a price guide document.

    Raises:
        ExternalServiceError: If the document does not have the expected shape
    """
    try:
        document = CardmarketPriceGuides.model_validate(payload)
        price_date = parse_created_at(document.created_at)
    except (ValidationError, ValueError) as e:
        raise ExternalServiceError(SERVICE_NAME, "unexpected price guide format", str(e)) from e

    return price_date, [entry.to_model() for entry in document.price_guides]


class CardmarketClient:
    """Downloads the daily price guide."""

    def __init__(
        self,
        url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self.url = url or settings.cardmarket_price_guide_url
        self._client = client
        self.timeout = timeout or settings.http_timeout_seconds

    async def _get_json(self) -> Any:
        if self._client is not None:
            response = await self._client.get(self.url)
            response.raise_for_status()
            return response.json()

        async with httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            timeout=self.timeout,
        ) as client:
            response = await client.get(self.url)
            response.raise_for_status()
            return response.json()

    async def fetch_price_guides(self) -> tuple[date, list[FullPriceGuide]]:
        """
        Fetch and decode the current price guide.

        Returns:
            Tuple of (publication date, price guides)

        Raises:
            ExternalServiceError: If the request fails or the payload is invalid
        """
        logger.info("Fetching price guides from %s", self.url)
        start = time.monotonic()

        try:
            payload = await self._get_json()
        except httpx.HTTPError as e:
            raise ExternalServiceError(SERVICE_NAME, "price guide request failed", str(e)) from e
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, "price guide is not valid JSON", str(e)) from e

        price_date, guides = parse_price_guides(payload)

        logger.info(
            "Fetched %d price guides for %s in %.0f ms",
            len(guides),
            price_date,
            (time.monotonic() - start) * 1000,
        )
        return price_date, guides
