"""
EDHREC card popularity client.

EDHREC serves card pages through Next.js data routes whose URL embeds the
current site build id:

    {base}/_next/data/{build_id}/cards/{slug}.json

The build id is read from the __NEXT_DATA__ script of any HTML page and
changes on every deploy, so it is cached for a limited time.

Note: This relies on undocumented site internals and may break without notice.
"""

import asyncio
import json
import logging
import re
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from cachetools import TTLCache

from cardledger.config import USER_AGENT, settings
from cardledger.models.card import CardInfo
from cardledger.models.errors import ExternalServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "EDHREC"

NEXT_DATA_PATTERN = re.compile(
    r'<script[^>]*id="__NEXT_DATA__"[^>]*>(.*?)</script>',
    re.DOTALL,
)


class BuildIdCache:
    """
    Time-limited holder for the EDHREC build id.

    Hits are served without locking. Refreshes are serialized so that
    concurrent misses trigger a single fetch.
    """

    KEY = "build_id"

    def __init__(self, ttl: float, timer: Callable[[], float] = time.monotonic):
        self._cache: TTLCache[str, str] = TTLCache(maxsize=1, ttl=ttl, timer=timer)
        self._refresh_lock = asyncio.Lock()

    def get(self) -> str | None:
        return self._cache.get(self.KEY)

    def set(self, build_id: str) -> None:
        self._cache[self.KEY] = build_id

    def clear(self) -> None:
        self._cache.clear()

    async def get_or_refresh(self, fetch: Callable[[], Awaitable[str]]) -> str:
        """Return the cached id, fetching a new one if it expired."""
        cached = self.get()
        if cached is not None:
            return cached

        async with self._refresh_lock:
            # Another task may have refreshed while we waited
            cached = self.get()
            if cached is not None:
                return cached

            build_id = await fetch()
            self.set(build_id)
            return build_id


def card_slug(name: str) -> str:
    """
    EDHREC URL slug of a card name.

    "Sol Ring" -> "sol-ring", "Atraxa, Praetors' Voice" -> "atraxa-praetors-voice"
    """
    return name.replace(" ", "-").replace("'", "").replace(",", "").lower()


def extract_build_id(html: str) -> str:
    """
    Read the Next.js build id from a page.

    Raises:
        ExternalServiceError: If the page has no usable __NEXT_DATA__ script
    """
    match = NEXT_DATA_PATTERN.search(html)
    if not match:
        raise ExternalServiceError(SERVICE_NAME, "unable to find __NEXT_DATA__ script")

    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        raise ExternalServiceError(SERVICE_NAME, "__NEXT_DATA__ is not valid json", str(e)) from e

    build_id = data.get("buildId") if isinstance(data, dict) else None
    if not isinstance(build_id, str) or not build_id:
        raise ExternalServiceError(SERVICE_NAME, "buildId not found in __NEXT_DATA__")

    return build_id


def parse_card_info(payload: Any) -> CardInfo:
    """
    Extract popularity figures from a card data route.

    Raises:
        ExternalServiceError: If the figures are missing
    """
    try:
        card = payload["pageProps"]["data"]["container"]["json_dict"]["card"]
        return CardInfo(
            inclusion=int(card["inclusion"]),
            total_decks=int(card["potential_decks"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ExternalServiceError(SERVICE_NAME, "unexpected card data format", str(e)) from e


class EdhrecClient:
    """Fetches card popularity from EDHREC."""

    def __init__(
        self,
        build_id_cache: BuildIdCache,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.build_id_cache = build_id_cache
        self.base_url = (base_url or settings.edhrec_base_url).rstrip("/")
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            timeout=settings.http_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, url: str) -> httpx.Response:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExternalServiceError(SERVICE_NAME, f"request to {url} failed", str(e)) from e
        return response

    async def fetch_build_id(self) -> str:
        """Fetch the current build id from the FAQ page."""
        url = f"{self.base_url}/faq"
        logger.info("Fetching EDHREC build id from %s", url)

        response = await self._get(url)
        build_id = extract_build_id(response.text)

        logger.info("EDHREC build id: %s", build_id)
        return build_id

    async def get_card_info(self, card_name: str) -> CardInfo:
        """
        Popularity of a card by name.

        Raises:
            ExternalServiceError: If EDHREC cannot be reached or the card data is unusable
        """
        build_id = await self.build_id_cache.get_or_refresh(self.fetch_build_id)
        url = f"{self.base_url}/_next/data/{build_id}/cards/{card_slug(card_name)}.json"

        response = await self._get(url)
        try:
            payload = response.json()
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, "card data is not valid json", str(e)) from e

        return parse_card_info(payload)
