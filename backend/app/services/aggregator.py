from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from backend.app.core.settings import Settings
from backend.app.services import composite_id
from backend.app.services.listing_cache import ListingCache
from backend.app.services.marketcheck_client import MarketCheckClient, SearchQuery
from backend.app.services.normalize import MarketListing, normalize_listing

logger = logging.getLogger(__name__)


class ListingAggregator:
    """Search and single-listing lookup over the MarketCheck feed.

    ``search`` always goes upstream. ``lookup`` serves fresh cache entries and
    falls back to a VIN search, caching only successful resolutions. Neither
    raises for upstream unavailability: callers get ``[]`` or ``None``.
    """

    def __init__(self, client: MarketCheckClient, cache: Optional[ListingCache[MarketListing]] = None):
        self.client = client
        self.cache: ListingCache[MarketListing] = cache if cache is not None else ListingCache()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def search(
        self,
        text: Optional[str] = None,
        postal_code: Optional[str] = None,
        radius_miles: Optional[int] = None,
    ) -> List[MarketListing]:
        query = SearchQuery(text=text, postal_code=postal_code, radius_miles=radius_miles)
        result = await self.client.search_active(query)
        return [normalize_listing(record) for record in result.records_or_empty()]

    async def lookup(self, listing_id: str) -> Optional[MarketListing]:
        cached = self.cache.get(listing_id)
        if cached is not None:
            logger.debug("Listing cache hit for %s", listing_id)
            return cached

        vin = composite_id.decode_vin(listing_id)
        if not vin:
            logger.info("Cannot extract a VIN from listing id %r", listing_id)
            return None

        result = await self.client.search_by_vin(vin)
        record = result.first_or_none()
        if record is None:
            if result.ok:
                logger.info("No active MarketCheck listing for VIN %s; it may have been sold or removed", vin)
            return None

        listing = normalize_listing(record)
        self.cache.set(listing_id, listing)
        return listing

    async def check_connection(self) -> Dict[str, Any]:
        result = await self.client.check_connection()
        if not result.ok:
            return {
                "status": "error",
                "message": result.error,
                "apiKeyConfigured": True,
            }
        return {
            "status": "success",
            "message": "MarketCheck API is working",
            "apiKeyPrefix": self.client.key_prefix,
            "sampleListingCount": result.num_found,
        }


def build_aggregator(config: Settings) -> ListingAggregator:
    client = MarketCheckClient(
        config.marketcheck_api_key,
        base_url=config.marketcheck_base_url,
        timeout=config.marketcheck_timeout,
        rows=config.marketcheck_rows,
        default_postal_code=config.marketcheck_default_zip,
        default_radius_miles=config.marketcheck_default_radius,
    )
    cache: ListingCache[MarketListing] = ListingCache(
        ttl_seconds=config.listing_cache_ttl_seconds,
        capacity=config.listing_cache_capacity,
    )
    return ListingAggregator(client, cache)
