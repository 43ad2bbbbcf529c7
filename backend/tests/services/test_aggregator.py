import httpx
import pytest

from backend.app.core.settings import Settings
from backend.app.services.aggregator import ListingAggregator, build_aggregator
from backend.app.services.listing_cache import ListingCache
from backend.app.services.marketcheck_client import MarketCheckClient, MarketCheckConfigError

VIN = "1FA6P8CF5L5100001"


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeTransport:
    """Answers every call with the next configured body, repeating the last one."""

    def __init__(self, *bodies):
        self._bodies = list(bodies)
        self.calls = []

    async def get(self, path, params, timeout):
        self.calls.append(params)
        body = self._bodies.pop(0) if len(self._bodies) > 1 else self._bodies[0]
        if isinstance(body, Exception):
            raise body
        request = httpx.Request("GET", "https://api.marketcheck.com/v2" + path)
        return httpx.Response(200, json=body, request=request)

    async def close(self):
        return None


def _upstream(vin=VIN, idx=0):
    return {
        "id": f"{vin}-listing-{idx}",
        "vin": vin,
        "price": 35000 + idx,
        "miles": 1000 * idx,
        "build": {"year": 2020, "make": "Ford", "model": "Mustang GT"},
        "dealer": {"name": "Pony Motors", "city": "Dallas", "state": "TX"},
    }


def _aggregator(transport, clock=None):
    client = MarketCheckClient("test-key", transport=transport)
    cache = ListingCache(ttl_seconds=600, capacity=16, clock=clock or FakeClock())
    return ListingAggregator(client, cache)


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [0, 1, 40])
async def test_search_returns_one_listing_per_upstream_record(count):
    records = [_upstream(vin=f"VIN{i:014d}", idx=i) for i in range(count)]
    aggregator = _aggregator(FakeTransport({"num_found": count, "listings": records}))
    listings = await aggregator.search("Ford Mustang", "75201", 50)
    assert len(listings) == count
    assert [listing.vin for listing in listings] == [r["vin"] for r in records]


@pytest.mark.asyncio
async def test_search_never_touches_cache():
    transport = FakeTransport({"listings": [_upstream()]})
    aggregator = _aggregator(transport)
    await aggregator.search()
    await aggregator.search()
    assert len(transport.calls) == 2
    assert len(aggregator.cache) == 0


@pytest.mark.asyncio
async def test_search_degrades_to_empty_list_on_timeout():
    aggregator = _aggregator(FakeTransport(httpx.ConnectTimeout("connect timeout")))
    assert await aggregator.search("anything") == []


@pytest.mark.asyncio
async def test_lookup_second_call_served_from_cache():
    transport = FakeTransport({"listings": [_upstream()]})
    aggregator = _aggregator(transport)
    listing_id = f"mc-{VIN}-listing-0"

    first = await aggregator.lookup(listing_id)
    second = await aggregator.lookup(listing_id)

    assert first is not None
    assert first.id == listing_id
    assert second == first
    assert len(transport.calls) == 1
    assert transport.calls[0]["vin"] == VIN


@pytest.mark.asyncio
async def test_lookup_requeries_after_freshness_window():
    clock = FakeClock()
    transport = FakeTransport({"listings": [_upstream()]})
    aggregator = _aggregator(transport, clock)
    listing_id = f"mc-{VIN}-listing-0"

    await aggregator.lookup(listing_id)
    clock.now += 601
    assert await aggregator.lookup(listing_id) is not None
    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_lookup_miss_is_not_cached():
    transport = FakeTransport({"listings": []}, {"listings": [_upstream()]})
    aggregator = _aggregator(transport)
    listing_id = f"mc-{VIN}-listing-0"

    assert await aggregator.lookup(listing_id) is None
    assert len(aggregator.cache) == 0
    assert await aggregator.lookup(listing_id) is not None
    assert len(transport.calls) == 2


@pytest.mark.asyncio
async def test_lookup_returns_none_on_network_error():
    transport = FakeTransport(httpx.ConnectError("connection refused"))
    aggregator = _aggregator(transport)
    assert await aggregator.lookup(f"mc-{VIN}-x") is None
    assert len(aggregator.cache) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("listing_id", ["mc", "garbage", "mc--abc", "mc-NOVIN-NOID"])
async def test_lookup_with_unusable_id_skips_upstream(listing_id):
    transport = FakeTransport({"listings": [_upstream()]})
    aggregator = _aggregator(transport)
    assert await aggregator.lookup(listing_id) is None
    assert transport.calls == []


@pytest.mark.asyncio
async def test_check_connection_reports_success_and_failure():
    ok = _aggregator(FakeTransport({"num_found": 7, "listings": []}))
    report = await ok.check_connection()
    assert report["status"] == "success"
    assert report["sampleListingCount"] == 7
    assert report["apiKeyPrefix"] == "test-key..."

    failing = _aggregator(FakeTransport(httpx.ReadTimeout("slow")))
    report = await failing.check_connection()
    assert report["status"] == "error"


@pytest.mark.asyncio
async def test_build_aggregator_wires_settings():
    config = Settings(
        marketcheck_api_key="abc",
        marketcheck_rows=10,
        listing_cache_ttl_seconds=30,
        listing_cache_capacity=5,
    )
    aggregator = build_aggregator(config)
    assert aggregator.client.rows == 10
    assert aggregator.cache.ttl_seconds == 30
    assert aggregator.cache.capacity == 5
    await aggregator.aclose()


def test_build_aggregator_requires_api_key():
    with pytest.raises(MarketCheckConfigError):
        build_aggregator(Settings(marketcheck_api_key=None))


class RawBodyTransport:
    def __init__(self, content: bytes):
        self.content = content

    async def get(self, path, params, timeout):
        request = httpx.Request("GET", "https://api.marketcheck.com/v2" + path)
        return httpx.Response(200, content=self.content, request=request)

    async def close(self):
        return None


@pytest.mark.asyncio
async def test_search_falls_back_to_defaults_for_overflowing_numbers():
    body = b'{"listings": [{"id": "X-1", "vin": "X", "price": 1e400, "miles": "-inf"}]}'
    aggregator = _aggregator(RawBodyTransport(body))
    listings = await aggregator.search()
    assert len(listings) == 1
    assert listings[0].price == 0
    assert listings[0].miles_display == "New"
