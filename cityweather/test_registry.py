"""
Tests for CacheRegistry, dood!

Checks singleton behaviour, one live cache per API key and replacement of
deactivated caches.
"""

import threading

import pytest

from .city_cache import CacheMode, CityCache
from .city_cache.test_helpers import FakeGeoResolver, FakeWeatherFetcher
from .errors import InvalidArgumentError, StaleHandleError
from .openweathermap import OpenWeatherMapClient
from .registry import CacheRegistry


@pytest.fixture(autouse=True)
def resetCacheRegistrySingleton():
    """Reset CacheRegistry singleton before each test, dood!"""
    CacheRegistry._instance = None
    yield
    if CacheRegistry._instance is not None:
        CacheRegistry._instance.destroy()
    CacheRegistry._instance = None


@pytest.fixture
def registry():
    """Registry producing caches backed by fakes"""
    registry = CacheRegistry.getInstance()
    registry.setCacheFactory(
        lambda apiKey, mode: CityCache(
            apiKey, mode, FakeGeoResolver(), FakeWeatherFetcher(), pollingInterval=0.05
        )
    )
    return registry


class TestCacheRegistrySingleton:
    """Test CacheRegistry singleton behavior"""

    def testGetInstanceReturnsSameInstance(self):
        assert CacheRegistry.getInstance() is CacheRegistry.getInstance()

    def testNewReturnsSingleton(self):
        assert CacheRegistry() is CacheRegistry()

    def testInitializationOnlyRunsOnce(self, registry):
        registry.getCache("key1")

        # Calling constructor again must not reset registered caches
        again = CacheRegistry()

        assert again.listApiKeys() == ["key1"]


class TestGetCache:
    """Test cache creation and reuse"""

    def testSameCacheForSameKey(self, registry):
        first = registry.getCache("key1")
        second = registry.getCache("key1")

        assert first is second
        assert first.isActive()

    def testDifferentCachesForDifferentKeys(self, registry):
        first = registry.getCache("key1")
        second = registry.getCache("key2")

        assert first is not second
        assert first.getApiKey() == "key1"
        assert second.getApiKey() == "key2"
        assert sorted(registry.listApiKeys()) == ["key1", "key2"]

    def testDefaultModeIsOnDemand(self, registry):
        assert registry.getCache("key1").getMode() == CacheMode.ON_DEMAND

    def testModeOnlyAppliesToNewCache(self, registry):
        first = registry.getCache("key1", CacheMode.ON_DEMAND)
        second = registry.getCache("key1", CacheMode.POLLING)

        assert second is first
        assert second.getMode() == CacheMode.ON_DEMAND

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("polling", CacheMode.POLLING),
            ("ON_DEMAND", CacheMode.ON_DEMAND),
            ("on-demand", CacheMode.ON_DEMAND),
        ],
    )
    def testModeFromString(self, registry, value, expected):
        assert registry.getCache("key1", value).getMode() == expected

    def testEmptyApiKey(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.getCache("")

    def testNonStringApiKey(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.getCache(None)  # type: ignore[arg-type]

    def testMissingMode(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.getCache("key1", None)

        assert registry.listApiKeys() == []

    def testUnknownMode(self, registry):
        with pytest.raises(InvalidArgumentError):
            registry.getCache("key1", "hourly")

    def testDeactivatedCacheIsReplaced(self, registry):
        first = registry.getCache("key1")
        first.deactivate()

        second = registry.getCache("key1")

        assert second is not first
        assert second.isActive()
        with pytest.raises(StaleHandleError):
            first.lookup("Paris")
        assert second.lookup("Paris")["name"] == "Paris"

    def testConcurrentGetCacheReturnsOneCache(self, registry):
        barrier = threading.Barrier(8)
        results = []
        resultsLock = threading.Lock()

        def worker():
            barrier.wait()
            cache = registry.getCache("key1")
            with resultsLock:
                results.append(cache)

        workers = [threading.Thread(target=worker) for _ in range(8)]
        for thread in workers:
            thread.start()
        for thread in workers:
            thread.join()

        assert len(results) == 8
        assert all(cache is results[0] for cache in results)


class TestDeleteCache:
    """Test cache removal"""

    def testDeleteRegisteredCache(self, registry):
        cache = registry.getCache("key1")

        assert registry.deleteCache(cache) is True
        assert not cache.isActive()
        assert registry.listApiKeys() == []

    def testDeleteTwice(self, registry):
        cache = registry.getCache("key1")
        registry.deleteCache(cache)

        assert registry.deleteCache(cache) is False

    def testDeleteNone(self, registry):
        assert registry.deleteCache(None) is False

    def testDeleteReplacedCache(self, registry):
        first = registry.getCache("key1")
        first.deactivate()
        second = registry.getCache("key1")

        # The old handle is not registered anymore
        assert registry.deleteCache(first) is False
        assert second.isActive()
        assert registry.listApiKeys() == ["key1"]

    def testDeleteUnregisteredCache(self, registry):
        registry.getCache("key1")
        foreign = CityCache("key1", CacheMode.ON_DEMAND, FakeGeoResolver(), FakeWeatherFetcher())

        assert registry.deleteCache(foreign) is False
        assert foreign.isActive()

    def testDeleteStopsPolling(self, registry):
        cache = registry.getCache("key1", CacheMode.POLLING)
        cache.lookup("Paris")
        assert cache.isPolling()

        registry.deleteCache(cache)

        assert cache.joinPollingThread(timeout=2)

    def testDeleteThenGetCreatesNewCache(self, registry):
        first = registry.getCache("key1")
        registry.deleteCache(first)

        assert registry.getCache("key1") is not first

    def testDestroyDeactivatesAll(self, registry):
        caches = [registry.getCache(f"key{i}") for i in range(3)]

        registry.destroy()

        assert registry.listApiKeys() == []
        assert not any(cache.isActive() for cache in caches)


class TestDefaultFactory:
    """Test caches built from loaded configuration"""

    def testDefaultsWithoutConfig(self):
        cache = CacheRegistry.getInstance().getCache("key1")

        assert cache.maxCities == 10
        assert cache.freshnessWindow == 595
        assert isinstance(cache.weatherFetcher, OpenWeatherMapClient)
        assert cache.geoResolver is cache.weatherFetcher
        assert cache.weatherFetcher.apiKey == "key1"

    def testLoadConfig(self):
        registry = CacheRegistry.getInstance()
        registry.loadConfig(
            {"max-cities": 3, "freshness-window": 60, "polling-interval": 2},
            {
                "request-timeout": 5,
                "units": "metric",
                "language": "",
                "weather-url": "http://localhost:8080/weather",
            },
        )

        cache = registry.getCache("key1", CacheMode.POLLING)
        client = cache.weatherFetcher

        assert cache.maxCities == 3
        assert cache.freshnessWindow == 60.0
        assert cache.pollingInterval == 2.0
        assert isinstance(client, OpenWeatherMapClient)
        assert client.requestTimeout == 5.0
        assert client.units == "metric"
        # Empty values are ignored
        assert client.language is None
        assert client.weatherUrl == "http://localhost:8080/weather"
        assert client.geocodingUrl == OpenWeatherMapClient.GEOCODING_API

    def testResetFactory(self, registry):
        registry.setCacheFactory(None)

        cache = registry.getCache("key1")

        assert isinstance(cache.weatherFetcher, OpenWeatherMapClient)
