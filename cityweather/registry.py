import logging
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from .city_cache import CacheMode, CityCache
from .errors import InvalidArgumentError
from .openweathermap import OpenWeatherMapClient

logger = logging.getLogger(__name__)

CacheFactory = Callable[[str, CacheMode], CityCache]


class CacheRegistry:
    """
    Singleton registry of CityCache instances, one live cache per API key.

    Requesting a key whose cache was deactivated (explicitly or by a failed
    background refresh) transparently creates a new cache for it.

    Usage:
        >>> registry = CacheRegistry.getInstance()
        >>> registry.loadConfig(configManager.getCityCacheConfig(), configManager.getOpenWeatherMapConfig())
        >>>
        >>> cache = registry.getCache("your_api_key", CacheMode.POLLING)
        >>> weather = cache.lookup("Moscow")
        >>>
        >>> # Stop using it
        >>> registry.deleteCache(cache)
    """

    _instance: Optional["CacheRegistry"] = None
    _lock = RLock()

    def __new__(cls) -> "CacheRegistry":
        """
        Create or return singleton instance with thread safety.

        Returns:
            The singleton CacheRegistry instance
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
            return cls._instance

    def __init__(self):
        """
        Initialize the registry instance.

        Only runs once due to singleton pattern.
        """
        if not hasattr(self, "initialized"):
            self._caches: Dict[str, CityCache] = {}
            self._cacheSettings: Dict[str, Any] = {}
            self._clientSettings: Dict[str, Any] = {}
            self._cacheFactory: Optional[CacheFactory] = None
            self.initialized = True
            logger.info("CacheRegistry initialized, dood!")

    @classmethod
    def getInstance(cls) -> "CacheRegistry":
        """Get singleton instance"""
        return cls()

    def loadConfig(
        self, cityCacheConfig: Dict[str, Any], openWeatherMapConfig: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Load settings for caches created after this call.

        Args:
            cityCacheConfig: [city-cache] section (max-cities, freshness-window, polling-interval)
            openWeatherMapConfig: [openweathermap] section (request-timeout, units, language, urls)
        """
        with self._lock:
            cacheSettings: Dict[str, Any] = {}
            if "max-cities" in cityCacheConfig:
                cacheSettings["maxCities"] = int(cityCacheConfig["max-cities"])
            if "freshness-window" in cityCacheConfig:
                cacheSettings["freshnessWindow"] = float(cityCacheConfig["freshness-window"])
            if "polling-interval" in cityCacheConfig:
                cacheSettings["pollingInterval"] = float(cityCacheConfig["polling-interval"])

            clientSettings: Dict[str, Any] = {}
            owmConfig = openWeatherMapConfig or {}
            if "request-timeout" in owmConfig:
                clientSettings["requestTimeout"] = float(owmConfig["request-timeout"])
            for configKey, argName in (
                ("units", "units"),
                ("language", "language"),
                ("geocoding-url", "geocodingUrl"),
                ("weather-url", "weatherUrl"),
            ):
                if owmConfig.get(configKey):
                    clientSettings[argName] = str(owmConfig[configKey])

            self._cacheSettings = cacheSettings
            self._clientSettings = clientSettings
            logger.debug(f"Loaded city cache configuration: {cacheSettings}, client: {clientSettings}")

    def setCacheFactory(self, factory: Optional[CacheFactory]) -> None:
        """
        Override how new caches are built.

        Args:
            factory: Callable (apiKey, mode) -> CityCache, None restores the default
        """
        with self._lock:
            self._cacheFactory = factory

    def getCache(self, apiKey: str, mode: CacheMode | str | None = CacheMode.ON_DEMAND) -> CityCache:
        """
        Get the cache for the API key, creating a new one if needed.

        An existing active cache is returned as is, ``mode`` only applies to
        a newly created cache.

        Args:
            apiKey: OpenWeatherMap API key
            mode: Refresh discipline of a new cache (default: ON_DEMAND)

        Returns:
            Active CityCache bound to the API key

        Raises:
            InvalidArgumentError: If apiKey is empty or mode is missing or unknown
        """
        if not isinstance(apiKey, str) or not apiKey:
            raise InvalidArgumentError("API key must be a non-empty string")
        if mode is None:
            raise InvalidArgumentError("Mode must not be None")
        if isinstance(mode, str) and not isinstance(mode, CacheMode):
            try:
                mode = CacheMode.fromStr(mode)
            except ValueError as e:
                raise InvalidArgumentError(str(e)) from e

        with self._lock:
            cache = self._caches.get(apiKey)
            if cache is None or not cache.isActive():
                if cache is not None:
                    logger.info("Replacing deactivated cache for API key")
                cache = self._createCache(apiKey, mode)
                self._caches[apiKey] = cache
                logger.info(f"Created {cache!r}, dood!")
            return cache

    def deleteCache(self, cache: Optional[CityCache]) -> bool:
        """
        Deactivate the cache and remove it from the registry.

        Args:
            cache: Cache previously returned by getCache

        Returns:
            True if the cache was registered and got removed, False otherwise
        """
        if cache is None:
            return False

        with self._lock:
            if self._caches.get(cache.getApiKey()) is not cache:
                return False
            del self._caches[cache.getApiKey()]
            cache.deactivate()
            return True

    def listApiKeys(self) -> List[str]:
        """Get API keys with registered caches (including ones deactivated by failures)"""
        with self._lock:
            return list(self._caches.keys())

    def destroy(self) -> None:
        """
        Deactivate and forget all caches.

        Should be called during application shutdown.
        """
        with self._lock:
            logger.info(f"Destroying {len(self._caches)} city caches, dood!")
            for cache in self._caches.values():
                cache.deactivate()
            self._caches.clear()

    def _createCache(self, apiKey: str, mode: CacheMode) -> CityCache:
        """Build new cache with the configured factory or from loaded settings"""
        if self._cacheFactory is not None:
            return self._cacheFactory(apiKey, mode)

        client = OpenWeatherMapClient(apiKey=apiKey, **self._clientSettings)
        return CityCache(apiKey, mode, client, client, **self._cacheSettings)
