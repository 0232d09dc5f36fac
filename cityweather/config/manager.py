"""
Configuration management for cityweather.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

from .. import utils
from ..errors import ConfigError

logger = logging.getLogger(__name__)


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace environment variable placeholder with actual value.

    Args:
        match: A regex match object containing the environment variable name.

    Returns:
        str: The value of the environment variable or the original placeholder
             if the variable is not set.
    """
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} placeholders in strings, dicts and lists."""
    if isinstance(value, str):
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}", replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


def mergeConfigs(baseConfig: Dict[str, Any], newConfig: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two configuration dictionaries, values of newConfig win, dood!"""
    merged = baseConfig.copy()

    for key, value in newConfig.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = mergeConfigs(merged[key], value)
        else:
            merged[key] = value

    return merged


class ConfigManager:
    """Loads TOML configuration of city weather caches, dood!

    Main config file is read first, then every *.toml from configDirs
    (recursively, sorted by path) is merged on top of it.

    Example:
        >>> configManager = ConfigManager("config.toml", configDirs=["configs/"])
        >>> initLogging(configManager.getLoggingConfig())
        >>> registry = CacheRegistry.getInstance()
        >>> registry.loadConfig(configManager.getCityCacheConfig(), configManager.getOpenWeatherMapConfig())
        >>> cache = registry.getCache(configManager.getApiKey())
    """

    def __init__(
        self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None, dotEnvFile: str = ".env"
    ):
        """Initialize ConfigManager with config file path and optional config directories.

        Args:
            configPath: Path to main TOML file
            configDirs: Directories with additional TOML files
            dotEnvFile: .env file loaded into environment before substitution (skipped if missing)

        Raises:
            ConfigError: If nothing can be loaded or a TOML file is invalid
        """
        self.configPath = configPath
        self.configDirs = configDirs or []
        if dotEnvFile and Path(dotEnvFile).is_file():
            utils.load_dotenv(path=dotEnvFile)
        self.config: Dict[str, Any] = substituteEnvVars(self._loadConfig())

    def _findTomlFilesRecursive(self, directory: str) -> List[Path]:
        """Recursively find all .toml files in a directory, dood!"""
        dirPath = Path(directory)

        if not dirPath.is_dir():
            logger.warning(f"Config directory {directory} does not exist or is not a directory, skipping, dood!")
            return []

        tomlFiles = [tomlFile for tomlFile in dirPath.rglob("*.toml") if tomlFile.is_file()]
        for tomlFile in tomlFiles:
            logger.debug(f"Found config file: {tomlFile}")
        return sorted(tomlFiles)

    def _readToml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "rb") as f:
                return tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            logger.error(f"Failed to load config file {path}: {e}")
            raise ConfigError(f"Failed to load config file {path}: {e}") from e

    def _loadConfig(self) -> Dict[str, Any]:
        """Load configuration from TOML file and optional config directories."""
        configFile = Path(self.configPath)
        hasConfigFile = configFile.exists()
        if not hasConfigFile and not self.configDirs:
            logger.error(f"Configuration file {self.configPath} not found!")
            raise ConfigError(f"Configuration file {self.configPath} not found")

        config: Dict[str, Any] = {}
        if hasConfigFile:
            config = self._readToml(configFile)
            logger.info(f"Loaded main config from {self.configPath}")

        for configDir in self.configDirs:
            tomlFiles = self._findTomlFilesRecursive(configDir)
            logger.info(f"Found {len(tomlFiles)} .toml files in {configDir}")

            for tomlFile in tomlFiles:
                config = mergeConfigs(config, self._readToml(tomlFile))
                logger.info(f"Merged config from {tomlFile}")

        logger.info("Configuration loaded and merged successfully, dood!")
        return config

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by key."""
        return self.config.get(key, default)

    def getLoggingConfig(self) -> Dict[str, Any]:
        """Get logging-specific configuration."""
        return self.get("logging", {})

    def getOpenWeatherMapConfig(self) -> Dict[str, Any]:
        """
        Get OpenWeatherMap configuration

        Returns:
            Dict with OpenWeatherMap settings (api-key, request-timeout, units, language, urls)
        """
        return self.get("openweathermap", {})

    def getCityCacheConfig(self) -> Dict[str, Any]:
        """
        Get city cache configuration

        Returns:
            Dict with cache settings (max-cities, freshness-window, polling-interval)
        """
        return self.get("city-cache", {})

    def getApiKey(self) -> str:
        """Get OpenWeatherMap API key.

        Raises:
            ConfigError: If the key is missing or the placeholder was not substituted
        """
        apiKey = self.getOpenWeatherMapConfig().get("api-key", "")
        if not apiKey or apiKey.startswith("${"):
            logger.error("Please set your OpenWeatherMap API key in config.toml!")
            raise ConfigError("OpenWeatherMap API key is not configured")
        return apiKey
