"""
Logging setup for cityweather applications.

Everything is driven by the [logging] table of config.toml:

    [logging]
    level = "INFO"
    console = true
    console-level = "WARNING"
    file = "logs/cityweather.log"
    file-level = "DEBUG"
    rotate = true
    backup-count = 7
    quiet-loggers = ["httpx", "httpcore"]

    [logging.logger."cityweather.city_cache"]
    level = "DEBUG"

Sub-tables of [logging.logger] accept the same keys as the root table.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)

# Polling threads write into the same log as their callers, so thread name is part of the record
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s"

# Libraries logging every HTTP request on INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def getLogLevelByStr(levelStr: str, default: Optional[int] = None) -> Optional[int]:
    """Get numeric log level by its name ("debug", "INFO", ...)."""
    level = logging.getLevelName(levelStr.upper())
    if isinstance(level, int):
        return level
    logger.error(f"Invalid log level '{levelStr}'")
    return default


def _resolveLevel(config: Dict[str, Any], key: str, fallback: int) -> int:
    value = config.get(key)
    if value is None:
        return fallback
    level = getLogLevelByStr(value, fallback)
    return fallback if level is None else level


def _openLogFile(config: Dict[str, Any]) -> logging.Handler:
    """Create plain or daily rotating handler for config["file"]"""
    logFile = Path(config["file"])
    logFile.parent.mkdir(parents=True, exist_ok=True)
    if not config.get("rotate", False):
        return logging.FileHandler(logFile, encoding="utf-8")
    return TimedRotatingFileHandler(
        filename=logFile,
        when="midnight",
        backupCount=int(config.get("backup-count", 7)),
        encoding="utf-8",
    )


def _attachHandler(
    localLogger: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter, target: str
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    localLogger.addHandler(handler)
    logger.info(f"{localLogger.name or 'root'} logs to {target} at {logging.getLevelName(level)}")


def configureLogger(localLogger: logging.Logger, config: Dict[str, Any]) -> None:
    """
    Apply one logging table to the logger.

    Existing handlers of the logger are replaced. A file that cannot be
    opened is reported and skipped, console logging still works then.
    """
    if "propagate" in config:
        localLogger.propagate = bool(config["propagate"])

    ownLevel = getLogLevelByStr(config["level"]) if "level" in config else None
    if ownLevel is not None:
        localLogger.setLevel(ownLevel)
    effectiveLevel = localLogger.getEffectiveLevel()

    for handler in list(localLogger.handlers):
        localLogger.removeHandler(handler)

    formatter = logging.Formatter(config.get("format", DEFAULT_FORMAT))

    if config.get("console", False):
        level = _resolveLevel(config, "console-level", effectiveLevel)
        _attachHandler(localLogger, logging.StreamHandler(), level, formatter, "console")

    if "file" in config:
        level = _resolveLevel(config, "file-level", effectiveLevel)
        try:
            fileHandler = _openLogFile(config)
        except OSError as e:
            logger.error(f"Cannot open log file {config['file']} for {localLogger.name}: {e}")
        else:
            _attachHandler(localLogger, fileHandler, level, formatter, f"file {config['file']}")


def quietLoggers(names: Iterable[str], rootLevel: int) -> None:
    """Raise listed loggers to WARNING unless the root logger is already that strict."""
    if rootLevel >= logging.WARNING:
        return
    for name in names:
        logging.getLogger(name).setLevel(logging.WARNING)


def initLogging(config: Dict[str, Any]) -> None:
    """Configure root logger and named loggers from the [logging] table."""
    rootLogger = logging.getLogger()
    rootLogger.setLevel(logging.INFO)
    configureLogger(rootLogger, config)

    rootLevel = rootLogger.getEffectiveLevel()
    quietLoggers(config.get("quiet-loggers", NOISY_LOGGERS), rootLevel)

    for loggerName, loggerConfig in config.get("logger", {}).items():
        configureLogger(logging.getLogger(loggerName), loggerConfig)

    logger.info(f"Logging configured, root level: {logging.getLevelName(rootLevel)}, dood!")
