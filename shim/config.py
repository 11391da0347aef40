"""
Shim configuration.

Precedence (lowest to highest):
- built-in defaults
- optional JSON config file
- environment variables
- explicit CLI overrides

Environment variables:
    MAX_RAW_SIZE    body limit in raw mode (default "100kb")
    MAX_JSON_SIZE   body limit for JSON bodies (default "100kb")
    RAW_BODY        "true" reads every body as raw bytes
    http_port       listen port (default 3000)
    http_host       listen host (default 0.0.0.0)
    APP_MODULE      application module, file path or dotted name
    RESOURCES_DIR   directory served for resource requests
    LOG_LEVEL       minimum log level (default INFO)
    LOG_DIR         directory for rotating log files (unset = console only)
"""

import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import orjson


DEFAULT_MAX_SIZE = '100kb'

_UNITS = {
    'b': 1,
    'kb': 1 << 10,
    'mb': 1 << 20,
    'gb': 1 << 30,
    'tb': 1 << 40,
    'pb': 1 << 50,
}

_SIZE_PATTERN = re.compile(r'^\s*((?:-|\+)?\d+(?:\.\d+)?)\s*(b|kb|mb|gb|tb|pb)?\s*$', re.IGNORECASE)

# env var -> config field
_ENV_FIELDS = {
    'MAX_RAW_SIZE': 'maxRawSize',
    'MAX_JSON_SIZE': 'maxJsonSize',
    'RAW_BODY': 'rawBody',
    'http_port': 'port',
    'http_host': 'host',
    'APP_MODULE': 'appModule',
    'RESOURCES_DIR': 'resourcesDir',
    'LOG_LEVEL': 'logLevel',
    'LOG_DIR': 'logDir',
}


class ConfigError(ValueError):
    """Invalid configuration value"""


def parseByteSize(value: Any) -> int:
    """
    Parse a human byte size like "100kb" or "1.5mb" into bytes.

    Units are 1024-based and case-insensitive; a bare number is bytes.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid byte size: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ConfigError(f"Invalid byte size: {value!r}")
        return value

    match = _SIZE_PATTERN.match(str(value))
    if not match:
        raise ConfigError(f"Invalid byte size: {value!r}")

    number = float(match.group(1))
    unit = (match.group(2) or 'b').lower()
    size = int(number * _UNITS[unit])
    if size < 0:
        raise ConfigError(f"Invalid byte size: {value!r}")
    return size


def _parseBool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    # Only the literal "true" switches raw mode on
    return str(value) == 'true'


def _parsePort(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid port: {value!r}")
    if not 0 <= port <= 65535:
        raise ConfigError(f"Invalid port: {value!r}")
    return port


@dataclass(frozen=True)
class ShimConfig:
    """Resolved shim configuration"""
    host: str = '0.0.0.0'
    port: int = 3000
    rawBody: bool = False
    maxRawSize: int = 100 * 1024
    maxJsonSize: int = 100 * 1024
    maxTextSize: int = 100 * 1024  # text and urlencoded bodies
    appModule: str = 'function/handler.py'
    resourcesDir: Path = Path('./resources')
    logLevel: str = 'INFO'
    logDir: Optional[str] = None

    @property
    def clientMaxSize(self) -> int:
        """Largest body any parser accepts; aiohttp's own cap"""
        if self.rawBody:
            return self.maxRawSize
        return max(self.maxJsonSize, self.maxTextSize)

    def withOverrides(self, **overrides) -> 'ShimConfig':
        """Return a copy with the given non-None values applied"""
        return _coerce(self, {k: v for k, v in overrides.items() if v is not None})


def _coerce(base: ShimConfig, values: Mapping[str, Any]) -> ShimConfig:
    known = {f.name for f in fields(ShimConfig)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    updates: Dict[str, Any] = {}
    for key, value in values.items():
        if key in ('maxRawSize', 'maxJsonSize', 'maxTextSize'):
            updates[key] = parseByteSize(value)
        elif key == 'port':
            updates[key] = _parsePort(value)
        elif key == 'rawBody':
            updates[key] = _parseBool(value)
        elif key == 'resourcesDir':
            updates[key] = Path(value)
        elif key == 'logDir':
            updates[key] = str(value) if value else None
        else:
            updates[key] = str(value)
    return replace(base, **updates)


def loadConfigFile(configPath: str) -> dict:
    """Load configuration from JSON file"""
    try:
        with open(configPath, 'rb') as f:
            data = orjson.loads(f.read())
    except OSError as e:
        raise ConfigError(f"Cannot read config file {configPath}: {e}")
    except orjson.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in config file {configPath}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {configPath} must contain a JSON object")
    return data


def loadConfig(env: Optional[Mapping[str, str]] = None, configPath: Optional[str] = None) -> ShimConfig:
    """
    Build the shim configuration.

    Args:
        env: Environment mapping (defaults to os.environ)
        configPath: Optional JSON file with ShimConfig field names as keys

    Returns:
        Resolved ShimConfig

    Raises:
        ConfigError: On unreadable files or invalid values
    """
    if env is None:
        env = os.environ

    config = ShimConfig()

    if configPath:
        config = _coerce(config, loadConfigFile(configPath))

    envValues = {
        field: env[name]
        for name, field in _ENV_FIELDS.items()
        if env.get(name) not in (None, '')
    }
    return _coerce(config, envValues)
