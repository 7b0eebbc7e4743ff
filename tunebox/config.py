"""
TuneBox Configuration System.

Priority order (highest to lowest):
1. Command-line arguments
2. Environment variables
3. Configuration file (YAML)
4. Default values
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)


# Valid log levels
VALID_LOG_LEVELS = {"debug", "info", "warning", "error"}

# Renderer types that can be built from config
VALID_RENDERER_TYPES = {"simulated"}

# Environment variable mappings
ENV_MAPPINGS = {
    # Player
    "TUNEBOX_DEFAULT_VOLUME": ("player", "default_volume"),
    "TUNEBOX_HISTORY_LIMIT": ("player", "history_limit"),
    "TUNEBOX_AUTO_ADVANCE_DELAY": ("player", "auto_advance_delay"),
    "TUNEBOX_PAUSE_ON_ERROR": ("player", "pause_on_error"),
    "TUNEBOX_SHUFFLE_SEED": ("player", "shuffle_seed"),
    # Renderer
    "TUNEBOX_RENDERER": ("renderer", "type"),
    "TUNEBOX_TICK_INTERVAL": ("renderer", "tick_interval"),
    # Server
    "TUNEBOX_SERVER_ENABLED": ("server", "enabled"),
    "TUNEBOX_BIND": ("server", "bind_address"),
    "TUNEBOX_HTTP_PORT": ("server", "http_port"),
    # Library
    "TUNEBOX_LIBRARY": ("library", "path"),
    # Logging
    "TUNEBOX_LOG_LEVEL": ("logging", "level"),
}

_INT_ENV_VARS = {"TUNEBOX_HISTORY_LIMIT", "TUNEBOX_SHUFFLE_SEED", "TUNEBOX_HTTP_PORT"}
_FLOAT_ENV_VARS = {"TUNEBOX_DEFAULT_VOLUME", "TUNEBOX_AUTO_ADVANCE_DELAY", "TUNEBOX_TICK_INTERVAL"}
_BOOL_ENV_VARS = {"TUNEBOX_PAUSE_ON_ERROR", "TUNEBOX_SERVER_ENABLED"}

# Top-level sections of the config file
CONFIG_SECTIONS = ("player", "renderer", "server", "library", "logging")

# Accepted value types per (section, key)
FIELD_TYPES: dict[tuple[str, str], tuple[type, ...]] = {
    ("player", "default_volume"): (int, float),
    ("player", "history_limit"): (int,),
    ("player", "auto_advance_delay"): (int, float),
    ("player", "auto_advance_threshold"): (int, float),
    ("player", "pause_on_error"): (bool,),
    ("player", "shuffle_seed"): (int, type(None)),
    ("renderer", "type"): (str,),
    ("renderer", "tick_interval"): (int, float),
    ("server", "enabled"): (bool,),
    ("server", "bind_address"): (str,),
    ("server", "http_port"): (int,),
    ("library", "path"): (str,),
    ("logging", "level"): (str,),
}


class ConfigError(Exception):
    """Configuration error."""

    pass


@dataclass
class PlayerConfig:
    """Playback controller configuration."""

    default_volume: float = 0.7
    history_limit: int = 50
    auto_advance_delay: float = 0.5  # seconds
    auto_advance_threshold: float = 0.999
    pause_on_error: bool = False
    shuffle_seed: Optional[int] = None


@dataclass
class RendererConfig:
    """Audio renderer configuration."""

    type: str = "simulated"
    tick_interval: float = 0.25  # seconds between position reports


@dataclass
class ServerConfig:
    """Control server configuration."""

    enabled: bool = True
    bind_address: str = "127.0.0.1"
    http_port: int = 8690


@dataclass
class LibraryConfig:
    """Track library configuration."""

    path: str = ""  # Empty means start with an empty library


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class Config:
    """Complete TuneBox configuration."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    renderer: RendererConfig = field(default_factory=RendererConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def validate_port(port: int) -> bool:
    """Validate port number."""
    return 1 <= port <= 65535


def _type_errors(config: Config) -> list[str]:
    """Check every field against its expected type."""
    errors = []
    for (section, key), expected in FIELD_TYPES.items():
        value = getattr(getattr(config, section), key)
        # bool is an int subclass but never a valid number here
        if isinstance(value, bool) and bool not in expected:
            ok = False
        else:
            ok = isinstance(value, expected)
        if not ok:
            names = " or ".join(t.__name__ for t in expected if t is not type(None))
            errors.append(f"Invalid {section}.{key}: {value!r}. Must be {names}")
    return errors


def validate_config(config: Config) -> None:
    """
    Validate configuration.

    Raises:
        ConfigError: If configuration is invalid
    """
    # Range checks below assume the right types
    errors = _type_errors(config)
    if errors:
        raise ConfigError("Configuration validation failed:\n  - " + "\n  - ".join(errors))

    # Player
    player = config.player
    if not 0.0 <= player.default_volume <= 1.0:
        errors.append(f"Invalid default_volume: {player.default_volume}. Must be within 0.0-1.0")
    if player.history_limit < 1:
        errors.append(f"Invalid history_limit: {player.history_limit}. Must be at least 1")
    if player.auto_advance_delay < 0:
        errors.append(f"Invalid auto_advance_delay: {player.auto_advance_delay}")
    if not 0.0 < player.auto_advance_threshold <= 1.0:
        errors.append(
            f"Invalid auto_advance_threshold: {player.auto_advance_threshold}. "
            "Must be within (0.0, 1.0]"
        )

    # Renderer
    if config.renderer.type not in VALID_RENDERER_TYPES:
        errors.append(
            f"Unknown renderer type: {config.renderer.type}. "
            f"Valid values: {sorted(VALID_RENDERER_TYPES)}"
        )
    if config.renderer.tick_interval <= 0:
        errors.append(f"Invalid tick_interval: {config.renderer.tick_interval}")

    # Server
    if config.server.enabled and not validate_port(config.server.http_port):
        errors.append(f"Invalid HTTP port: {config.server.http_port}")

    # Logging
    if config.logging.level.lower() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid log level: {config.logging.level}. "
            f"Valid values: {sorted(VALID_LOG_LEVELS)}"
        )

    if errors:
        raise ConfigError("Configuration validation failed:\n  - " + "\n  - ".join(errors))


def load_yaml_config(path: Path) -> dict:
    """
    Load configuration from YAML file.

    Args:
        path: Path to YAML file

    Returns:
        Configuration dictionary

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    if not path.exists():
        logger.debug(f"Config file not found: {path}")
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML config: {e}")
    except IOError as e:
        raise ConfigError(f"Error reading config file: {e}")

    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a mapping, got {type(data).__name__}")
    return data


def _set_nested(d: dict, path: tuple, value: Any) -> None:
    """Set a nested dictionary value using a path tuple."""
    for key in path[:-1]:
        d = d.setdefault(key, {})
    d[path[-1]] = value


def load_env_config() -> dict:
    """
    Load configuration from environment variables.

    Returns:
        Configuration dictionary with values from environment
    """
    result: dict = {}

    for env_var, path in ENV_MAPPINGS.items():
        value: Any = os.environ.get(env_var)
        if value is None:
            continue

        if env_var in _INT_ENV_VARS:
            try:
                value = int(value)
            except ValueError:
                logger.warning(f"Invalid integer for {env_var}: {value}")
                continue
        elif env_var in _FLOAT_ENV_VARS:
            try:
                value = float(value)
            except ValueError:
                logger.warning(f"Invalid number for {env_var}: {value}")
                continue
        elif env_var in _BOOL_ENV_VARS:
            value = value.lower() in ("true", "1", "yes", "on")

        _set_nested(result, path, value)

    return result


def _deep_merge(base: dict, override: dict) -> None:
    """Recursively merge override into base."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def merge_configs(*configs: dict) -> dict:
    """
    Deep merge multiple configuration dictionaries.
    Later configs override earlier ones.
    """
    result: dict = {}
    for config in configs:
        _deep_merge(result, config)
    return result


def dict_to_config(d: dict) -> Config:
    """
    Convert a dictionary to Config dataclass.

    Raises:
        ConfigError: If a section is not a mapping
    """
    bad_sections = [name for name in CONFIG_SECTIONS if name in d and not isinstance(d[name], dict)]
    if bad_sections:
        raise ConfigError(
            "Configuration validation failed:\n  - "
            + "\n  - ".join(f"Section '{name}' must be a mapping" for name in bad_sections)
        )

    config = Config()

    # Player
    if "player" in d:
        p = d["player"]
        player = config.player
        player.default_volume = p.get("default_volume", player.default_volume)
        player.history_limit = p.get("history_limit", player.history_limit)
        player.auto_advance_delay = p.get("auto_advance_delay", player.auto_advance_delay)
        player.auto_advance_threshold = p.get(
            "auto_advance_threshold", player.auto_advance_threshold
        )
        player.pause_on_error = p.get("pause_on_error", player.pause_on_error)
        player.shuffle_seed = p.get("shuffle_seed", player.shuffle_seed)

    # Renderer
    if "renderer" in d:
        r = d["renderer"]
        config.renderer.type = r.get("type", config.renderer.type)
        config.renderer.tick_interval = r.get("tick_interval", config.renderer.tick_interval)

    # Server
    if "server" in d:
        s = d["server"]
        config.server.enabled = s.get("enabled", config.server.enabled)
        config.server.bind_address = s.get("bind_address", config.server.bind_address)
        config.server.http_port = s.get("http_port", config.server.http_port)

    # Library
    if "library" in d:
        config.library.path = d["library"].get("path", config.library.path)

    # Logging
    if "logging" in d:
        config.logging.level = d["logging"].get("level", config.logging.level)

    return config


def load_config(
    config_path: Optional[Path] = None,
    cli_args: Optional[dict] = None,
) -> Config:
    """
    Load configuration from all sources.

    Priority (highest to lowest):
    1. CLI arguments
    2. Environment variables
    3. Config file
    4. Defaults

    Args:
        config_path: Path to YAML config file
        cli_args: Dictionary of CLI arguments

    Returns:
        Merged Config object

    Raises:
        ConfigError: If configuration is invalid
    """
    configs = []

    # 1. Load from file (lowest priority of explicit configs)
    if config_path:
        file_config = load_yaml_config(config_path)
        if file_config:
            configs.append(file_config)
            logger.debug(f"Loaded config from {config_path}")

    # 2. Load from environment
    env_config = load_env_config()
    if env_config:
        configs.append(env_config)
        logger.debug("Loaded config from environment variables")

    # 3. Load from CLI (highest priority)
    if cli_args:
        configs.append(cli_args)
        logger.debug("Loaded config from CLI arguments")

    merged = merge_configs(*configs) if configs else {}

    # Convert to Config object (fills in defaults)
    config = dict_to_config(merged)

    validate_config(config)

    return config
