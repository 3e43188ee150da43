"""Configuration management for map loading, cache building and queries."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class MapConfig:
    """Map file settings."""

    file: str = "prt_fild02.fld2"


@dataclass
class CacheConfig:
    """Path cache settings."""

    file: str = "./data/paths_cache.json"
    # zlib-compress the JSON cache file
    compress: bool = False
    # Skip A* for pairs in different connected regions
    prune_unreachable: bool = True
    # Log a progress line every N start tiles (0 = off)
    progress_interval: int = 1000
    # Pretty-print uncompressed cache files
    indent: Optional[int] = None


@dataclass
class QueryConfig:
    """Query answering settings."""

    # Run a live A* search when the cache has no entry
    fallback_to_search: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


@dataclass
class Config:
    """Main configuration container."""

    map: MapConfig = field(default_factory=MapConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    query: QueryConfig = field(default_factory=QueryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


SECTIONS = {
    "map": MapConfig,
    "cache": CacheConfig,
    "query": QueryConfig,
    "logging": LoggingConfig,
}


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# Environment variable -> (config section, attribute, converter)
ENV_OVERRIDES = {
    "FIELDPATH_MAP_FILE": ("map", "file", str),
    "FIELDPATH_CACHE_FILE": ("cache", "file", str),
    "FIELDPATH_CACHE_COMPRESS": ("cache", "compress", _env_flag),
    "FIELDPATH_LOG_LEVEL": ("logging", "level", str.upper),
}


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. Defaults to config/default.yaml

    Returns:
        Populated Config dataclass
    """
    if config_path is None:
        # Look for config in standard locations
        candidates = [
            Path("config/default.yaml"),
            Path(__file__).parent.parent / "config" / "default.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                config_path = str(candidate)
                break

    config = Config()

    if config_path and Path(config_path).exists():
        with open(config_path) as f:
            data = yaml.safe_load(f)

        for section, section_cls in SECTIONS.items():
            if data and data.get(section):
                setattr(config, section, section_cls(**data[section]))
    elif config_path:
        logger.warning(f"Config file not found: {config_path}, using defaults")

    for name, (section, attr, convert) in ENV_OVERRIDES.items():
        value = os.environ.get(name)
        if value:
            setattr(getattr(config, section), attr, convert(value))
            logger.debug(f"{name} overrides {section}.{attr}")

    return config


def setup_logging(config: LoggingConfig) -> None:
    """
    Configure logging based on configuration.

    Args:
        config: Logging configuration
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if config.file:
        # Ensure log directory exists
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))

    logging.basicConfig(
        level=level,
        format=config.format,
        handlers=handlers,
        force=True,
    )

    logger.info(f"Logging configured at level {config.level}")
