"""Config management for Library Health.

Reads `config.ini` from DATA_DIR. DATA_DIR comes from the environment
(Docker) and defaults to the project root for standalone use.
"""

from __future__ import annotations

import configparser
import dataclasses
import os
import pathlib
import sys
from typing import Optional

from .logging_config import get_logger, resolve_level

logger = get_logger(__name__)


def _get_project_root() -> pathlib.Path:
    if getattr(sys, "frozen", False):
        return pathlib.Path(sys.executable).resolve().parent
    return pathlib.Path(__file__).resolve().parents[1]


PROJECT_ROOT = _get_project_root()

# DATA_DIR holds all persistent state (config.ini, scan_results.json, libhealth.log).
DATA_DIR = pathlib.Path(os.environ.get("DATA_DIR", str(PROJECT_ROOT)))
DEFAULT_CONFIG_PATH = DATA_DIR / "config.ini"
RESULTS_FILENAME = "scan_results.json"


@dataclasses.dataclass
class CatalogConfig:
    path: pathlib.Path


@dataclasses.dataclass
class ScannerConfig:
    """Global scan switch plus one toggle per metadata check."""

    enabled: bool = True
    check_missing_poster: bool = True
    check_missing_overview: bool = True
    check_missing_year: bool = True
    check_missing_genre: bool = True
    check_missing_subtitles: bool = False


@dataclasses.dataclass
class SubtitleConfig:
    language: str = "eng"


@dataclasses.dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8096
    log_level: str = "INFO"


@dataclasses.dataclass
class HealthConfig:
    catalog: CatalogConfig
    scanner: ScannerConfig
    subtitles: SubtitleConfig
    server: ServerConfig

    @property
    def catalog_path(self) -> pathlib.Path:
        return self.catalog.path

    @property
    def server_host(self) -> str:
        return self.server.host

    @property
    def server_port(self) -> int:
        return self.server.port

    @property
    def log_level(self) -> str:
        return self.server.log_level

    @property
    def data_dir(self) -> pathlib.Path:
        return DATA_DIR

    @property
    def results_path(self) -> pathlib.Path:
        return DATA_DIR / RESULTS_FILENAME


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _log_level(parser: configparser.ConfigParser) -> str:
    value = parser.get("server", "log_level", fallback="").strip().upper()
    if not value:
        return ServerConfig().log_level
    try:
        resolve_level(value)
    except ValueError:
        logger.warning(f"Unknown log_level {value!r} in config.ini, using INFO")
        return ServerConfig().log_level
    return value


def _check(parser: configparser.ConfigParser, key: str, default: bool) -> bool:
    return _parse_bool(parser.get("scanner", key, fallback=None), default)


def load_config(config_path: Optional[pathlib.Path] = None) -> HealthConfig:
    """Load configuration from config.ini.

    Defaults to `config.ini` in DATA_DIR.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    parser = configparser.ConfigParser()
    parser.read(path)

    catalog_path = pathlib.Path(
        parser.get("catalog", "path", fallback=str(DATA_DIR / "catalog.json"))
    ).expanduser()

    defaults = ScannerConfig()
    scanner = ScannerConfig(
        enabled=_check(parser, "enabled", defaults.enabled),
        check_missing_poster=_check(parser, "check_missing_poster", defaults.check_missing_poster),
        check_missing_overview=_check(parser, "check_missing_overview", defaults.check_missing_overview),
        check_missing_year=_check(parser, "check_missing_year", defaults.check_missing_year),
        check_missing_genre=_check(parser, "check_missing_genre", defaults.check_missing_genre),
        check_missing_subtitles=_check(
            parser, "check_missing_subtitles", defaults.check_missing_subtitles
        ),
    )

    subtitles = SubtitleConfig(
        language=parser.get("subtitles", "language", fallback="eng").strip() or "eng",
    )

    server = ServerConfig(
        host=parser.get("server", "host", fallback="0.0.0.0"),
        port=parser.getint("server", "port", fallback=8096),
        log_level=_log_level(parser),
    )

    return HealthConfig(
        catalog=CatalogConfig(path=catalog_path),
        scanner=scanner,
        subtitles=subtitles,
        server=server,
    )


def write_default_config(config_path: pathlib.Path, catalog_path: pathlib.Path) -> None:
    """Write a config.ini with default settings pointing at `catalog_path`."""
    parser = configparser.ConfigParser()
    defaults = ScannerConfig()

    parser["catalog"] = {"path": str(catalog_path.expanduser())}
    parser["scanner"] = {
        field.name: str(getattr(defaults, field.name)).lower()
        for field in dataclasses.fields(ScannerConfig)
    }
    parser["subtitles"] = {"language": SubtitleConfig().language}
    parser["server"] = {
        "host": ServerConfig().host,
        "port": str(ServerConfig().port),
        "log_level": ServerConfig().log_level,
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w") as handle:
        parser.write(handle)
    logger.debug(f"Wrote default config to {config_path}")


_cached_config: Optional[HealthConfig] = None


def get_config() -> HealthConfig:
    """Return the cached config singleton. Loads from disk on first call."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reset_config_cache() -> None:
    """Clear the cached config (useful for tests)."""
    global _cached_config
    _cached_config = None
