from pathlib import Path
import os

from stationdb import APP_NAME


def _xdg(var: str, fallback: Path) -> Path:
    base = os.environ.get(var)
    if base:
        return Path(base) / APP_NAME
    return fallback / APP_NAME


def data_dir() -> Path:
    return _xdg("XDG_DATA_HOME", Path.home() / ".local" / "share")


def cache_dir() -> Path:
    return _xdg("XDG_CACHE_HOME", Path.home() / ".cache")


def config_dir() -> Path:
    return _xdg("XDG_CONFIG_HOME", Path.home() / ".config")
