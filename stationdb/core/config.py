from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import List, Optional

from stationdb.core import paths
from stationdb.core.log import get_logger
from stationdb.core.util import atomic_write_text

logger = get_logger(__name__)

BASE_FILENAME = "all_stations_base.json"
USER_FILENAME = "all_stations_user.json"
COMBINED_FILENAME = "all_stations_combined.json"

_PATH_FIELDS = ("base_path", "user_path", "combined_path", "logo_dir", "export_dir")

_ENV_OVERRIDES = {
    "STATIONDB_BASE": "base_path",
    "STATIONDB_USER": "user_path",
    "STATIONDB_COMBINED": "combined_path",
    "STATIONDB_LOGO_DIR": "logo_dir",
    "STATIONDB_EXPORT_DIR": "export_dir",
}


@dataclass
class DatabaseConfig:
    base_path: Path
    user_path: Path
    combined_path: Path
    logo_dir: Path
    export_dir: Path = field(default_factory=Path)
    results_per_page: int = 10
    filter_countries: List[str] = field(default_factory=list)
    filter_resolutions: List[str] = field(default_factory=list)
    log_level: Optional[str] = None

    @classmethod
    def in_directory(cls, root: Path) -> "DatabaseConfig":
        """All files under one directory; handy for tests and portable setups."""
        root = Path(root)
        return cls(
            base_path=root / BASE_FILENAME,
            user_path=root / "user_cache" / USER_FILENAME,
            combined_path=root / "cache" / COMBINED_FILENAME,
            logo_dir=root / "cache" / "logos",
            export_dir=root,
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        for name in _PATH_FIELDS:
            d[name] = str(d[name])
        return d


def config_path() -> Path:
    return paths.config_dir() / "stationdb.json"


def defaults() -> DatabaseConfig:
    data = paths.data_dir()
    cache = paths.cache_dir()
    return DatabaseConfig(
        base_path=data / BASE_FILENAME,
        user_path=data / "user_cache" / USER_FILENAME,
        combined_path=cache / COMBINED_FILENAME,
        logo_dir=cache / "logos",
        export_dir=Path.cwd(),
    )


def _from_dict(raw: dict, base: DatabaseConfig) -> DatabaseConfig:
    known = {f.name for f in fields(DatabaseConfig)}
    values = asdict(base)
    for key, value in raw.items():
        if key not in known or value is None:
            continue
        values[key] = Path(value).expanduser() if key in _PATH_FIELDS else value
    return DatabaseConfig(**values)


def ensure_exists(path: Path) -> None:
    if not path.exists():
        save_config(defaults(), path)


def load_config(path: Optional[Path] = None) -> DatabaseConfig:
    path = path or config_path()

    try:
        ensure_exists(path)
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("top level is not an object")
        config = _from_dict(raw, defaults())
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        config = defaults()

    for env, name in _ENV_OVERRIDES.items():
        value = os.environ.get(env)
        if value:
            setattr(config, name, Path(value).expanduser())

    return config


def save_config(config: DatabaseConfig, path: Optional[Path] = None) -> None:
    path = path or config_path()
    atomic_write_text(path, json.dumps(config.to_dict(), indent=2) + "\n")
