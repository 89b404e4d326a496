import json
import os
from pathlib import Path
from typing import List, Optional

import pytest

from stationdb.core.config import DatabaseConfig
from stationdb.core.database import StationDatabase


def make_station(sid: str, name: Optional[str] = None, countries=("US",), **extra) -> dict:
    st = {
        "stationId": sid,
        "name": name if name is not None else f"Station {sid}",
        "callSign": f"K{sid}",
        "videoQuality": {"videoType": "HDTV"},
        "availableIn": list(countries),
        "preferredImage": {"uri": f"https://logos.example/{sid}.png"},
    }
    st.update(extra)
    return st


def write_stations(path: Path, stations: List[dict], mtime: Optional[int] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(stations, indent=2))
    if mtime is not None:
        os.utime(path, ns=(mtime, mtime))
    return path


def set_mtime(path: Path, mtime: int) -> None:
    os.utime(path, ns=(mtime, mtime))


@pytest.fixture
def config(tmp_path: Path) -> DatabaseConfig:
    return DatabaseConfig.in_directory(tmp_path)


@pytest.fixture
def db(config: DatabaseConfig) -> StationDatabase:
    return StationDatabase(config)


@pytest.fixture
def base_and_user(config: DatabaseConfig):
    """Ten base stations and three user stations, one sharing an ID with base."""
    base = [make_station(f"{i:03}") for i in range(10)]
    user = [
        make_station("005", countries=["CA"]),
        make_station("100", name="User One"),
        make_station("101", name="User Two"),
    ]
    write_stations(config.base_path, base, mtime=1_000_000_000_000_000_000)
    write_stations(config.user_path, user, mtime=1_000_000_000_000_000_000)
    return base, user
