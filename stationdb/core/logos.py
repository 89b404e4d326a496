from __future__ import annotations

import mimetypes
import re
from pathlib import Path
from typing import Optional

import requests

from stationdb.core.config import DatabaseConfig
from stationdb.core.errors import StationIOError
from stationdb.core.log import get_logger
from stationdb.core.util import atomic_write_bytes

logger = get_logger(__name__)

TIMEOUT = 10

_SUFFIXES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}


def _safe_name(station_id: str) -> str:
    return re.sub(r"[^\w.-]", "_", station_id)


def suffix_for(content_type: str) -> str:
    ctype = content_type.split(";", 1)[0].strip().lower()
    return _SUFFIXES.get(ctype) or mimetypes.guess_extension(ctype) or ".img"


class LogoCache:
    """Station logos downloaded once into ``config.logo_dir``."""

    def __init__(self, config: DatabaseConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def path_for(self, station_id: str, content_type: str = "image/png") -> Path:
        return self.config.logo_dir / f"{_safe_name(station_id)}{suffix_for(content_type)}"

    def cached(self, station_id: str) -> Optional[Path]:
        name = _safe_name(station_id)
        if not self.config.logo_dir.is_dir():
            return None
        for p in sorted(self.config.logo_dir.glob(f"{name}.*")):
            if p.is_file() and p.stem == name:
                return p
        return None

    def fetch(self, station_id: str, uri: str) -> Optional[Path]:
        found = self.cached(station_id)
        if found is not None:
            return found

        try:
            r = self.session.get(uri, timeout=TIMEOUT)
            r.raise_for_status()
        except requests.RequestException as e:
            raise StationIOError(uri, f"logo download failed ({e})") from e

        ctype = r.headers.get("Content-Type", "")
        if not ctype.startswith("image/"):
            logger.info("Skipping logo for %s: %s is %r", station_id, uri, ctype)
            return None

        path = self.path_for(station_id, ctype)
        try:
            atomic_write_bytes(path, r.content)
        except OSError as e:
            raise StationIOError(path, f"cannot save logo ({e})") from e
        return path
