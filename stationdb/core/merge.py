from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from stationdb.core.config import DatabaseConfig
from stationdb.core.errors import MalformedSourceError, NoDatabaseError, StationIOError
from stationdb.core.log import get_logger
from stationdb.core.util import atomic_write_text, dump_stations, is_present, read_stations

logger = get_logger(__name__)


# ------------------------------------------------------------
# Merge policy
# ------------------------------------------------------------

def _merge_group(group: List[dict]) -> dict:
    primary = group[0]
    if len(group) == 1:
        return primary

    countries = sorted(
        {
            c
            for st in group
            for c in (st.get("availableIn") or [])
            if isinstance(c, str) and c
        }
    )

    first_trace = next(
        (t for st in group for t in (st.get("lineupTracing") or [])),
        None,
    )
    traces = []
    if isinstance(first_trace, dict):
        traces = [{**first_trace, "discoveredOrder": 1, "isPrimary": True}]

    return {
        **primary,
        "availableIn": countries,
        "multiCountry": len(countries) > 1,
        "lineupTracing": traces,
        "source": "combined",
    }


def merge_stations(base: List[dict], user: List[dict]) -> List[dict]:
    """Combine base and user records into one list.

    Records sharing a stationId collapse into the first one seen (base wins
    over user) with the union of their countries. Records without an id are
    kept as they are. The result is ordered by name.
    """
    groups: Dict[str, List[dict]] = {}
    order: List[List[dict]] = []

    for st in list(base) + list(user):
        if not isinstance(st, dict):
            continue
        sid = st.get("stationId")
        if sid is None or sid == "":
            order.append([st])
            continue
        key = str(sid)
        if key not in groups:
            groups[key] = []
            order.append(groups[key])
        groups[key].append(st)

    merged = [_merge_group(g) for g in order]
    merged.sort(key=lambda st: str(st.get("name") or ""))
    return merged


def validate_stations(path: Path, stations: List[dict]) -> None:
    """Reject files still using the single ``country`` field."""
    legacy = sum(
        1
        for st in stations
        if isinstance(st, dict) and st.get("country") and not st.get("availableIn")
    )
    if legacy:
        raise MalformedSourceError(
            path, f"{legacy} legacy format station(s) without an availableIn list"
        )


# ------------------------------------------------------------
# Combined cache file
# ------------------------------------------------------------

class MergeCache:
    def __init__(self, config: DatabaseConfig):
        self.config = config

    @property
    def path(self) -> Path:
        return self.config.combined_path

    def _read_source(self, path: Path) -> Optional[List[dict]]:
        if not is_present(path):
            return None
        stations = read_stations(path)
        validate_stations(path, stations)
        return stations

    def rebuild(self) -> Path:
        base = self._read_source(self.config.base_path)
        user = self._read_source(self.config.user_path)
        if base is None and user is None:
            raise NoDatabaseError(self.config.base_path, self.config.user_path)

        merged = merge_stations(base or [], user or [])
        try:
            atomic_write_text(self.path, dump_stations(merged))
        except OSError as e:
            raise StationIOError(self.path, f"cannot write combined database ({e})") from e

        logger.info(
            "Rebuilt %s: %d base + %d user -> %d stations",
            self.path,
            len(base or []),
            len(user or []),
            len(merged),
        )
        return self.path

    def invalidate(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StationIOError(self.path, f"cannot remove combined database ({e})") from e
        logger.info("Removed combined database %s", self.path)
