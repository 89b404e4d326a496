from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Protocol

from stationdb.core.log import get_logger
from stationdb.core.records import station_quality
from stationdb.core.util import read_stations

logger = get_logger(__name__)

DEFAULT_PER_PAGE = 10


class SearchCapability(Protocol):
    def __call__(self, stations_file: Path, term: str) -> List[dict]:
        ...


def paginate(found: List[dict], page: int, per_page: int) -> List[dict]:
    per_page = max(1, per_page)
    start = (max(1, page) - 1) * per_page
    return list(found)[start : start + per_page]


class LocalSearch:
    """Case-insensitive substring search over name and call sign.

    Optional country and video-quality filters narrow the matches. Results
    keep the order of the stations file; ``search`` returns one page of them.
    """

    def __init__(
        self,
        per_page: int = DEFAULT_PER_PAGE,
        countries: Iterable[str] = (),
        resolutions: Iterable[str] = (),
    ):
        self.per_page = per_page
        self.countries = {c for c in countries if c}
        self.resolutions = {r for r in resolutions if r}

    def matches(self, st: dict, term: str) -> bool:
        t = term.strip().lower()
        name = str(st.get("name") or "").lower()
        call = str(st.get("callSign") or "").lower()
        if t not in name and t not in call:
            return False

        if self.countries:
            available = set(st.get("availableIn") or [])
            if not available & self.countries:
                return False

        if self.resolutions and station_quality(st) not in self.resolutions:
            return False

        return True

    def __call__(self, stations_file: Path, term: str) -> List[dict]:
        stations = read_stations(stations_file)
        found = [st for st in stations if isinstance(st, dict) and self.matches(st, term)]
        logger.debug("Search %r matched %d stations in %s", term, len(found), stations_file)
        return found

    def search(self, stations_file: Path, term: str, page: int = 1) -> List[dict]:
        return paginate(self(stations_file, term), page, self.per_page)

    def count(self, stations_file: Path, term: str) -> int:
        return len(self(stations_file, term))
