"""Query surface of the station database.

Everything outside ``stationdb.core`` talks to :class:`StationDatabase`;
it owns the locator, merge cache, accessor, counter and exporter and never
opens a station file itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from stationdb.core.config import DatabaseConfig
from stationdb.core.counts import AggregateCounter, Breakdown
from stationdb.core.errors import NotFoundError, StationIOError
from stationdb.core.export import FORMATS, Exporter
from stationdb.core.log import get_logger
from stationdb.core.logos import LogoCache
from stationdb.core.merge import MergeCache, merge_stations
from stationdb.core.records import RecordAccessor, station_logo
from stationdb.core.search import LocalSearch, SearchCapability, paginate
from stationdb.core.sources import CacheState, SourceLocator

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExportResult:
    path: Path
    count: int


class StationDatabase:
    def __init__(
        self,
        config: DatabaseConfig,
        search: Optional[SearchCapability] = None,
        logos: Optional[LogoCache] = None,
    ):
        self.config = config
        self.merge_cache = MergeCache(config)
        self.locator = SourceLocator(config, self.merge_cache)
        self.records = RecordAccessor(self.locator)
        self.counter = AggregateCounter(config, self.locator)
        self.exporter = Exporter(config, self.locator)
        self._search = search or LocalSearch(
            per_page=config.results_per_page,
            countries=config.filter_countries,
            resolutions=config.filter_resolutions,
        )
        self._logos = logos

    # ------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------

    def has_database(self) -> bool:
        return self.locator.fast_exists()

    def count(self) -> int:
        return self.counter.count_effective()

    def count_fast(self) -> int:
        return self.counter.count_fast()

    def breakdown(self) -> Breakdown:
        return self.counter.breakdown()

    def state(self) -> CacheState:
        return self.locator.state()

    def status(self) -> dict:
        b = self.breakdown()
        return {
            "base": b.base,
            "user": b.user,
            "total": b.total,
            "combined": self.state().value,
            "available": self.has_database(),
        }

    # ------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------

    def lookup(self, station_id: str) -> dict:
        st = self.records.get_by_id(station_id)
        if st is None:
            raise NotFoundError(station_id)
        return st

    def detail(self, station_id: str) -> str:
        return self.records.render_detail(station_id)

    def name(self, station_id: str) -> Optional[str]:
        return self.records.get_field(station_id, "name")

    def call_sign(self, station_id: str) -> Optional[str]:
        return self.records.get_field(station_id, "callSign")

    def countries(self) -> List[str]:
        return self.records.available_countries()

    def _find(self, term: str) -> List[dict]:
        path = self.locator.resolve()
        try:
            return list(self._search(path, term))
        except StationIOError:
            if not self.locator.lost_combined(path):
                raise

        # combined file removed after resolve(); search each source instead
        logger.warning("Combined database %s disappeared, searching sources directly", path)
        return merge_stations(
            self._search(self.config.base_path, term),
            self._search(self.config.user_path, term),
        )

    def search(self, term: str, page: int = 1) -> List[dict]:
        return paginate(self._find(term), page, self.config.results_per_page)

    def search_count(self, term: str) -> int:
        return len(self._find(term))

    # ------------------------------------------------------------
    # Export / maintenance
    # ------------------------------------------------------------

    def export(self, fmt: str, path: Optional[Path] = None) -> ExportResult:
        fmt = fmt.lower()
        if fmt not in FORMATS:
            raise ValueError(f"Unsupported export format: {fmt}")

        target = Path(path) if path else self.exporter.default_path(fmt)
        if fmt == "csv":
            count = self.exporter.export_csv(target)
        else:
            count = self.exporter.export_json(target)
        return ExportResult(path=target, count=count)

    def rebuild(self) -> Path:
        return self.merge_cache.rebuild()

    def invalidate(self) -> None:
        self.merge_cache.invalidate()

    def logo(self, station_id: str) -> Optional[Path]:
        uri = station_logo(self.lookup(station_id), empty="")
        if not uri:
            return None
        if self._logos is None:
            self._logos = LogoCache(self.config)
        return self._logos.fetch(station_id, uri)
