from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from stationdb.core.config import DatabaseConfig
from stationdb.core.errors import StationDBError
from stationdb.core.log import get_logger
from stationdb.core.sources import SourceLocator
from stationdb.core.util import is_present, read_stations

logger = get_logger(__name__)


@dataclass(frozen=True)
class Breakdown:
    base: int
    user: int
    total: int

    def __str__(self) -> str:
        return f"Base: {self.base} | User: {self.user} | Total: {self.total}"


class AggregateCounter:
    """Station counts that degrade to zero per source instead of failing.

    A missing, unreadable or malformed file contributes 0 to its own count;
    the reason is logged so the zero never hides an error silently.
    """

    def __init__(self, config: DatabaseConfig, locator: SourceLocator):
        self.config = config
        self.locator = locator

    def count_source(self, path: Path) -> int:
        if not is_present(path):
            return 0
        try:
            return len(read_stations(path))
        except StationDBError as e:
            logger.warning("Counting %s as 0: %s", path, e)
            return 0

    def count_effective(self) -> int:
        try:
            return len(self.locator.load_effective())
        except StationDBError as e:
            logger.warning("Station count unavailable: %s", e)
            return 0

    def count_fast(self) -> int:
        return self.count_source(self.config.base_path) + self.count_source(
            self.config.user_path
        )

    def breakdown(self) -> Breakdown:
        base = self.count_source(self.config.base_path)
        user = self.count_source(self.config.user_path)
        if is_present(self.config.combined_path):
            total = self.count_source(self.config.combined_path)
        else:
            total = base + user
        return Breakdown(base=base, user=user, total=total)
