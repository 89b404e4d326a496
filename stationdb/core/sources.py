from __future__ import annotations

import enum
from pathlib import Path
from typing import List

from stationdb.core.config import DatabaseConfig
from stationdb.core.errors import MalformedSourceError, NoDatabaseError, StationIOError
from stationdb.core.log import get_logger
from stationdb.core.merge import MergeCache, merge_stations
from stationdb.core.util import is_present, mtime_ns, read_stations

logger = get_logger(__name__)


class CacheState(enum.Enum):
    FRESH = "fresh"
    STALE = "stale"
    ABSENT = "absent"


class SourceLocator:
    """Decides which station file a query reads."""

    def __init__(self, config: DatabaseConfig, merge_cache: MergeCache):
        self.config = config
        self.merge_cache = merge_cache

    def state(self) -> CacheState:
        combined = self.config.combined_path
        if not is_present(combined):
            return CacheState.ABSENT

        inputs = [
            mtime_ns(p)
            for p in (self.config.base_path, self.config.user_path)
            if is_present(p)
        ]
        if mtime_ns(combined) >= max(inputs, default=0):
            return CacheState.FRESH
        return CacheState.STALE

    def fast_exists(self) -> bool:
        return is_present(self.config.base_path) or is_present(self.config.user_path)

    def resolve(self) -> Path:
        has_base = is_present(self.config.base_path)
        has_user = is_present(self.config.user_path)

        if has_base and has_user:
            state = self.state()
            if state is CacheState.FRESH:
                logger.debug("Using combined database %s", self.config.combined_path)
                return self.config.combined_path
            logger.debug("Combined database is %s, rebuilding", state.value)
            try:
                return self.merge_cache.rebuild()
            except (MalformedSourceError, StationIOError) as e:
                fallback = self._fallback_for(e.path)
                logger.warning("Cannot build combined database (%s), using %s", e, fallback)
                return fallback

        if has_base:
            logger.debug("Using base database only: %s", self.config.base_path)
            return self.config.base_path

        if has_user:
            logger.debug("Using user database only: %s", self.config.user_path)
            return self.config.user_path

        raise NoDatabaseError(self.config.base_path, self.config.user_path)

    def _fallback_for(self, broken) -> Path:
        if broken == self.config.base_path:
            return self.config.user_path
        return self.config.base_path

    def lost_combined(self, path: Path) -> bool:
        """True when ``path`` is the combined file and it has gone missing."""
        return path == self.config.combined_path and not is_present(path)

    def load_effective(self) -> List[dict]:
        path = self.resolve()
        try:
            return read_stations(path)
        except StationIOError:
            # another process may have invalidated the cache after resolve()
            if not self.lost_combined(path):
                raise

        logger.warning(
            "Combined database %s disappeared, merging sources in memory", path
        )
        return merge_stations(
            read_stations(self.config.base_path),
            read_stations(self.config.user_path),
        )
