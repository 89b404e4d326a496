from __future__ import annotations

from pathlib import Path


class StationDBError(Exception):
    """Base class for every failure the station database reports."""


class NoDatabaseError(StationDBError):
    def __init__(self, base_path: Path, user_path: Path):
        self.base_path = base_path
        self.user_path = user_path
        super().__init__(
            f"No station database available (looked for {base_path} and {user_path})"
        )


class NotFoundError(StationDBError):
    def __init__(self, station_id: str):
        self.station_id = station_id
        super().__init__(f"Station ID '{station_id}' not found in database")


class StationIOError(StationDBError):
    def __init__(self, path: Path | str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class MalformedSourceError(StationDBError):
    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed station file {path}: {reason}")


class ExportError(StationIOError):
    pass
