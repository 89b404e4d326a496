from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import List, Optional

from stationdb.core.config import DatabaseConfig
from stationdb.core.errors import ExportError
from stationdb.core.log import get_logger
from stationdb.core.records import CSV_HEADER, csv_row
from stationdb.core.sources import SourceLocator
from stationdb.core.util import atomic_write_text, timestamp

logger = get_logger(__name__)

FORMATS = ("csv", "json")


def _records(stations: List) -> List[dict]:
    """Only JSON objects count as station records in an export."""
    return [st for st in stations if isinstance(st, dict)]


def render_csv(stations: List[dict]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for st in stations:
        writer.writerow(csv_row(st))
    return buf.getvalue()


def render_json(stations: List[dict]) -> str:
    return json.dumps(stations, indent=2, ensure_ascii=False) + "\n"


class Exporter:
    def __init__(self, config: DatabaseConfig, locator: SourceLocator):
        self.config = config
        self.locator = locator

    def default_path(self, fmt: str) -> Path:
        stem = f"stations_export_{timestamp()}"
        path = self.config.export_dir / f"{stem}.{fmt}"
        n = 1
        while path.exists():
            path = self.config.export_dir / f"{stem}_{n}.{fmt}"
            n += 1
        return path

    def _write(self, path: Path, text: str) -> None:
        try:
            atomic_write_text(path, text)
        except OSError as e:
            raise ExportError(path, f"export failed ({e})") from e

    def export_csv(self, output_path: Optional[Path] = None) -> int:
        stations = self.locator.load_effective()
        path = Path(output_path) if output_path else self.default_path("csv")

        rows = _records(stations)
        self._write(path, render_csv(rows))
        logger.info("Exported %d stations to %s", len(rows), path)
        return len(rows)

    def export_json(self, output_path: Optional[Path] = None) -> int:
        stations = self.locator.load_effective()
        path = Path(output_path) if output_path else self.default_path("json")

        rows = _records(stations)
        self._write(path, render_json(rows))
        logger.info("Exported %d stations to %s", len(rows), path)
        return len(rows)
