from __future__ import annotations

import json
import os
import tempfile
import time
from pathlib import Path
from typing import List

from stationdb.core.errors import MalformedSourceError, StationIOError


def is_present(path: Path) -> bool:
    """A station file counts only when it exists and is non-empty."""
    try:
        return path.is_file() and path.stat().st_size > 0
    except OSError:
        return False


def mtime_ns(path: Path) -> int:
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return 0


def timestamp() -> str:
    return time.strftime("%Y%m%d_%H%M%S")


def read_stations(path: Path) -> List[dict]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise StationIOError(path, "file not found") from e
    except (OSError, UnicodeDecodeError) as e:
        raise StationIOError(path, f"cannot read ({e})") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedSourceError(path, f"invalid JSON at line {e.lineno}") from e

    if not isinstance(data, list):
        raise MalformedSourceError(path, "expected a JSON array of stations")
    return data


def dump_stations(stations: List[dict]) -> str:
    return json.dumps(stations, indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` so readers only ever see a whole file.

    The content goes to a unique temp file beside the target and is renamed
    into place. On failure the temp file is removed and the error re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def atomic_write_text(path: Path, text: str) -> None:
    atomic_write_bytes(path, text.encode("utf-8"))
