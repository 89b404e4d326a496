from __future__ import annotations

from typing import List, Optional

from stationdb.core.errors import NotFoundError
from stationdb.core.sources import SourceLocator

CSV_HEADER = ["StationID", "Name", "CallSign", "Quality", "Countries", "LogoURL"]

_FIELDS = ("name", "callSign")


# ------------------------------------------------------------
# Field formatting
# ------------------------------------------------------------

def _text(st: dict, key: str, default: str) -> str:
    value = st.get(key)
    if value is None or value == "":
        return default
    return str(value)


def station_quality(st: dict) -> str:
    vq = st.get("videoQuality") or {}
    value = vq.get("videoType") if isinstance(vq, dict) else None
    return str(value) if value else "Unknown"


def station_countries(st: dict, sep: str = ", ", empty: str = "Unknown") -> str:
    countries = [str(c) for c in (st.get("availableIn") or []) if c is not None]
    if len(countries) > 1:
        return sep.join(countries)
    if countries and countries[0]:
        return countries[0]
    return empty


def station_logo(st: dict, empty: str = "None") -> str:
    img = st.get("preferredImage") or {}
    uri = img.get("uri") if isinstance(img, dict) else None
    return str(uri) if uri else empty


def detail_lines(st: dict) -> List[str]:
    return [
        f"Name: {_text(st, 'name', 'N/A')}",
        f"Call Sign: {_text(st, 'callSign', 'N/A')}",
        f"Station ID: {_text(st, 'stationId', 'N/A')}",
        f"Quality: {station_quality(st)}",
        f"Countries: {station_countries(st)}",
        f"Logo: {station_logo(st)}",
    ]


def csv_row(st: dict) -> List[str]:
    return [
        _text(st, "stationId", ""),
        _text(st, "name", ""),
        _text(st, "callSign", ""),
        station_quality(st),
        station_countries(st, sep=";", empty=""),
        station_logo(st, empty=""),
    ]


# ------------------------------------------------------------
# Lookups
# ------------------------------------------------------------

class RecordAccessor:
    def __init__(self, locator: SourceLocator):
        self.locator = locator

    def get_by_id(self, station_id: str) -> Optional[dict]:
        for st in self.locator.load_effective():
            if not isinstance(st, dict) or st.get("stationId") is None:
                continue
            if str(st["stationId"]) == station_id:
                return st
        return None

    def get_field(self, station_id: str, field: str) -> Optional[str]:
        if field not in _FIELDS:
            raise ValueError(f"Unsupported station field: {field}")
        st = self.get_by_id(station_id)
        if st is None:
            return None
        value = st.get(field)
        return str(value) if value else None

    def render_detail(self, station_id: str) -> str:
        st = self.get_by_id(station_id)
        if st is None:
            raise NotFoundError(station_id)
        return "\n".join(f"  {line}" for line in detail_lines(st))

    def available_countries(self) -> List[str]:
        found = set()
        for st in self.locator.load_effective():
            if not isinstance(st, dict):
                continue
            for c in st.get("availableIn") or []:
                if isinstance(c, str) and c:
                    found.add(c)
        return sorted(found)
