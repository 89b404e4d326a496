import json
import os

import pytest

from stationdb.core import util
from stationdb.core.errors import MalformedSourceError, NoDatabaseError, StationIOError
from stationdb.core.merge import MergeCache, merge_stations

from conftest import make_station, write_stations


def test_merge_keeps_base_record_and_unions_countries() -> None:
    base = [make_station("1", name="Alpha", countries=["US"])]
    user = [make_station("1", name="Alpha Override", countries=["CA", "US"])]

    merged = merge_stations(base, user)

    assert len(merged) == 1
    st = merged[0]
    assert st["name"] == "Alpha"
    assert st["availableIn"] == ["CA", "US"]
    assert st["multiCountry"] is True
    assert st["source"] == "combined"


def test_merge_keeps_first_lineup_trace_only() -> None:
    base = [make_station("1", lineupTracing=[{"lineupId": "A"}, {"lineupId": "B"}])]
    user = [make_station("1", lineupTracing=[{"lineupId": "C"}])]

    st = merge_stations(base, user)[0]

    assert st["lineupTracing"] == [{"lineupId": "A", "discoveredOrder": 1, "isPrimary": True}]


def test_merge_leaves_unique_records_untouched_and_sorts_by_name() -> None:
    base = [make_station("2", name="Zulu"), make_station("1", name="Bravo")]
    user = [make_station("3", name="Alpha")]

    merged = merge_stations(base, user)

    assert [st["name"] for st in merged] == ["Alpha", "Bravo", "Zulu"]
    assert "source" not in merged[0]


def test_merge_does_not_collapse_records_without_id() -> None:
    base = [{"name": "No ID"}, {"name": "No ID"}]
    assert len(merge_stations(base, [])) == 2


def test_rebuild_writes_combined_file(config, base_and_user) -> None:
    path = MergeCache(config).rebuild()

    assert path == config.combined_path
    data = json.loads(path.read_text())
    assert len(data) == 12


def test_rebuild_is_byte_identical_when_inputs_unchanged(config, base_and_user) -> None:
    cache = MergeCache(config)
    first = cache.rebuild().read_bytes()
    second = cache.rebuild().read_bytes()
    assert first == second


def test_rebuild_without_sources_raises_no_database(config) -> None:
    with pytest.raises(NoDatabaseError):
        MergeCache(config).rebuild()


def test_rebuild_rejects_legacy_format(config) -> None:
    write_stations(config.base_path, [make_station("1")])
    write_stations(config.user_path, [{"stationId": "2", "name": "Old", "country": "USA"}])

    with pytest.raises(MalformedSourceError) as exc:
        MergeCache(config).rebuild()
    assert str(config.user_path) in str(exc.value)


def test_rebuild_surfaces_malformed_json(config) -> None:
    write_stations(config.base_path, [make_station("1")])
    config.user_path.parent.mkdir(parents=True, exist_ok=True)
    config.user_path.write_text("[{broken")

    with pytest.raises(MalformedSourceError):
        MergeCache(config).rebuild()


def test_interrupted_rebuild_keeps_previous_combined_file(config, base_and_user, monkeypatch) -> None:
    cache = MergeCache(config)
    before = cache.rebuild().read_bytes()

    write_stations(config.user_path, [make_station("200", name="New")])

    def explode(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(util.os, "replace", explode)

    with pytest.raises(StationIOError):
        cache.rebuild()

    assert config.combined_path.read_bytes() == before
    leftovers = [p for p in config.combined_path.parent.iterdir() if p.suffix == ".tmp"]
    assert leftovers == []


def test_invalidate_removes_file_and_is_noop_when_absent(config, base_and_user) -> None:
    cache = MergeCache(config)
    cache.rebuild()

    cache.invalidate()
    assert not config.combined_path.exists()

    cache.invalidate()
    assert not os.path.exists(config.combined_path)
