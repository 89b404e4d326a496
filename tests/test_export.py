import csv
import json

import pytest

from stationdb.core import util
from stationdb.core.errors import ExportError, MalformedSourceError, NoDatabaseError

from conftest import make_station, write_stations


def test_csv_export_header_rows_and_country_join(db, config, tmp_path) -> None:
    write_stations(
        config.base_path,
        [make_station("1", name="Alpha", countries=["US", "CA"]), {"stationId": "2"}],
    )
    out = tmp_path / "out.csv"

    result = db.export("csv", out)

    assert result.count == 2
    assert result.path == out
    lines = out.read_text().splitlines()
    assert lines[0] == "StationID,Name,CallSign,Quality,Countries,LogoURL"
    rows = list(csv.reader(lines[1:]))
    assert rows[0] == ["1", "Alpha", "K1", "HDTV", "US;CA", "https://logos.example/1.png"]
    assert rows[1] == ["2", "", "", "Unknown", "", ""]


def test_json_export_is_pretty_printed_passthrough(db, config, tmp_path) -> None:
    stations = [make_station("1"), make_station("2")]
    write_stations(config.base_path, stations)
    out = tmp_path / "out.json"

    assert db.exporter.export_json(out) == 2
    assert json.loads(out.read_text()) == stations
    assert out.read_text().startswith("[\n  {")


def test_default_paths_are_timestamped_and_unique(db, config) -> None:
    write_stations(config.base_path, [make_station("1")])

    first = db.export("csv")
    second = db.export("csv")

    assert first.path.name.startswith("stations_export_")
    assert first.path.suffix == ".csv"
    assert first.path != second.path
    assert first.path.parent == config.export_dir


def test_export_without_database_creates_nothing(db, tmp_path) -> None:
    out = tmp_path / "none.csv"
    with pytest.raises(NoDatabaseError):
        db.export("csv", out)
    assert not out.exists()


def test_export_of_malformed_source_fails(db, config, tmp_path) -> None:
    config.base_path.write_text("not json")
    out = tmp_path / "bad.json"
    with pytest.raises(MalformedSourceError):
        db.export("json", out)
    assert not out.exists()


def test_failed_write_leaves_no_output(db, config, tmp_path, monkeypatch) -> None:
    write_stations(config.base_path, [make_station("1")])
    out = tmp_path / "exports" / "fail.csv"

    def explode(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(util.os, "replace", explode)

    with pytest.raises(ExportError) as exc:
        db.export("csv", out)
    assert str(out) in str(exc.value)
    assert not out.exists()
    assert list(out.parent.iterdir()) == []


def test_unknown_format_is_rejected(db) -> None:
    with pytest.raises(ValueError):
        db.export("xml")


def test_json_and_csv_exports_agree_on_record_count(db, config, tmp_path) -> None:
    write_stations(config.base_path, [make_station("1"), "stray", 7, make_station("2")])

    csv_count = db.export("csv", tmp_path / "out.csv").count
    json_count = db.export("json", tmp_path / "out.json").count

    assert csv_count == json_count == 2
    assert [st["stationId"] for st in json.loads((tmp_path / "out.json").read_text())] == ["1", "2"]
