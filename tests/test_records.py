import pytest

from stationdb.core.errors import NotFoundError
from stationdb.core.records import csv_row, detail_lines, station_countries

from conftest import make_station, write_stations


def test_detail_uses_defaults_for_missing_fields() -> None:
    assert detail_lines({}) == [
        "Name: N/A",
        "Call Sign: N/A",
        "Station ID: N/A",
        "Quality: Unknown",
        "Countries: Unknown",
        "Logo: None",
    ]


def test_empty_video_type_and_logo_fall_back() -> None:
    st = {"videoQuality": {"videoType": ""}, "preferredImage": {"uri": ""}}
    lines = detail_lines(st)
    assert "Quality: Unknown" in lines
    assert "Logo: None" in lines


def test_country_separator_differs_between_detail_and_csv() -> None:
    st = make_station("1", countries=["US", "CA"])
    assert station_countries(st) == "US, CA"
    assert csv_row(st)[4] == "US;CA"


def test_csv_row_defaults_are_empty() -> None:
    assert csv_row({}) == ["", "", "", "Unknown", "", ""]


def test_render_detail_is_stable(db, config) -> None:
    write_stations(config.base_path, [make_station("42", name="News 42", countries=["US", "CA"])])

    assert db.detail("42") == (
        "  Name: News 42\n"
        "  Call Sign: K42\n"
        "  Station ID: 42\n"
        "  Quality: HDTV\n"
        "  Countries: US, CA\n"
        "  Logo: https://logos.example/42.png"
    )


def test_lookup_missing_id_raises_not_found(db, config) -> None:
    write_stations(config.base_path, [make_station("1")])
    with pytest.raises(NotFoundError):
        db.lookup("nope")
    with pytest.raises(NotFoundError):
        db.detail("nope")


def test_lookup_after_rebuild_returns_matching_id(db, base_and_user) -> None:
    base, user = base_and_user
    db.rebuild()
    for st in base + user:
        assert db.lookup(st["stationId"])["stationId"] == st["stationId"]


def test_field_projections(db, config) -> None:
    write_stations(config.base_path, [make_station("1", name="Alpha"), {"stationId": "2"}])

    assert db.name("1") == "Alpha"
    assert db.call_sign("1") == "K1"
    assert db.name("2") is None
    assert db.call_sign("missing") is None
    with pytest.raises(ValueError):
        db.records.get_field("1", "logo")


def test_available_countries(db, base_and_user) -> None:
    assert db.countries() == ["CA", "US"]
