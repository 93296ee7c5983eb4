from __future__ import annotations

import pytest

from fleetcache.core.normalize import (
    INVALID_COORDINATES,
    MISSING_IDENTIFIER,
    Accepted,
    Rejected,
    dms_to_decimal,
    normalize_row,
    normalize_vehicle_key,
    to_float_safe,
)


def test_vehicle_key_canonicalization_is_consistent() -> None:
    assert normalize_vehicle_key(" d1mlc ") == "D1MLC"
    assert normalize_vehicle_key("D1MLC") == "D1MLC"
    assert normalize_vehicle_key('"d1 ml c"') == "D1MLC"
    assert normalize_vehicle_key(None) == ""


def test_row_with_mdeg_coordinates_is_accepted() -> None:
    result = normalize_row(
        {
            "objectname": " d1mlc ",
            "latitude_mdeg": "51507400",
            "longitude_mdeg": "-127800",
            "speed": "42.5",
            "course": "270",
            "pos_time": "19/10/2026 10:15:00",
        }
    )

    assert isinstance(result, Accepted)
    p = result.position
    assert p.vehicle_key == "D1MLC"
    assert p.lat == pytest.approx(51.5074)
    assert p.lng == pytest.approx(-0.1278)
    assert p.speed_kph == 42.5
    assert p.heading == 270.0
    assert p.pos_time == "19/10/2026 10:15:00"
    assert p.raw["objectname"] == " d1mlc "
    assert p.collected_at is None


def test_objectno_and_msgtime_fallbacks() -> None:
    result = normalize_row(
        {"objectno": "van 7", "latitude_mdeg": "1000000", "longitude_mdeg": "2000000", "msgtime": "t1"}
    )

    assert isinstance(result, Accepted)
    assert result.position.vehicle_key == "VAN7"
    assert result.position.pos_time == "t1"


def test_dms_coordinates_used_when_mdeg_absent() -> None:
    result = normalize_row(
        {"objectname": "A", "latitude": "51°30'26.4\"N", "longitude": "0°7'40.1\"W"}
    )

    assert isinstance(result, Accepted)
    assert result.position.lat == pytest.approx(51.5073, abs=1e-4)
    assert result.position.lng == pytest.approx(-0.12781, abs=1e-4)


def test_dms_southern_hemisphere_is_negative() -> None:
    assert dms_to_decimal("33°52'4\"S") == pytest.approx(-33.8678, abs=1e-4)
    assert dms_to_decimal("garbage") is None
    assert dms_to_decimal("") is None


@pytest.mark.parametrize(
    "raw",
    [
        {"latitude_mdeg": "1", "longitude_mdeg": "2"},
        {"objectname": "", "latitude_mdeg": "1", "longitude_mdeg": "2"},
        {"objectname": "  ", "objectno": "", "latitude_mdeg": "1", "longitude_mdeg": "2"},
    ],
)
def test_missing_identifier_is_rejected(raw: dict) -> None:
    assert normalize_row(raw) == Rejected(MISSING_IDENTIFIER)


@pytest.mark.parametrize(
    "raw",
    [
        {"objectname": "A"},
        {"objectname": "A", "latitude_mdeg": "abc", "longitude_mdeg": "2"},
        {"objectname": "A", "latitude_mdeg": "1", "longitude": "0°7'40.1\"W"},
        {"objectname": "A", "latitude": "north", "longitude": "west"},
        {"objectname": "A", "latitude_mdeg": "95000000", "longitude_mdeg": "0"},
        {"objectname": "A", "latitude_mdeg": "nan", "longitude_mdeg": "0"},
    ],
)
def test_unusable_coordinates_are_rejected(raw: dict) -> None:
    assert normalize_row(raw) == Rejected(INVALID_COORDINATES)


def test_malformed_optional_numbers_become_absent() -> None:
    result = normalize_row(
        {
            "objectname": "A",
            "latitude_mdeg": "1000000",
            "longitude_mdeg": "1000000",
            "speed": "fast",
            "course": "",
        }
    )

    assert isinstance(result, Accepted)
    assert result.position.speed_kph is None
    assert result.position.heading is None
    assert result.position.pos_time is None


def test_negative_speed_is_absent() -> None:
    result = normalize_row({"objectname": "A", "latitude_mdeg": "0", "longitude_mdeg": "0", "speed": "-3"})

    assert isinstance(result, Accepted)
    assert result.position.speed_kph is None


def test_digit_separators_are_not_numbers() -> None:
    assert to_float_safe("1_000") is None
    assert normalize_row({"objectname": "A", "latitude_mdeg": "1_000", "longitude_mdeg": "0"}) == Rejected(
        INVALID_COORDINATES
    )
    result = normalize_row({"objectname": "A", "latitude_mdeg": "0", "longitude_mdeg": "0", "speed": "1_0"})
    assert isinstance(result, Accepted)
    assert result.position.speed_kph is None
