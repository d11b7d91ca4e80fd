import math

import pytest

from src.geo_attendance.geo_attendance.geofence.validator import (
    GeoFenceValidator,
    GeoPoint,
    haversine_distance_meters,
)

OFFICE = GeoPoint(22.298873262930066, 73.13129619568713)


def test_haversine_zero_for_same_point():
    assert haversine_distance_meters(OFFICE.latitude, OFFICE.longitude, OFFICE.latitude, OFFICE.longitude) == 0


def test_haversine_is_symmetric():
    a = (22.3, 73.13)
    b = (22.31, 73.2)

    assert haversine_distance_meters(*a, *b) == pytest.approx(haversine_distance_meters(*b, *a))


def test_haversine_one_degree_latitude():
    # ~111.19 km per degree on a 6371 km sphere
    assert haversine_distance_meters(0, 0, 1, 0) == pytest.approx(111_195, rel=1e-3)


@pytest.mark.parametrize(
    "lat, lon",
    [
        (OFFICE.latitude, OFFICE.longitude),
        (69.5123, 86.5812),
        (0.0, 0.0),
        (-45.0, 179.999),
    ],
)
def test_haversine_antipodal_points_do_not_raise(lat, lon):
    other_lon = lon - 180 if lon > 0 else lon + 180

    distance = haversine_distance_meters(lat, lon, -lat, other_lon)

    assert distance == pytest.approx(math.pi * 6_371_000, rel=1e-6)


def test_validator_office_antipode_is_outside():
    result = GeoFenceValidator(OFFICE, 100).check(-OFFICE.latitude, OFFICE.longitude - 180)

    assert result.within_radius is False
    assert result.distance == pytest.approx(math.pi * 6_371_000, rel=1e-6)


def test_validator_inside_office():
    result = GeoFenceValidator(OFFICE, 100).check(OFFICE.latitude, OFFICE.longitude)

    assert result.within_radius is True
    assert result.distance == 0
    assert result.radius == 100


def test_validator_radius_is_inclusive():
    lat, lon = OFFICE.latitude + 0.0005, OFFICE.longitude
    distance = haversine_distance_meters(lat, lon, OFFICE.latitude, OFFICE.longitude)

    assert GeoFenceValidator(OFFICE, distance).check(lat, lon).within_radius is True
    assert GeoFenceValidator(OFFICE, distance - 0.01).check(lat, lon).within_radius is False


def test_validator_far_away_fails():
    result = GeoFenceValidator(OFFICE, 100).check(OFFICE.latitude + 0.01, OFFICE.longitude)

    assert result.within_radius is False
    assert 1000 < result.distance < 1200
