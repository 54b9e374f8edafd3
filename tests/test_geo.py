import math

import pytest

from lfp.geo import distance_to_record, haversine_km, record_coords
from lfp.query import Center


def test_haversine_is_symmetric():
    a = (48.7758, 9.1829)
    b = (47.9990, 7.8421)
    assert haversine_km(*a, *b) == pytest.approx(haversine_km(*b, *a))


def test_haversine_same_point_is_zero():
    assert haversine_km(48.7, 9.0, 48.7, 9.0) == 0.0


def test_haversine_one_degree_latitude():
    assert haversine_km(48.0, 9.0, 49.0, 9.0) == pytest.approx(111.19, abs=0.01)


def test_haversine_out_of_range_inputs_do_not_raise():
    dist = haversine_km(200.0, 400.0, -95.0, 9.0)
    assert dist >= 0.0


def test_record_coords_requires_numbers():
    assert record_coords({"Latitude": 48.7, "Longitude": 9}) == (48.7, 9.0)
    assert record_coords({"Latitude": "48.7", "Longitude": 9.0}) is None
    assert record_coords({"Latitude": 48.7}) is None
    assert record_coords({"Latitude": True, "Longitude": 9.0}) is None


def test_distance_to_record_without_coords_is_none():
    center = Center(lat=48.7, lon=9.0)
    assert distance_to_record(center, {"Einrichtung": "x"}) is None
    assert distance_to_record(center, {"Latitude": 48.7, "Longitude": 9.0}) == 0.0


@pytest.mark.parametrize(
    "a, b",
    [
        ((84.647, -60.5908), (-84.647, 119.4092)),
        ((0.0, 0.0), (0.0, 180.0)),
        ((48.7758, 9.1829), (-48.7758, -170.8171)),
    ],
)
def test_haversine_antipodal_points_do_not_raise(a, b):
    assert haversine_km(*a, *b) == pytest.approx(math.pi * 6371.0, rel=1e-6)


def test_haversine_nan_input_stays_nan():
    assert math.isnan(haversine_km(math.nan, 9.0, 48.7, 9.0))
