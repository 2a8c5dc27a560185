import math

from dinewave.services.geo import Coordinate, distance_km, is_valid_coordinates

BENGALURU = (12.9716, 77.5946)


def test_is_valid_coordinates_bounds() -> None:
    assert is_valid_coordinates(0, 0)
    assert is_valid_coordinates(90, 180)
    assert is_valid_coordinates(-90, -180)
    assert not is_valid_coordinates(90.0001, 0)
    assert not is_valid_coordinates(0, -180.5)
    assert not is_valid_coordinates(None, 77.5)
    assert not is_valid_coordinates(12.9, None)
    assert not is_valid_coordinates(math.nan, 77.5)


def test_coordinate_validity_follows_helper() -> None:
    assert Coordinate(*BENGALURU).is_valid
    assert not Coordinate(None, None).is_valid


def test_distance_is_zero_for_same_point_and_symmetric() -> None:
    assert distance_km(*BENGALURU, *BENGALURU) == 0.0
    there = (13.0827, 80.2707)
    assert distance_km(*BENGALURU, *there) == distance_km(*there, *BENGALURU)


def test_distance_is_rounded_to_one_decimal() -> None:
    assert distance_km(BENGALURU[0], BENGALURU[1], BENGALURU[0] + 0.017986, BENGALURU[1]) == 2.0
    assert distance_km(BENGALURU[0], BENGALURU[1], BENGALURU[0] + 0.065650, BENGALURU[1]) == 7.3


def test_distance_bengaluru_to_chennai() -> None:
    assert 285 <= distance_km(12.9716, 77.5946, 13.0827, 80.2707) <= 295
