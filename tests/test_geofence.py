import pytest

from zones.geofence import bounding_box, haversine_meters, point_in_polygon

from conftest import HARARE, offset_north

SQUARE = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]


def test_haversine_zero_for_same_point():
    assert haversine_meters(HARARE, HARARE) == 0.0


@pytest.mark.parametrize("meters", [10, 500, 1000, 4999])
def test_haversine_matches_northward_offset(meters):
    """
    Moving due north by N meters must measure as N meters.
    """
    assert haversine_meters(HARARE, offset_north(HARARE, meters)) == pytest.approx(meters, rel=1e-6)


def test_haversine_one_degree_of_longitude_at_equator():
    assert haversine_meters((0.0, 0.0), (0.0, 1.0)) == pytest.approx(111_195, rel=1e-3)


def test_bounding_box_contains_the_circle():
    """
    Every point on the circle (north, south, east, west) lies inside the box.
    """
    min_lat, max_lat, min_lon, max_lon = bounding_box(HARARE, 2000)

    north = offset_north(HARARE, 2000)
    south = offset_north(HARARE, -2000)
    assert min_lat <= south[0] and north[0] <= max_lat

    # box is symmetric around the center
    assert (max_lon + min_lon) / 2 == pytest.approx(HARARE[1])
    # longitude degrees are shorter away from the equator, so the box is wider than tall
    assert max_lon - HARARE[1] > max_lat - HARARE[0]


def test_point_in_polygon_inside_and_outside():
    assert point_in_polygon((0.5, 0.5), SQUARE)
    assert not point_in_polygon((1.5, 0.5), SQUARE)
    assert not point_in_polygon((0.5, -0.1), SQUARE)


def test_point_in_polygon_concave_notch():
    """
    U-shaped zone: the notch between the arms is outside.
    """
    u_shape = [(0, 0), (0, 3), (3, 3), (3, 2), (1, 2), (1, 1), (3, 1), (3, 0)]
    assert point_in_polygon((0.5, 1.5), u_shape)
    assert not point_in_polygon((2.0, 1.5), u_shape)
    assert point_in_polygon((2.0, 2.5), u_shape)


def test_degenerate_boundary_contains_nothing():
    assert not point_in_polygon((0.0, 0.0), [(0.0, 0.0), (1.0, 1.0)])
