"""
Unit tests for scene frame building and tile footprints
"""

import os
import sys

import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.geo import lat_to_tile_y, local_position, lon_to_tile_x, tile_edge_meters
from common.types import BoundingVolume, GeoTag, ImageRecord, LocalPosition
from scene.frame import bounding_volume, build_frame, centroid
from scene.tiles import resolve_tiles


def rec(name, lat, lon, alt=0.0):
    return ImageRecord(tag=GeoTag(source_name=name, latitude=lat, longitude=lon, altitude_m=alt), blob=b"")


PARIS = [
    rec("a.jpg", 48.0 + 51 / 60 + 29.6 / 3600, 2.0 + 17 / 60 + 40.2 / 3600, 35.0),
    rec("b.jpg", 48.0 + 51 / 60 + 24.0 / 3600, 2.0 + 17 / 60 + 35.0 / 3600, 40.0),
]


class TestBuildFrame:
    """Origin, positions, bounds"""

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            build_frame([])

    def test_centroid_is_bbox_midpoint(self):
        recs = [rec("a", 10.0, 20.0), rec("b", 10.0, 20.0), rec("c", 14.0, 30.0)]
        assert centroid(recs) == (12.0, 25.0)

    def test_paris_two_points(self):
        f = build_frame(PARIS)
        assert f.origin.lat == pytest.approx(48.8576, abs=1e-3)
        assert f.origin.lng == pytest.approx(2.2945, abs=1e-3)
        a, b = f.positions["a.jpg"], f.positions["b.jpg"]
        assert a.y == 35.0 and b.y == 40.0
        assert a.x == pytest.approx(-b.x, abs=1e-6)
        assert a.z == pytest.approx(-b.z, rel=1e-3)
        # a is north-east of b
        assert a.x > 0 and a.z < 0
        assert f.dropped == ()

    def test_idempotent(self):
        assert build_frame(PARIS) == build_frame(PARIS)

    def test_order_independent(self):
        f1 = build_frame(PARIS)
        f2 = build_frame(list(reversed(PARIS)))
        assert f1.origin == f2.origin
        assert f1.bounds == f2.bounds
        assert dict(f1.positions) == dict(f2.positions)

    def test_single_record_zero_volume(self):
        f = build_frame([rec("only.jpg", -33.8568, 151.2153, 12.0)])
        p = f.positions["only.jpg"]
        assert f.bounds.min == p == f.bounds.max
        assert p.x == 0.0 and p.z == 0.0 and p.y == 12.0
        assert f.bounds.is_degenerate
        assert f.bounds.camera_distance(floor=50.0) == 50.0

    def test_bounds_enclose_all(self):
        f = build_frame(PARIS)
        for p in f.positions.values():
            assert f.bounds.min.x <= p.x <= f.bounds.max.x
            assert f.bounds.min.y <= p.y <= f.bounds.max.y
            assert f.bounds.min.z <= p.z <= f.bounds.max.z
        assert f.bounds.size[1] == 5.0

    def test_pole_latitude_dropped(self):
        f = build_frame(PARIS + [rec("pole.jpg", 90.0, 0.0)])
        assert "pole.jpg" not in f.positions
        assert f.dropped == ("pole.jpg",)
        assert f.origin == build_frame(PARIS).origin

    def test_only_pole_raises(self):
        with pytest.raises(ValueError):
            build_frame([rec("pole.jpg", 90.0, 0.0)])

    def test_positions_are_read_only(self):
        f = build_frame(PARIS)
        with pytest.raises(TypeError):
            f.positions["a.jpg"] = LocalPosition(0.0, 0.0, 0.0)
        with pytest.raises(TypeError):
            del f.positions["b.jpg"]
        assert set(f.positions) == {"a.jpg", "b.jpg"}


class TestBoundingVolume:
    def test_min_max(self):
        bv = bounding_volume([LocalPosition(1, 2, 3), LocalPosition(-1, 5, 0)])
        assert bv.min == LocalPosition(-1.0, 2.0, 0.0)
        assert bv.max == LocalPosition(1.0, 5.0, 3.0)
        assert bv.center == LocalPosition(0.0, 3.5, 1.5)

    def test_camera_distance_clamped(self):
        big = BoundingVolume(min=LocalPosition(-1e6, 0, -1e6), max=LocalPosition(1e6, 0, 1e6))
        assert big.camera_distance(ceiling=1000.0) == 1000.0


class TestResolveTiles:
    """Tile grid around the origin, in the same local frame"""

    def test_default_grid(self):
        origin = build_frame(PARIS).origin
        tiles = resolve_tiles(origin)
        assert len(tiles) == 25
        assert {t.zoom for t in tiles} == {19}
        cx, cy = lon_to_tile_x(origin.lng, 19), lat_to_tile_y(origin.lat, 19)
        assert {t.tile_x for t in tiles} == set(range(cx - 2, cx + 3))
        assert {t.tile_y for t in tiles} == set(range(cy - 2, cy + 3))
        assert all(t.edge_m == tile_edge_meters(19) for t in tiles)

    @pytest.mark.parametrize("zoom,radius", [(19, 0), (17, 1), (12, 3)])
    def test_center_tile_contains_origin(self, zoom, radius):
        origin = build_frame(PARIS).origin
        tiles = resolve_tiles(origin, zoom=zoom, radius=radius)
        assert len(tiles) == (2 * radius + 1) ** 2
        center = next(
            t for t in tiles if t.tile_x == lon_to_tile_x(origin.lng, zoom) and t.tile_y == lat_to_tile_y(origin.lat, zoom)
        )
        half = center.edge_m / 2
        # origin is (0, 0, 0) in the local frame
        assert abs(center.center.x) <= half + 1e-6
        assert abs(center.center.z) <= half + 1e-6
        assert center.center.y == 0.0

    def test_points_fall_in_their_tiles(self):
        f = build_frame(PARIS)
        tiles = resolve_tiles(f.origin, zoom=19, radius=2)
        by_index = {(t.tile_x, t.tile_y): t for t in tiles}
        for r in PARIS:
            t = by_index[(lon_to_tile_x(r.tag.longitude, 19), lat_to_tile_y(r.tag.latitude, 19))]
            p = f.positions[r.name]
            assert abs(p.x - t.center.x) <= t.edge_m / 2 + 1e-6
            assert abs(p.z - t.center.z) <= t.edge_m / 2 + 1e-6

    def test_south_rows_have_larger_z(self):
        tiles = resolve_tiles(build_frame(PARIS).origin, zoom=19, radius=1)
        rows = sorted({t.tile_y for t in tiles})
        z_by_row = {y: next(t.center.z for t in tiles if t.tile_y == y) for y in rows}
        assert z_by_row[rows[0]] < z_by_row[rows[1]] < z_by_row[rows[2]]

    @pytest.mark.parametrize("zoom,radius", [(-1, 2), (31, 2), (19, -1)])
    def test_invalid_parameters(self, zoom, radius):
        with pytest.raises(ValueError):
            resolve_tiles(build_frame(PARIS).origin, zoom=zoom, radius=radius)

    def test_matches_local_position_convention(self):
        f = build_frame(PARIS)
        r = PARIS[0].tag
        assert f.positions[r.source_name] == local_position(r.latitude, r.longitude, r.altitude_m, f.origin)
