import math

import pytest

from mapserve.domain.entities.geography import BoundingBox
from mapserve.domain.tiles.rasterer import RasterResult, TileSelector, tile_filename

ROOT = BoundingBox(-122.2998046875, 37.892195547244356, -122.2119140625, 37.82280243352756)


@pytest.fixture
def selector() -> TileSelector:
    return TileSelector(ROOT, tile_size=256, max_depth=7)


def test_depth_table_halves(selector: TileSelector):
    assert len(selector.depth_lon_dpp) == 8
    assert selector.depth_lon_dpp[0] == (ROOT.lrlon - ROOT.ullon) / 256
    for a, b in zip(selector.depth_lon_dpp, selector.depth_lon_dpp[1:]):
        assert b == a / 2


def test_root_box_at_coarse_width_is_single_tile(selector: TileSelector):
    res = selector.select(ROOT.ullon, ROOT.ullat, ROOT.lrlon, ROOT.lrlat, 256)
    assert res.query_success
    assert res.depth == 0
    assert res.render_grid == [["d0_x0_y0.png"]]
    assert abs(res.raster_ul_lon - ROOT.ullon) < 1e-12
    assert abs(res.raster_ul_lat - ROOT.ullat) < 1e-12
    assert abs(res.raster_lr_lon - ROOT.lrlon) < 1e-12
    assert abs(res.raster_lr_lat - ROOT.lrlat) < 1e-12


def test_wider_viewport_than_needed_stays_at_depth_zero(selector: TileSelector):
    res = selector.select(ROOT.ullon, ROOT.ullat, ROOT.lrlon, ROOT.lrlat, 100)
    assert res.depth == 0


def test_root_box_at_double_width_is_two_by_two(selector: TileSelector):
    res = selector.select(ROOT.ullon, ROOT.ullat, ROOT.lrlon, ROOT.lrlat, 512)
    assert res.depth == 1
    assert res.render_grid == [
        ["d1_x0_y0.png", "d1_x1_y0.png"],
        ["d1_x0_y1.png", "d1_x1_y1.png"],
    ]


def test_box_overhanging_root_snaps_to_tiles(selector: TileSelector):
    res = selector.select(
        -122.30410170759153, 37.870213571328854, -122.2104604264636, 37.8318576119893, 1085
    )
    assert res.query_success
    assert res.depth == 2
    assert len(res.render_grid) == 3 and all(len(row) == 4 for row in res.render_grid)
    assert res.render_grid[0][0] == "d2_x0_y1.png"
    assert res.render_grid[-1][-1] == "d2_x3_y3.png"
    assert abs(res.raster_ul_lon - ROOT.ullon) < 1e-9
    assert abs(res.raster_lr_lon - ROOT.lrlon) < 1e-9
    assert abs(res.raster_ul_lat - 37.87484726881516) < 1e-9
    assert abs(res.raster_lr_lat - ROOT.lrlat) < 1e-9


def test_covering_box_contains_interior_request(selector: TileSelector):
    ullon, ullat, lrlon, lrlat = -122.27, 37.875, -122.25, 37.86
    res = selector.select(ullon, ullat, lrlon, lrlat, 600)
    assert res.query_success
    assert res.raster_ul_lon <= ullon < lrlon <= res.raster_lr_lon
    assert res.raster_lr_lat <= lrlat < ullat <= res.raster_ul_lat
    # one tile narrower on either side would no longer cover the request
    n = 2**res.depth
    step = (ROOT.lrlon - ROOT.ullon) / n
    assert res.raster_ul_lon + step > ullon
    assert res.raster_lr_lon - step < lrlon


def test_request_edge_on_tile_boundary_starts_that_tile(selector: TileSelector):
    mid_lon = ROOT.ullon + (ROOT.lrlon - ROOT.ullon) / 2
    res = selector.select(mid_lon, ROOT.ullat, ROOT.lrlon, ROOT.lrlat, 200)
    assert res.depth == 1
    assert [row[0] for row in res.render_grid] == ["d1_x1_y0.png", "d1_x1_y1.png"]


def test_tiny_box_clamps_to_max_depth(selector: TileSelector):
    # sits inside a single depth-7 tile
    res = selector.select(-122.26040, 37.87030, -122.26025, 37.87018, 1000)
    assert res.depth == 7
    assert res.render_grid == [["d7_x57_y40.png"]]


@pytest.mark.parametrize(
    "box,width",
    [
        ((-123.0, 37.85, -122.5, 37.84), 256),  # entirely west of root
        ((-122.25, 38.5, -122.24, 38.0), 256),  # entirely north
        ((-122.25, 37.5, -122.24, 37.4), 256),  # entirely south
        ((-122.1, 37.85, -122.0, 37.84), 256),  # entirely east
        ((-122.24, 37.85, -122.25, 37.84), 256),  # ullon >= lrlon
        ((-122.25, 37.84, -122.24, 37.85), 256),  # ullat <= lrlat
        ((-122.25, 37.85, -122.24, 37.84), 0),  # no viewport
        ((math.nan, 37.85, -122.24, 37.84), 256),
    ],
)
def test_rejected_queries_are_zeroed(selector: TileSelector, box, width):
    res = selector.select(*box, width)
    assert res == RasterResult.rejected()
    assert res.as_dict() == {
        "render_grid": [],
        "raster_ul_lon": 0.0,
        "raster_ul_lat": 0.0,
        "raster_lr_lon": 0.0,
        "raster_lr_lat": 0.0,
        "depth": 0,
        "query_success": False,
    }


def test_tile_filename():
    assert tile_filename(3, 5, 2) == "d3_x5_y2.png"
