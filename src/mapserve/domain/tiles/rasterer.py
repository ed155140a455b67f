import math
from dataclasses import dataclass, field

import numpy as np

from mapserve.domain.entities.geography import BoundingBox


@dataclass(frozen=True)
class RasterResult:
    render_grid: list[list[str]] = field(default_factory=list)
    raster_ul_lon: float = 0.0
    raster_ul_lat: float = 0.0
    raster_lr_lon: float = 0.0
    raster_lr_lat: float = 0.0
    depth: int = 0
    query_success: bool = False

    @classmethod
    def rejected(cls) -> "RasterResult":
        return cls()

    def as_dict(self) -> dict:
        return {
            "render_grid": self.render_grid,
            "raster_ul_lon": self.raster_ul_lon,
            "raster_ul_lat": self.raster_ul_lat,
            "raster_lr_lon": self.raster_lr_lon,
            "raster_lr_lat": self.raster_lr_lat,
            "depth": self.depth,
            "query_success": self.query_success,
        }


def tile_filename(depth: int, x: int, y: int) -> str:
    return f"d{depth}_x{x}_y{y}.png"


class TileSelector:
    """
    Picks the coarsest tile depth that is at least as fine as the requested
    lon-degrees-per-pixel, and the tiles at that depth intersecting the query box.

    At depth d the root box is cut into 2^d x 2^d tiles; x grows east, y grows south.
    """

    def __init__(self, root: BoundingBox, tile_size: int = 256, max_depth: int = 7):
        self.root, self.tile_size, self.max_depth = root, tile_size, max_depth

        dpp = [root.lon_span / tile_size]
        for _ in range(max_depth):
            dpp.append(dpp[-1] / 2)
        self.depth_lon_dpp: tuple[float, ...] = tuple(dpp)

        # tile boundaries per depth: corner + k * span / 2^d, k = 0..2^d
        self._lon_edges: list[np.ndarray] = []
        self._neg_lat_edges: list[np.ndarray] = []  # negated so both axes ascend
        for d in range(max_depth + 1):
            k = np.arange(2**d + 1, dtype=np.float64)
            self._lon_edges.append(root.ullon + k * (root.lon_span / 2**d))
            self._neg_lat_edges.append(-(root.ullat + k * (root.lat_span / 2**d)))

    def depth_for(self, requested_lon_dpp: float) -> int:
        for d, dpp in enumerate(self.depth_lon_dpp):
            if dpp <= requested_lon_dpp:
                return d
        return self.max_depth

    def _rejects(self, ullon, ullat, lrlon, lrlat, width) -> bool:
        if not all(math.isfinite(v) for v in (ullon, ullat, lrlon, lrlat, width)) or width <= 0:
            return True
        r = self.root
        return (
            lrlat >= r.ullat
            or lrlon <= r.ullon
            or ullat <= r.lrlat
            or ullon >= r.lrlon
            or ullon >= lrlon
            or ullat <= lrlat
        )

    def select(
        self, ullon: float, ullat: float, lrlon: float, lrlat: float, width: float
    ) -> RasterResult:
        if self._rejects(ullon, ullat, lrlon, lrlat, width):
            return RasterResult.rejected()

        depth = self.depth_for((lrlon - ullon) / width)
        n = 2**depth
        lon_edges, neg_lat_edges = self._lon_edges[depth], self._neg_lat_edges[depth]

        # number of boundaries at or before each requested edge, capped at n, minus one
        x_left = _window_index(lon_edges, ullon, n)
        x_right = _window_index(lon_edges, lrlon, n)
        y_upper = _window_index(neg_lat_edges, -ullat, n)
        y_lower = _window_index(neg_lat_edges, -lrlat, n)

        grid = [
            [tile_filename(depth, x, y) for x in range(x_left, x_right + 1)]
            for y in range(y_upper, y_lower + 1)
        ]
        lon_step = self.root.lon_span / n
        lat_step = self.root.lat_span / n
        return RasterResult(
            render_grid=grid,
            raster_ul_lon=self.root.ullon + x_left * lon_step,
            raster_ul_lat=self.root.ullat + y_upper * lat_step,
            raster_lr_lon=self.root.ullon + (x_right + 1) * lon_step,
            raster_lr_lat=self.root.ullat + (y_lower + 1) * lat_step,
            depth=depth,
            query_success=True,
        )


def _window_index(edges: np.ndarray, value: float, n: int) -> int:
    count = min(int(np.searchsorted(edges, value, side="right")), n)
    return count - 1 if count else 0
