# mapserve/app/service.py
import math
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from mapserve.app.protocols import NearestNode, PlaceDirectory
from mapserve.domain.indexes.trie import PrefixIndex
from mapserve.domain.routing.astar import PathFinder, Route, Unreachable
from mapserve.domain.routing.directions import DirectionsGenerator, NavigationDirection
from mapserve.domain.tiles.rasterer import RasterResult, TileSelector
from mapserve.io.hooks import NoopHooks, QueryHooks

Coords = tuple[float, float, float, float]


class MapService:
    """
    Serving-layer façade over the immutable indices built at startup.
    Every call allocates its own scratch state, so one instance can be shared by
    any number of worker threads.
    """

    def __init__(
        self,
        *,
        nearest: NearestNode,
        places: PlaceDirectory,
        prefix: PrefixIndex,
        path_finder: PathFinder,
        directions: DirectionsGenerator,
        tiles: TileSelector,
        hooks: QueryHooks | None = None,
        workers: int = 4,
    ):
        self.nearest, self.places, self.prefix = nearest, places, prefix
        self.path_finder, self.directions, self.tiles = path_finder, directions, tiles
        self.hooks = hooks or NoopHooks()
        self.workers = workers

    # ---------------- routing -----------------------

    def shortest_path(
        self, start_lon: float, start_lat: float, dest_lon: float, dest_lat: float
    ) -> Route | Unreachable:
        coords = (start_lon, start_lat, dest_lon, dest_lat)
        if not all(math.isfinite(c) for c in coords):
            self.hooks.error("route", reason="non_finite_coordinate", coords=list(coords))
            raise ValueError(f"non-finite coordinate in {coords!r}")
        t0 = time.perf_counter()
        self.hooks.query_start("route", coords=list(coords))
        if len(self.nearest) == 0:
            # nothing survived clean(), so no endpoint can be snapped
            result = Unreachable(None, None, "disconnected")
            self.hooks.query_end(
                "route", ms=(time.perf_counter() - t0) * 1000, unreachable=result.reason
            )
            return result
        src = self.nearest.nearest(start_lon, start_lat)
        dst = self.nearest.nearest(dest_lon, dest_lat)
        result = self.path_finder.find(src, dst)
        ms = (time.perf_counter() - t0) * 1000
        if isinstance(result, Route):
            self.hooks.query_end(
                "route",
                ms=ms,
                source=src,
                destination=dst,
                nodes=len(result.nodes),
                miles=round(result.distance, 3),
                expanded=result.expanded,
            )
        else:
            self.hooks.query_end(
                "route",
                ms=ms,
                source=src,
                destination=dst,
                unreachable=result.reason,
                expanded=result.expanded,
            )
        return result

    def route_directions(self, nodes: list[int]) -> list[NavigationDirection]:
        t0 = time.perf_counter()
        out = self.directions.directions(nodes)
        self.hooks.query_end(
            "directions", ms=(time.perf_counter() - t0) * 1000, steps=len(out)
        )
        return out

    def route_many(self, requests: Iterable[Coords]) -> list[Route | Unreachable]:
        """Run independent route queries on a worker pool; results keep request order."""
        reqs = list(requests)
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            return list(pool.map(lambda r: self.shortest_path(*r), reqs))

    # ---------------- search -----------------------

    def search_by_prefix(self, text: str) -> set[str]:
        t0 = time.perf_counter()
        out = self.prefix.query(text)
        self.hooks.query_end(
            "search_prefix", ms=(time.perf_counter() - t0) * 1000, prefix=text, hits=len(out)
        )
        return out

    def search_by_exact_name(self, name: str) -> list[dict]:
        t0 = time.perf_counter()
        out = [loc.as_dict() for loc in self.places.locations_named(name)]
        self.hooks.query_end(
            "search_exact", ms=(time.perf_counter() - t0) * 1000, name=name, hits=len(out)
        )
        return out

    # ---------------- tiles -----------------------

    def select_tiles(
        self, ullon: float, ullat: float, lrlon: float, lrlat: float, width: float
    ) -> RasterResult:
        t0 = time.perf_counter()
        out = self.tiles.select(ullon, ullat, lrlon, lrlat, width)
        extra = {"depth": out.depth, "success": out.query_success}
        if out.query_success:
            extra["rows"] = len(out.render_grid)
            extra["cols"] = len(out.render_grid[0])
        self.hooks.query_end("tiles", ms=(time.perf_counter() - t0) * 1000, **extra)
        return out

    def select_many(
        self, requests: Iterable[tuple[float, float, float, float, float]]
    ) -> list[RasterResult]:
        reqs = list(requests)
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            return list(pool.map(lambda r: self.select_tiles(*r), reqs))
