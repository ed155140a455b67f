# mapserve/app/build.py
import time
from collections.abc import Mapping
from dataclasses import dataclass

from mapserve.app.protocols import Ingestor
from mapserve.app.service import MapService
from mapserve.config.models import ServiceModel
from mapserve.domain.graph import SpatialGraph
from mapserve.domain.indexes.kdtree import NearestNeighborIndex
from mapserve.domain.indexes.trie import PrefixIndex
from mapserve.domain.routing.astar import PathFinder
from mapserve.domain.routing.directions import DirectionsGenerator
from mapserve.domain.tiles.rasterer import TileSelector
from mapserve.io.hooks import NoopHooks
from mapserve.io.query_logging import QueryLogging
from mapserve.io.records import load_records
from mapserve.io.synthetic import random_network
from mapserve.runtime.registries import make_heuristic


@dataclass
class App:
    config: ServiceModel
    graph: SpatialGraph
    nearest: NearestNeighborIndex
    prefix: PrefixIndex
    path_finder: PathFinder
    directions: DirectionsGenerator
    tiles: TileSelector
    service: MapService


def build(
    cfg: ServiceModel | Mapping | None = None,
    *,
    ingest: Ingestor | None = None,
    records: Mapping | None = None,
    use_logging: bool = True,
) -> App:
    # 0) Validate config
    if cfg is None:
        model = ServiceModel()
    else:
        model = cfg if isinstance(cfg, ServiceModel) else ServiceModel.model_validate(cfg)

    hooks = (
        QueryLogging(run_id=model.run_id, level=model.log.level, debug=model.log.debug)
        if use_logging
        else NoopHooks()
    )
    t0 = time.perf_counter()
    hooks.build_start(name=model.name)

    # 1) Ingestion -> graph, then drop isolated nodes
    graph = SpatialGraph()
    if records is not None:
        load_records(graph, records, highways=model.ingest.highways)
    syn = model.ingest.synthetic
    if syn is not None:
        # ids continue past whatever the records already used
        first_id = max([*graph.vertices(), *graph.ways(), 0]) + 1
        random_network(
            graph,
            seed=syn.seed,
            n_nodes=syn.n_nodes,
            bbox=model.tiles.root.to_bbox(),
            k=syn.k,
            n_ways=syn.n_ways,
            first_id=first_id,
        )
    if ingest is not None:
        ingest(graph)
    removed = graph.clean()

    # 2) Indices over the cleaned graph
    nearest = NearestNeighborIndex.from_graph(graph)
    prefix = PrefixIndex.from_names(graph.location_names())

    # 3) Query engines
    heuristic = make_heuristic(model.routing.heuristic, deps={"graph": graph})
    path_finder = PathFinder(graph, heuristic, max_expansions=model.routing.max_expansions)
    directions = DirectionsGenerator(graph)
    tiles = TileSelector(
        model.tiles.root.to_bbox(),
        tile_size=model.tiles.tile_size,
        max_depth=model.tiles.max_depth,
    )

    service = MapService(
        nearest=nearest,
        places=graph,
        prefix=prefix,
        path_finder=path_finder,
        directions=directions,
        tiles=tiles,
        hooks=hooks,
        workers=model.routing.workers,
    )
    hooks.build_end(
        nodes=len(graph),
        removed=removed,
        locations=len(graph.location_names()),
        names=len(prefix),
        ms=(time.perf_counter() - t0) * 1000,
    )
    return App(model, graph, nearest, prefix, path_finder, directions, tiles, service)
