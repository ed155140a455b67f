import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from mapserve.config.models import HeuristicGreatCircleModel, HeuristicZeroModel
from mapserve.domain.entities.geography import BoundingBox
from mapserve.domain.graph import SpatialGraph
from mapserve.domain.routing.astar import PathFinder, Route, Unreachable, path_length
from mapserve.io.synthetic import random_network, stream
from mapserve.runtime.registries import make_heuristic

BOX = BoundingBox(-122.30, 37.89, -122.21, 37.82)
MILE_DEG = math.degrees(1.0 / 3963.0)  # one mile of longitude on the equator


def _finder(g: SpatialGraph, kind: str = "great_circle", **kw) -> PathFinder:
    cfg = HeuristicGreatCircleModel() if kind == "great_circle" else HeuristicZeroModel()
    return PathFinder(g, make_heuristic(cfg, deps={"graph": g}), **kw)


@pytest.fixture
def line_graph() -> SpatialGraph:
    # A - B - C - D along the equator, 1, 2 and 3 miles apart
    g = SpatialGraph()
    for nid, miles in [(1, 0), (2, 1), (3, 3), (4, 6)]:
        g.add_node(nid, miles * MILE_DEG, 0.0)
    g.add_adjacency(1, 2)
    g.add_adjacency(2, 3)
    g.add_adjacency(3, 4)
    return g


def test_line_graph_route(line_graph: SpatialGraph):
    res = _finder(line_graph).find(1, 4)
    assert isinstance(res, Route)
    assert res.reachable
    assert res.nodes == [1, 2, 3, 4]
    assert abs(res.distance - 6.0) < 1e-9
    assert abs(path_length(line_graph, res.nodes) - res.distance) < 1e-12


def test_route_prefers_shorter_detour_over_fewer_hops():
    g = SpatialGraph()
    g.add_node(1, 0.0, 0.0)
    g.add_node(2, 5 * MILE_DEG, 0.0)
    g.add_node(3, 2.5 * MILE_DEG, 4 * MILE_DEG)  # far off the straight line
    g.add_node(4, 2.5 * MILE_DEG, 0.1 * MILE_DEG)  # almost on it
    g.add_adjacency(1, 3)
    g.add_adjacency(3, 2)
    g.add_adjacency(1, 4)
    g.add_adjacency(4, 2)
    res = _finder(g).find(1, 2)
    assert res.nodes == [1, 4, 2]


def test_source_equals_destination(line_graph: SpatialGraph):
    res = _finder(line_graph).find(3, 3)
    assert res.nodes == [3]
    assert res.distance == 0.0


def test_disjoint_components_are_unreachable(line_graph: SpatialGraph):
    line_graph.add_node(10, 0.0, 1.0)
    line_graph.add_node(11, 0.0, 1.1)
    line_graph.add_adjacency(10, 11)
    res = _finder(line_graph).find(1, 11)
    assert isinstance(res, Unreachable)
    assert not res.reachable
    assert (res.source, res.destination, res.reason) == (1, 11, "disconnected")


def test_expansion_budget_gives_unreachable(line_graph: SpatialGraph):
    res = _finder(line_graph, max_expansions=1).find(1, 4)
    assert isinstance(res, Unreachable)
    assert res.reason == "budget_exceeded"


def test_astar_matches_dijkstra_on_random_networks():
    for seed in (21, 22, 23):
        g = SpatialGraph()
        random_network(g, seed=seed, n_nodes=150, bbox=BOX, k=2)
        g.clean()
        astar, dijkstra = _finder(g), _finder(g, "zero")
        ids = sorted(g.vertices())
        rng = stream(seed, "pairs")
        for _ in range(40):
            s, t = (ids[int(i)] for i in rng.integers(0, len(ids), size=2))
            a, d = astar.find(s, t), dijkstra.find(s, t)
            assert a.reachable == d.reachable
            if a.reachable:
                assert abs(a.distance - d.distance) < 1e-9
                assert a.nodes[0] == s and a.nodes[-1] == t
                assert abs(path_length(g, a.nodes) - a.distance) < 1e-9
                # heuristic prunes: never expands more than plain Dijkstra
                assert a.expanded <= d.expanded


def test_results_are_reproducible():
    g = SpatialGraph()
    random_network(g, seed=31, n_nodes=120, bbox=BOX)
    ids = sorted(g.vertices())
    f = _finder(g)
    first = [f.find(ids[0], t) for t in ids[1:30]]
    second = [f.find(ids[0], t) for t in ids[1:30]]
    assert first == second


def test_concurrent_queries_do_not_interfere():
    g = SpatialGraph()
    random_network(g, seed=41, n_nodes=200, bbox=BOX)
    f = _finder(g)
    ids = sorted(g.vertices())
    pairs = [(ids[i], ids[-1 - i]) for i in range(40)]
    serial = [f.find(s, t) for s, t in pairs]
    with ThreadPoolExecutor(max_workers=8) as pool:
        parallel = list(pool.map(lambda p: f.find(*p), pairs))
    assert parallel == serial
