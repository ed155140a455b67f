import heapq
import logging
import math
from dataclasses import dataclass, field
from typing import Literal

from mapserve.app.protocols import Heuristic, RoutingGraph

log = logging.getLogger(__name__)


@dataclass
class SearchContext:
    """Scratch state for one shortest-path query; never shared between calls."""

    cost: dict[int, float] = field(default_factory=dict)
    parent: dict[int, int] = field(default_factory=dict)
    visited: set[int] = field(default_factory=set)
    expanded: int = 0

    def g(self, node: int) -> float:
        return self.cost.get(node, math.inf)


@dataclass(frozen=True)
class Route:
    nodes: list[int]
    distance: float  # miles
    expanded: int = 0

    reachable = True


@dataclass(frozen=True)
class Unreachable:
    source: int | None  # None when the graph has no nodes to snap to
    destination: int | None
    reason: Literal["disconnected", "budget_exceeded"] = "disconnected"
    expanded: int = 0

    reachable = False


class PathFinder:
    """
    A* over an undirected graph. Priority is f = g + h; equal f is broken by the
    smaller node id so results do not depend on heap insertion history.
    """

    def __init__(
        self, graph: RoutingGraph, heuristic: Heuristic, *, max_expansions: int | None = None
    ):
        self.G, self.h, self.max_expansions = graph, heuristic, max_expansions

    def find(self, source: int, destination: int) -> Route | Unreachable:
        ctx = SearchContext()
        ctx.cost[source] = 0.0
        pq: list[tuple[float, int]] = [(self.h(source, destination), source)]

        while pq:
            _, v = heapq.heappop(pq)
            if v in ctx.visited:
                continue
            if v == destination:
                break
            ctx.visited.add(v)
            ctx.expanded += 1
            if self.max_expansions is not None and ctx.expanded > self.max_expansions:
                log.warning(
                    "search_budget_exceeded",
                    extra={
                        "extra": {
                            "source": source,
                            "destination": destination,
                            "expanded": ctx.expanded,
                        }
                    },
                )
                return Unreachable(source, destination, "budget_exceeded", ctx.expanded)
            self._relax(ctx, pq, v, destination)

        return self._reconstruct(ctx, source, destination)

    def _relax(self, ctx: SearchContext, pq: list, v: int, destination: int) -> None:
        gv = ctx.cost[v]
        for w in self.G.neighbors(v):
            gw = gv + self.G.distance(v, w)
            if gw < ctx.g(w):
                ctx.cost[w] = gw
                ctx.parent[w] = v
                heapq.heappush(pq, (gw + self.h(w, destination), w))

    def _reconstruct(self, ctx: SearchContext, source: int, destination: int) -> Route | Unreachable:
        path = [destination]
        cur = destination
        while cur != source:
            prev = ctx.parent.get(cur)
            if prev is None:
                return Unreachable(source, destination, "disconnected", ctx.expanded)
            path.append(prev)
            cur = prev
        path.reverse()
        return Route(path, ctx.cost[destination], ctx.expanded)


def path_length(graph: RoutingGraph, nodes: list[int]) -> float:
    return sum(graph.distance(u, v) for u, v in zip(nodes, nodes[1:]))
