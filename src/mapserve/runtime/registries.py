# runtime/registries.py
from collections.abc import Callable
from typing import Any

from mapserve.app.protocols import Heuristic
from mapserve.config.models import (
    HeuristicGreatCircleModel,
    HeuristicUnion,
    HeuristicZeroModel,
)

HeuristicFactory = Callable[[HeuristicUnion, dict], Heuristic]

_heuristic_registry: dict[str, HeuristicFactory] = {}


# ------------------- A* heuristics ---------------------------


def register_heuristic(kind: str):
    def deco(fn: HeuristicFactory):
        _heuristic_registry[kind] = fn
        return fn

    return deco


def make_heuristic(cfg: HeuristicUnion, *, deps: dict[str, Any]) -> Heuristic:
    """
    deps must include:
      - 'graph': SpatialGraph  # heuristics measure against its coordinates
    """
    try:
        factory = _heuristic_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown heuristic kind {cfg.kind!r}") from None
    return factory(cfg, deps)


@register_heuristic("great_circle")
def _make_great_circle(cfg: HeuristicGreatCircleModel, deps):
    g = deps["graph"]
    weight = cfg.weight

    def h(node: int, goal: int) -> float:
        return weight * g.distance(node, goal)

    return h


@register_heuristic("zero")
def _make_zero(cfg: HeuristicZeroModel, deps):
    # plain Dijkstra
    def h(node: int, goal: int) -> float:
        return 0.0

    return h
