from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

from mapserve.domain.entities.geography import NamedLocation

Heuristic = Callable[[int, int], float]


# ------------- Graph construction --------------------
@runtime_checkable
class GraphSink(Protocol):
    """
    Construction surface the ingestion collaborator writes into.
    Adjacency is undirected: one add_adjacency call links both ends.
    """

    def add_node(self, node_id: int, lon: float, lat: float): ...
    def add_way(
        self,
        way_id: int,
        name: str | None = None,
        highway: str | None = None,
        max_speed: str | None = None,
        nodes: Iterable[int] = (),
    ): ...
    def add_adjacency(self, a: int, b: int) -> None: ...
    def associate_node_with_way(self, node_id: int, way_id: int) -> None: ...
    def register_location(self, name: str, location_id: int) -> None: ...
    def add_location(self, location_id: int, lon: float, lat: float, name: str): ...


Ingestor = Callable[[GraphSink], None]


# ------------- Read-only views used by queries --------------------
@runtime_checkable
class RoutingGraph(Protocol):
    """
    Responsibilities:
      • Enumerate and look up node ids.
      • Great-circle distance (miles) and initial bearing (degrees) between nodes.
      • Way membership for naming the road an edge runs along.
    """

    def vertices(self) -> Iterable[int]: ...
    def neighbors(self, node_id: int) -> Iterable[int]: ...
    def distance(self, v: int, w: int) -> float: ...
    def bearing(self, v: int, w: int) -> float: ...
    def ways_of(self, node_id: int) -> list[int]: ...
    def way_name(self, way_id: int) -> str | None: ...


@runtime_checkable
class NearestNode(Protocol):
    def __len__(self) -> int: ...
    def nearest(self, lon: float, lat: float) -> int: ...


@runtime_checkable
class PlaceDirectory(Protocol):
    def location_names(self) -> Iterable[str]: ...
    def locations_named(self, name: str) -> list[NamedLocation]: ...
