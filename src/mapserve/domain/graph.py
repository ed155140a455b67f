# mapserve/domain/graph.py
import logging
from collections.abc import Iterable, KeysView

from mapserve.domain.entities.geography import (
    NamedLocation,
    Node,
    Way,
    great_circle_miles,
    initial_bearing,
)

log = logging.getLogger(__name__)


class NodeNotFound(KeyError):
    def __init__(self, node_id):
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"unknown node id {self.node_id!r}"


class SpatialGraph:
    """
    Undirected road graph held as id-keyed arenas of nodes, ways and named locations.

    Responsibilities:
      • Accept construction calls from an ingestion collaborator.
      • Drop isolated nodes once ingestion is complete (``clean``).
      • Answer adjacency, great-circle distance and bearing between node ids.
    Coordinates are WGS84 degrees; distances are miles.
    """

    def __init__(self):
        self._nodes: dict[int, Node] = {}
        self._ways: dict[int, Way] = {}
        self._locations: dict[int, NamedLocation] = {}
        self._names: dict[str, list[int]] = {}

    # ---------------- construction -----------------------

    def add_node(self, node_id: int, lon: float, lat: float) -> Node:
        node = Node(int(node_id), float(lon), float(lat))
        self._nodes[node.id] = node
        return node

    def add_way(
        self,
        way_id: int,
        name: str | None = None,
        highway: str | None = None,
        max_speed: str | None = None,
        nodes: Iterable[int] = (),
    ) -> Way:
        way = Way(int(way_id), name, highway, max_speed, tuple(int(n) for n in nodes))
        self._ways[way.id] = way
        return way

    def add_adjacency(self, a: int, b: int) -> None:
        na, nb = self._get(a), self._get(b)
        if na.id == nb.id:
            return
        na.adjacent.add(nb.id)
        nb.adjacent.add(na.id)

    def associate_node_with_way(self, node_id: int, way_id: int) -> None:
        node = self._get(node_id)
        if way_id not in self._ways:
            raise KeyError(f"unknown way id {way_id!r}")
        if way_id not in node.way_ids:
            node.way_ids.append(way_id)

    def register_location(self, name: str, location_id: int) -> None:
        self._names.setdefault(name, []).append(int(location_id))

    def add_location(self, location_id: int, lon: float, lat: float, name: str) -> NamedLocation:
        loc = NamedLocation(int(location_id), float(lon), float(lat), name)
        self._locations[loc.id] = loc
        self.register_location(name, loc.id)
        return loc

    def clean(self) -> int:
        """Remove every node without neighbors; returns how many were dropped."""
        isolated = [nid for nid, n in self._nodes.items() if not n.adjacent]
        for nid in isolated:
            del self._nodes[nid]
        log.debug("graph_clean", extra={"extra": {"removed": len(isolated), "kept": len(self)}})
        return len(isolated)

    # ---------------- queries -----------------------------

    def _get(self, node_id: int) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFound(node_id) from None

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def vertices(self) -> KeysView[int]:
        return self._nodes.keys()

    def node(self, node_id: int) -> Node:
        return self._get(node_id)

    def neighbors(self, node_id: int) -> frozenset[int]:
        return frozenset(self._get(node_id).adjacent)

    def lon(self, node_id: int) -> float:
        return self._get(node_id).lon

    def lat(self, node_id: int) -> float:
        return self._get(node_id).lat

    def way(self, way_id: int) -> Way:
        return self._ways[way_id]

    def ways(self) -> KeysView[int]:
        return self._ways.keys()

    def ways_of(self, node_id: int) -> list[int]:
        return self._get(node_id).way_ids

    def way_name(self, way_id: int) -> str | None:
        return self._ways[way_id].name

    def distance(self, v: int, w: int) -> float:
        a, b = self._get(v), self._get(w)
        return great_circle_miles(a.lon, a.lat, b.lon, b.lat)

    def bearing(self, v: int, w: int) -> float:
        a, b = self._get(v), self._get(w)
        return initial_bearing(a.lon, a.lat, b.lon, b.lat)

    # ---------------- named locations ---------------------

    def location_names(self) -> KeysView[str]:
        return self._names.keys()

    def locations_named(self, name: str) -> list[NamedLocation]:
        out = []
        for lid in self._names.get(name, ()):
            loc = self._locations.get(lid)
            if loc is None:
                # registered against a routing node rather than a stored location
                node = self._nodes.get(lid)
                if node is None:
                    continue
                loc = NamedLocation(node.id, node.lon, node.lat, name)
            out.append(loc)
        return out
