from dataclasses import dataclass

from mapserve.domain.graph import SpatialGraph

LON, LAT = 0, 1


@dataclass
class _KdNode:
    id: int
    point: tuple[float, float]  # (lon, lat)
    left: "_KdNode | None" = None
    right: "_KdNode | None" = None


class NearestNeighborIndex:
    """2-D KD-tree over (lon, lat); even depth splits on lon, odd depth on lat.

    Distances are planar squared degrees, which is only locally scale-correct but
    is what the snap-to-road lookup needs. No rebalancing: insertion order decides
    the shape, so both insert and search walk the tree without recursion.
    """

    def __init__(self):
        self._root: _KdNode | None = None
        self._size = 0

    @classmethod
    def from_graph(cls, graph: SpatialGraph) -> "NearestNeighborIndex":
        idx = cls()
        for nid in graph.vertices():
            idx.insert(nid, graph.lon(nid), graph.lat(nid))
        return idx

    def __len__(self) -> int:
        return self._size

    def insert(self, node_id: int, lon: float, lat: float) -> None:
        new = _KdNode(node_id, (lon, lat))
        self._size += 1
        if self._root is None:
            self._root = new
            return
        cur, depth = self._root, 0
        while True:
            axis = depth % 2
            if new.point[axis] < cur.point[axis]:
                if cur.left is None:
                    cur.left = new
                    return
                cur = cur.left
            else:
                if cur.right is None:
                    cur.right = new
                    return
                cur = cur.right
            depth += 1

    def nearest(self, lon: float, lat: float) -> int:
        if self._root is None:
            raise ValueError("nearest() on an empty index")
        q = (lon, lat)
        best_id, best_d = self._root.id, _sq_dist(self._root.point, q)

        # (node, depth, squared distance from q to the parent's splitting plane);
        # near child pushed last so it is searched first
        stack: list[tuple[_KdNode, int, float]] = [(self._root, 0, 0.0)]
        while stack:
            node, depth, plane = stack.pop()
            if plane >= best_d:
                continue
            d = _sq_dist(node.point, q)
            if d < best_d:
                best_id, best_d = node.id, d

            axis = depth % 2
            diff = q[axis] - node.point[axis]
            near, far = (node.left, node.right) if diff < 0 else (node.right, node.left)
            if far is not None:
                stack.append((far, depth + 1, diff * diff))
            if near is not None:
                stack.append((near, depth + 1, 0.0))
        return best_id


def _sq_dist(p: tuple[float, float], q: tuple[float, float]) -> float:
    dx, dy = p[LON] - q[LON], p[LAT] - q[LAT]
    return dx * dx + dy * dy
