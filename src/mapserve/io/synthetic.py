# io/synthetic.py
"""Reproducible random road networks, loaded by build() when `ingest.synthetic` is set."""

from __future__ import annotations

from zlib import crc32

import numpy as np

from mapserve.app.protocols import GraphSink
from mapserve.domain.entities.geography import BoundingBox

_STREET_WORDS = ["Oak", "Cedar", "Shattuck", "College", "Telegraph", "Ashby", "Dwight", "Euclid"]


def _u32(x: int) -> int:
    return int(x & 0xFFFFFFFF)


def stream(seed: int, name: str) -> np.random.Generator:
    """Named generator; the same (seed, name) always draws the same numbers."""
    ss = np.random.SeedSequence(entropy=[_u32(seed), _u32(crc32(name.encode("utf-8")))])
    return np.random.Generator(np.random.PCG64(ss))


def random_points(seed: int, n: int, bbox: BoundingBox) -> np.ndarray:
    """(n, 2) array of (lon, lat) drawn uniformly inside bbox."""
    rng = stream(seed, "points")
    lon = rng.uniform(bbox.ullon, bbox.lrlon, size=n)
    lat = rng.uniform(bbox.lrlat, bbox.ullat, size=n)
    return np.column_stack([lon, lat])


def random_network(
    graph: GraphSink,
    *,
    seed: int,
    n_nodes: int,
    bbox: BoundingBox,
    k: int = 3,
    n_ways: int = 8,
    first_id: int = 1,
) -> np.ndarray:
    """
    Fill `graph` with n_nodes random nodes, each linked to its k planar nearest
    neighbors. Every edge is assigned to one of n_ways named ways so directions
    have street changes to report. Returns the (n, 2) point array; node i has
    id first_id + i.
    """
    pts = random_points(seed, n_nodes, bbox)
    rng = stream(seed, "ways")
    ids = np.arange(first_id, first_id + n_nodes)

    for nid, (lon, lat) in zip(ids, pts):
        graph.add_node(int(nid), float(lon), float(lat))

    for w in range(n_ways):
        name = f"{_STREET_WORDS[w % len(_STREET_WORDS)]} {'St' if w % 2 else 'Ave'}"
        graph.add_way(first_id + w, name=name, highway="residential")

    if n_nodes < 2:
        return pts

    d2 = ((pts[:, None, :] - pts[None, :, :]) ** 2).sum(axis=-1)
    np.fill_diagonal(d2, np.inf)
    kk = min(k, n_nodes - 1)
    nearest = np.argsort(d2, axis=1, kind="stable")[:, :kk]
    for i in range(n_nodes):
        for j in nearest[i]:
            a, b = int(ids[i]), int(ids[j])
            graph.add_adjacency(a, b)
            way_id = first_id + int(rng.integers(0, n_ways))
            graph.associate_node_with_way(a, way_id)
            graph.associate_node_with_way(b, way_id)
    return pts
