# io/records.py
"""Feed already-parsed map records into a graph through its construction API.

Source-format parsing (OSM XML, PBF, ...) happens upstream; this module only
validates plain mappings and applies the road-class filter. Malformed records
are skipped and counted, never half-applied.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mapserve.app.protocols import GraphSink
from mapserve.config.models import DEFAULT_HIGHWAYS

log = logging.getLogger(__name__)


class NodeRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: int
    lon: float = Field(ge=-180.0, le=180.0)
    lat: float = Field(ge=-90.0, le=90.0)


class WayRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: int
    nodes: list[int] = Field(min_length=2)
    name: str | None = None
    highway: str | None = None
    maxspeed: str | None = None


class LocationRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: int
    lon: float = Field(ge=-180.0, le=180.0)
    lat: float = Field(ge=-90.0, le=90.0)
    name: str = Field(min_length=1)


@dataclass
class LoadReport:
    nodes: int = 0
    ways: int = 0
    locations: int = 0
    skipped: int = 0


def _validated(model: type[BaseModel], rows: Iterable[Mapping], report: LoadReport):
    for row in rows:
        try:
            yield model.model_validate(row)
        except ValidationError as exc:
            report.skipped += 1
            log.warning(
                "record_skipped",
                extra={"extra": {"record": model.__name__, "errors": exc.error_count()}},
            )


def load_records(
    graph: GraphSink,
    payload: Mapping,
    *,
    highways: Iterable[str] = DEFAULT_HIGHWAYS,
) -> LoadReport:
    """
    payload = {"nodes": [...], "ways": [...], "locations": [...]}

    Ways whose highway class is not in `highways`, or that reference a node
    missing from `nodes`, contribute no edges.
    """
    allowed = set(highways)
    report = LoadReport()

    known: set[int] = set()
    for rec in _validated(NodeRecord, payload.get("nodes", ()), report):
        graph.add_node(rec.id, rec.lon, rec.lat)
        known.add(rec.id)
        report.nodes += 1

    for rec in _validated(WayRecord, payload.get("ways", ()), report):
        if rec.highway not in allowed:
            continue
        missing = [n for n in rec.nodes if n not in known]
        if missing:
            report.skipped += 1
            log.warning(
                "way_skipped", extra={"extra": {"way_id": rec.id, "missing_nodes": missing[:5]}}
            )
            continue
        graph.add_way(rec.id, rec.name, rec.highway, rec.maxspeed, rec.nodes)
        for a, b in zip(rec.nodes, rec.nodes[1:]):
            graph.add_adjacency(a, b)
        for n in dict.fromkeys(rec.nodes):
            graph.associate_node_with_way(n, rec.id)
        report.ways += 1

    for rec in _validated(LocationRecord, payload.get("locations", ()), report):
        graph.add_location(rec.id, rec.lon, rec.lat, rec.name)
        report.locations += 1

    return report
