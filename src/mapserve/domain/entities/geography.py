import math
from dataclasses import dataclass, field

EARTH_RADIUS_MI = 3963.0


# Core graph records; membership is expressed as id lists, never object refs
@dataclass
class Node:
    id: int
    lon: float
    lat: float
    adjacent: set[int] = field(default_factory=set)
    way_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class Way:
    id: int
    name: str | None = None
    highway: str | None = None
    max_speed: str | None = None
    nodes: tuple[int, ...] = ()


@dataclass(frozen=True)
class NamedLocation:
    id: int
    lon: float
    lat: float
    name: str

    def as_dict(self) -> dict:
        return {"id": self.id, "lon": self.lon, "lat": self.lat, "name": self.name}


@dataclass(frozen=True)
class BoundingBox:
    ullon: float
    ullat: float
    lrlon: float
    lrlat: float

    @property
    def lon_span(self) -> float:
        return self.lrlon - self.ullon

    @property
    def lat_span(self) -> float:
        return self.lrlat - self.ullat  # negative: lat decreases southward


def great_circle_miles(lon_v: float, lat_v: float, lon_w: float, lat_w: float) -> float:
    """Haversine distance in miles between two lon/lat points."""
    phi1 = math.radians(lat_v)
    phi2 = math.radians(lat_w)
    dphi = math.radians(lat_w - lat_v)
    dlambda = math.radians(lon_w - lon_v)

    a = math.sin(dphi / 2.0) * math.sin(dphi / 2.0)
    a += math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2.0) * math.sin(dlambda / 2.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MI * c


def initial_bearing(lon_v: float, lat_v: float, lon_w: float, lat_w: float) -> float:
    """Initial great-circle bearing from v to w in degrees, in (-180, 180]."""
    phi1 = math.radians(lat_v)
    phi2 = math.radians(lat_w)
    lambda1 = math.radians(lon_v)
    lambda2 = math.radians(lon_w)

    y = math.sin(lambda2 - lambda1) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2)
    x -= math.sin(phi1) * math.cos(phi2) * math.cos(lambda2 - lambda1)
    return math.degrees(math.atan2(y, x))
