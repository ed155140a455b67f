import re
from dataclasses import dataclass
from enum import IntEnum

from mapserve.app.protocols import RoutingGraph

UNKNOWN_ROAD = "unknown road"


class Direction(IntEnum):
    START = 0
    STRAIGHT = 1
    SLIGHT_LEFT = 2
    SLIGHT_RIGHT = 3
    RIGHT = 4
    LEFT = 5
    SHARP_LEFT = 6
    SHARP_RIGHT = 7

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Direction.START: "Start",
    Direction.STRAIGHT: "Go straight",
    Direction.SLIGHT_LEFT: "Slight left",
    Direction.SLIGHT_RIGHT: "Slight right",
    Direction.LEFT: "Turn left",
    Direction.RIGHT: "Turn right",
    Direction.SHARP_LEFT: "Sharp left",
    Direction.SHARP_RIGHT: "Sharp right",
}
_BY_LABEL = {label: d for d, label in _LABELS.items()}

_PATTERN = re.compile(
    r"([a-zA-Z ]+?) on (.*) and continue for ([0-9.]+) miles\.", re.DOTALL
)


@dataclass(frozen=True)
class NavigationDirection:
    direction: Direction
    way: str
    distance: float  # miles

    def __str__(self) -> str:
        return f"{self.direction.label} on {self.way} and continue for {self.distance:.3f} miles."

    @classmethod
    def parse(cls, text: str) -> "NavigationDirection | None":
        """Inverse of str(); None for anything that is not a rendered direction."""
        m = _PATTERN.fullmatch(text)
        if m is None:
            return None
        direction = _BY_LABEL.get(m.group(1))
        if direction is None:
            return None
        try:
            distance = float(m.group(3))
        except ValueError:
            return None
        return cls(direction, m.group(2), distance)


def classify_turn(prev_bearing: float, cur_bearing: float) -> Direction:
    delta = cur_bearing - prev_bearing
    if delta > 180:
        delta -= 360
    elif delta <= -180:
        delta += 360

    if delta < -100:
        return Direction.SHARP_LEFT
    if delta < -30:
        return Direction.LEFT
    if delta < -15:
        return Direction.SLIGHT_LEFT
    if delta < 15:
        return Direction.STRAIGHT
    if delta < 30:
        return Direction.SLIGHT_RIGHT
    if delta < 100:
        return Direction.RIGHT
    return Direction.SHARP_RIGHT


class DirectionsGenerator:
    def __init__(self, graph: RoutingGraph):
        self.G = graph

    def way_name(self, u: int, v: int) -> str:
        """Name of the first way listed on u that v also belongs to; "" if none or unnamed."""
        ways_v = set(self.G.ways_of(v))
        for wid in self.G.ways_of(u):
            if wid in ways_v:
                return self.G.way_name(wid) or ""
        return ""

    def directions(self, route: list[int]) -> list[NavigationDirection]:
        if len(route) < 2:
            raise ValueError(f"a route needs at least two nodes, got {len(route)}")

        out: list[NavigationDirection] = []
        tag, name = Direction.START, self.way_name(route[0], route[1])
        dist = self.G.distance(route[0], route[1])

        for i in range(1, len(route) - 1):
            u, v = route[i], route[i + 1]
            nxt = self.way_name(u, v)
            if nxt != name:
                out.append(_record(tag, name, dist))
                tag = classify_turn(self.G.bearing(route[i - 1], u), self.G.bearing(u, v))
                name, dist = nxt, 0.0
            dist += self.G.distance(u, v)

        out.append(_record(tag, name, dist))
        return out


def _record(tag: Direction, name: str, dist: float) -> NavigationDirection:
    return NavigationDirection(tag, name or UNKNOWN_ROAD, dist)


def total_distance(directions: list[NavigationDirection]) -> float:
    return sum(d.distance for d in directions)
