from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mapserve.domain.entities.geography import BoundingBox

# Highway classes routed over by default; everything else (footways, paths,
# rail, ...) is kept out of the graph by the record loader.
DEFAULT_HIGHWAYS = [
    "motorway",
    "trunk",
    "primary",
    "secondary",
    "tertiary",
    "unclassified",
    "residential",
    "living_street",
    "motorway_link",
    "trunk_link",
    "primary_link",
    "secondary_link",
    "tertiary_link",
]


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False


# ----------------- TILES ---------------------


class RootBoxModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    ullon: float = -122.2998046875
    ullat: float = 37.892195547244356
    lrlon: float = -122.2119140625
    lrlat: float = 37.82280243352756

    @model_validator(mode="after")
    def _check_orientation(self):
        if self.ullon >= self.lrlon:
            raise ValueError("root box needs ullon < lrlon")
        if self.ullat <= self.lrlat:
            raise ValueError("root box needs ullat > lrlat")
        return self

    def to_bbox(self) -> BoundingBox:
        return BoundingBox(self.ullon, self.ullat, self.lrlon, self.lrlat)


class TilesModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    root: RootBoxModel = Field(default_factory=RootBoxModel)
    tile_size: int = Field(256, gt=0)  # pixels per tile edge
    max_depth: int = Field(7, ge=0, le=20)


# ----------------- ROUTING ---------------------


class HeuristicGreatCircleModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["great_circle"] = "great_circle"
    # <= 1 keeps the estimate admissible
    weight: float = Field(1.0, gt=0.0, le=1.0)


class HeuristicZeroModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["zero"] = "zero"


HeuristicUnion = Annotated[
    HeuristicGreatCircleModel | HeuristicZeroModel,
    Field(discriminator="kind"),
]


class RoutingModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    heuristic: HeuristicUnion = Field(default_factory=HeuristicGreatCircleModel)
    max_expansions: int | None = Field(None, gt=0)
    workers: int = Field(4, ge=1)


# ----------------- INGEST ---------------------


class SyntheticModel(BaseModel):
    """Seeded random road network laid over the tile root box."""

    model_config = ConfigDict(extra="forbid")
    seed: int = 0
    n_nodes: int = Field(gt=0)
    k: int = Field(3, ge=1)  # neighbors linked per node
    n_ways: int = Field(8, ge=1)


class IngestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    highways: list[str] = Field(default_factory=lambda: list(DEFAULT_HIGHWAYS))
    synthetic: SyntheticModel | None = None

    @field_validator("highways", mode="before")
    @classmethod
    def _empty_to_default(cls, v):
        # YAML [] or null should mean "the default road classes"
        if v is None or (isinstance(v, (list, tuple)) and len(v) == 0):
            return list(DEFAULT_HIGHWAYS)
        return v


# ------------------------------------------------------------------


class ServiceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "mapserve"
    run_id: str = "local"
    log: LogModel = LogModel()
    tiles: TilesModel = Field(default_factory=TilesModel)
    routing: RoutingModel = Field(default_factory=RoutingModel)
    ingest: IngestModel = Field(default_factory=IngestModel)
