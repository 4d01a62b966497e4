"""
The geo list: the intermediate geographic value every conversion goes through.

A ``GeoList`` is a small immutable tree mirroring the GeoJSON object model.
Builders produce it, the serializer and ``to_mapping`` consume it, and the
reader parses GeoJSON back into it.
"""

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from numbers import Integral, Real
from typing import Any, Iterator, Mapping, Sequence

from geojsonio.exceptions import InvalidGeoJSON

COORDINATE_DEPTH = {
    "Point": 0,
    "MultiPoint": 1,
    "LineString": 1,
    "MultiLineString": 2,
    "Polygon": 2,
    "MultiPolygon": 3,
}
GEOMETRY_TYPES = tuple(COORDINATE_DEPTH) + ("GeometryCollection",)
GEOJSON_TYPES = GEOMETRY_TYPES + ("Feature", "FeatureCollection")

Position = tuple[float, ...]


def is_number(value: Any) -> bool:
    """Return True for real numbers, excluding booleans."""
    return isinstance(value, Real) and not isinstance(value, bool)


def _freeze_number(value: Any) -> int | float:
    if not is_number(value):
        raise InvalidGeoJSON(f"Coordinate value must be a number, got {value!r}")
    if isinstance(value, Integral):
        return int(value)
    number = float(value)
    if not math.isfinite(number):
        raise InvalidGeoJSON(f"Coordinate value must be finite, got {number}")
    return number


def freeze_coordinates(value: Any, depth: int) -> Any:
    """
    Convert nested coordinate sequences to nested tuples, checking the depth.

    Args:
        value: Nested sequence of numbers.
        depth: Required nesting depth above the position level.

    Returns:
        The same coordinates as nested tuples.

    Raises:
        InvalidGeoJSON: If the nesting or the positions are malformed.
    """
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InvalidGeoJSON(f"Coordinates must be a sequence, got {type(value).__name__}")

    if depth == 0:
        if len(value) < 2:
            raise InvalidGeoJSON(f"Position needs at least 2 numbers, got {list(value)!r}")
        return tuple(_freeze_number(v) for v in value)

    return tuple(freeze_coordinates(v, depth - 1) for v in value)


def close_ring(ring: Sequence[Sequence[float]]) -> list[Sequence[float]]:
    """Return the ring with its first position appended if it is open."""
    ring = list(ring)
    if ring and list(ring[0]) != list(ring[-1]):
        ring.append(ring[0])
    return ring


def _check_ring(ring: tuple[Position, ...]) -> None:
    if len(ring) < 4:
        raise InvalidGeoJSON(f"Polygon ring needs at least 4 positions, got {len(ring)}")
    if ring[0] != ring[-1]:
        raise InvalidGeoJSON("Polygon ring is not closed (first position != last position)")


def _check_line(line: tuple[Position, ...]) -> None:
    if len(line) < 2:
        raise InvalidGeoJSON(f"LineString needs at least 2 positions, got {len(line)}")


@dataclass(frozen=True)
class GeoList:
    """Immutable intermediate representation of a GeoJSON object."""

    kind: str
    """GeoJSON type name."""

    coordinates: Any = None
    """Nested tuples of numbers, for the six coordinate geometry kinds."""

    geometry: "GeoList | None" = None
    """Member geometry of a Feature (None is a null geometry)."""

    properties: Mapping[str, Any] | None = None
    """Feature attributes, as a read-only copy of the mapping given."""

    members: tuple["GeoList", ...] = ()
    """Features of a FeatureCollection or geometries of a GeometryCollection."""

    feature_id: Any = None
    """Optional Feature id."""

    source_type: str = field(default="", compare=False)
    """Category of the input this value was built from. Display only."""

    # Unhashable: properties and ids may hold lists and mappings.
    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        """Normalize containers and check the structural invariants."""
        kind = self.kind
        if kind not in GEOJSON_TYPES:
            raise InvalidGeoJSON(f"Invalid GeoJSON type: {kind!r}")

        if kind in COORDINATE_DEPTH:
            if self.coordinates is None:
                raise InvalidGeoJSON(f"{kind} requires coordinates")
            coords = freeze_coordinates(self.coordinates, COORDINATE_DEPTH[kind])
            if kind == "Polygon":
                for ring in coords:
                    _check_ring(ring)
            elif kind == "MultiPolygon":
                for polygon in coords:
                    for ring in polygon:
                        _check_ring(ring)
            elif kind == "LineString":
                _check_line(coords)
            elif kind == "MultiLineString":
                for line in coords:
                    _check_line(line)
            object.__setattr__(self, "coordinates", coords)
            return

        if kind == "Feature":
            if self.geometry is not None and not self.geometry.is_geometry:
                raise InvalidGeoJSON(f"Feature geometry cannot be a {self.geometry.kind}")
            object.__setattr__(self, "properties", MappingProxyType(dict(self.properties or {})))
            return

        members = tuple(self.members)
        if kind == "FeatureCollection":
            for member in members:
                if member.kind != "Feature":
                    raise InvalidGeoJSON(f"FeatureCollection member must be a Feature, got {member.kind}")
        else:
            for member in members:
                if not member.is_geometry:
                    raise InvalidGeoJSON(f"GeometryCollection member must be a geometry, got {member.kind}")
        object.__setattr__(self, "members", members)

    @property
    def is_geometry(self) -> bool:
        """Whether this value is a geometry (not a Feature or FeatureCollection)."""
        return self.kind in GEOMETRY_TYPES

    @property
    def feature_count(self) -> int:
        """Number of features (or geometries) this value represents."""
        if self.kind in ("FeatureCollection", "GeometryCollection"):
            return len(self.members)
        return 1

    def __iter__(self) -> Iterator["GeoList"]:
        """Iterate over collection members, or over this value alone."""
        if self.kind in ("FeatureCollection", "GeometryCollection"):
            return iter(self.members)
        return iter((self,))

    def with_source_type(self, source_type: str) -> "GeoList":
        """Return a copy tagged with the originating input category."""
        return replace(self, source_type=source_type)


def point(position: Sequence[float]) -> GeoList:
    return GeoList("Point", coordinates=position)


def feature(geometry: GeoList | None, properties: Mapping[str, Any] | None = None, feature_id: Any = None) -> GeoList:
    return GeoList("Feature", geometry=geometry, properties=properties, feature_id=feature_id)


def collection(kind: str, members: Sequence[GeoList]) -> GeoList:
    return GeoList(kind, members=tuple(members))
