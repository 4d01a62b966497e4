"""
Capability interface for pre-built spatial objects.

The builder never looks inside a geometry library's object model. It asks a
``SpatialAdapter`` for GeoJSON geometry mappings and, for attributed objects,
one attribute row per geometry.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from geojsonio.exceptions import InvalidGeoJSON, UnsupportedInputKind
from geojsonio.geo_list import GEOJSON_TYPES, GeoList
from geojsonio.serializer import to_mapping


class SpatialAdapter(ABC):
    """
    Narrow view of a spatial object.

    Implement this for spatial types that do not expose ``__geo_interface__``.
    """

    @abstractmethod
    def extract_coordinates(self) -> list[dict[str, Any] | None]:
        """
        Return one GeoJSON geometry mapping per member geometry.

        A member may be None for a feature without geometry.
        """

    @abstractmethod
    def extract_attributes(self) -> list[dict[str, Any]] | None:
        """
        Return one attribute row per member geometry.

        Returns None for plain geometries that carry no attribute table.
        """


class GeoInterfaceAdapter(SpatialAdapter):
    """
    Adapter for objects implementing the ``__geo_interface__`` protocol.

    Covers shapely geometries, geopandas GeoSeries/GeoDataFrames, pyshp shapes
    and records, fiona features, and plain GeoJSON mappings.
    """

    def __init__(self, obj: Any) -> None:
        if isinstance(obj, Mapping):
            geo = obj
        else:
            geo = getattr(obj, "__geo_interface__", None)
        if not isinstance(geo, Mapping):
            raise UnsupportedInputKind(type(obj).__name__, "no __geo_interface__ mapping")

        geo_type = geo.get("type")
        if geo_type not in GEOJSON_TYPES:
            raise InvalidGeoJSON(f"Invalid GeoJSON type: {geo_type!r}")
        self._geo = geo

    def extract_coordinates(self) -> list[dict[str, Any] | None]:
        geo = self._geo
        geo_type = geo["type"]

        if geo_type == "FeatureCollection":
            return [_as_dict(f.get("geometry")) for f in geo.get("features", [])]
        if geo_type == "Feature":
            return [_as_dict(geo.get("geometry"))]
        return [_as_dict(geo)]

    def extract_attributes(self) -> list[dict[str, Any]] | None:
        geo = self._geo
        geo_type = geo["type"]

        if geo_type == "FeatureCollection":
            return [dict(f.get("properties") or {}) for f in geo.get("features", [])]
        if geo_type == "Feature":
            return [dict(geo.get("properties") or {})]
        return None

    def extract_ids(self) -> list[Any]:
        """Return the feature ids, None where a feature has none."""
        geo = self._geo
        if geo["type"] == "FeatureCollection":
            return [f.get("id") for f in geo.get("features", [])]
        if geo["type"] == "Feature":
            return [geo.get("id")]
        return []


def _as_dict(geometry: Any) -> dict[str, Any] | None:
    if geometry is None:
        return None
    if not isinstance(geometry, Mapping):
        geometry = getattr(geometry, "__geo_interface__", None)
        if not isinstance(geometry, Mapping):
            raise InvalidGeoJSON("Feature geometry is not a GeoJSON mapping")
    return dict(geometry)


def as_spatial_adapter(obj: Any) -> SpatialAdapter:
    """Return ``obj`` itself if it is an adapter, else wrap its geo interface."""
    if isinstance(obj, SpatialAdapter):
        return obj
    return GeoInterfaceAdapter(obj)


def to_shapely(igv: GeoList) -> Any:
    """
    Convert a geo list to shapely geometry.

    Features yield their geometry and collections a ``GeometryCollection`` of
    their members' geometries. Null geometries are skipped.
    """
    from shapely.geometry import GeometryCollection, shape

    if igv.kind == "FeatureCollection":
        return GeometryCollection([to_shapely(f) for f in igv.members if f.geometry is not None])
    if igv.kind == "Feature":
        if igv.geometry is None:
            return GeometryCollection()
        return to_shapely(igv.geometry)
    return shape(to_mapping(igv))


def bounds(igv: GeoList) -> tuple[float, float, float, float] | None:
    """Return ``(minx, miny, maxx, maxy)`` of a geo list, or None if it is empty."""
    geometry = to_shapely(igv)
    if geometry.is_empty:
        return None
    return tuple(geometry.bounds)
