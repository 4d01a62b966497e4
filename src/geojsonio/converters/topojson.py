"""
TopoJSON converter: resolves shared arcs back into GeoJSON coordinates.
"""

import json
from pathlib import Path
from typing import Any

from geojsonio.converters.base import BaseConverter, ConversionResult
from geojsonio.converters.registry import register_converter
from geojsonio.exceptions import InvalidGeoJSON

Arc = list[list[float]]
Transform = dict[str, Any] | None


@register_converter
class TopoJSONConverter(BaseConverter):
    """Converter for TopoJSON files."""

    format_name = "TopoJSON"
    file_extensions = [".topojson"]
    mime_types = ["application/topojson+json"]
    requires_packages: list[str] = []

    def convert(
        self,
        source: str | Path | dict[str, Any],
        object_name: str | None = None,
        **options: Any,
    ) -> ConversionResult:
        """
        Convert one object of a TopoJSON topology to a FeatureCollection.

        Args:
            source: File path or TopoJSON dictionary.
            object_name: Object to convert. If None, converts the first one.
            **options: Not used for TopoJSON.

        Returns:
            ConversionResult with the GeoJSON data.
        """
        warnings: list[str] = []

        if isinstance(source, dict):
            topology = source
        else:
            self.validate_source(source)
            with open(source, encoding="utf-8") as f:
                topology = json.load(f)

        if topology.get("type") != "Topology":
            raise InvalidGeoJSON("Input is not a valid TopoJSON (missing 'Topology' type)")

        objects = topology.get("objects") or {}
        if not objects:
            raise InvalidGeoJSON("TopoJSON contains no objects")

        if object_name:
            if object_name not in objects:
                raise InvalidGeoJSON(
                    f"Object '{object_name}' not found in TopoJSON. "
                    f"Available: {', '.join(objects)}"
                )
        else:
            object_name = next(iter(objects))
            if len(objects) > 1:
                warnings.append(
                    f"Multiple objects found, using '{object_name}'. "
                    f"Available: {', '.join(objects)}"
                )

        decoder = _ArcDecoder(topology.get("arcs", []), topology.get("transform"))
        obj = objects[object_name]
        members = obj.get("geometries", [obj]) if obj.get("type") == "GeometryCollection" else [obj]

        features = []
        for member in members:
            feature: dict[str, Any] = {
                "type": "Feature",
                "geometry": decoder.geometry(member),
                "properties": member.get("properties") or {},
            }
            if "id" in member:
                feature["id"] = member["id"]
            features.append(feature)

        return ConversionResult(
            geojson={"type": "FeatureCollection", "features": features},
            source_format="TopoJSON",
            feature_count=len(features),
            warnings=warnings,
            metadata={"source_object": object_name},
        )


class _ArcDecoder:
    """Decodes delta-encoded, optionally quantized arcs of one topology."""

    def __init__(self, arcs: list[list[list[int]]], transform: Transform) -> None:
        self._arcs = arcs
        self._transform = transform
        self._cache: dict[int, Arc] = {}

    def geometry(self, geometry: dict[str, Any]) -> dict[str, Any] | None:
        geom_type = geometry.get("type")

        if geom_type is None or geom_type == "null":
            return None
        if geom_type == "Point":
            return {"type": "Point", "coordinates": self._point(geometry.get("coordinates", []))}
        if geom_type == "MultiPoint":
            return {
                "type": "MultiPoint",
                "coordinates": [self._point(c) for c in geometry.get("coordinates", [])],
            }
        if geom_type == "LineString":
            return {"type": "LineString", "coordinates": self._line(geometry.get("arcs", []))}
        if geom_type == "MultiLineString":
            return {
                "type": "MultiLineString",
                "coordinates": [self._line(a) for a in geometry.get("arcs", [])],
            }
        if geom_type == "Polygon":
            return {
                "type": "Polygon",
                "coordinates": [self._line(ring) for ring in geometry.get("arcs", [])],
            }
        if geom_type == "MultiPolygon":
            return {
                "type": "MultiPolygon",
                "coordinates": [
                    [self._line(ring) for ring in polygon] for polygon in geometry.get("arcs", [])
                ],
            }
        if geom_type == "GeometryCollection":
            return {
                "type": "GeometryCollection",
                "geometries": [self.geometry(g) for g in geometry.get("geometries", [])],
            }

        raise InvalidGeoJSON(f"Unknown TopoJSON geometry type: {geom_type}")

    def _line(self, arc_indices: list[int]) -> Arc:
        """Stitch arcs together, dropping the shared point between neighbours."""
        coordinates: Arc = []
        for index in arc_indices:
            arc = self._arc(~index if index < 0 else index)
            if index < 0:
                arc = arc[::-1]
            coordinates.extend(arc[1:] if coordinates else arc)
        return coordinates

    def _arc(self, index: int) -> Arc:
        if index not in self._cache:
            try:
                raw = self._arcs[index]
            except IndexError:
                raise InvalidGeoJSON(f"TopoJSON arc index {index} out of range") from None

            if self._transform is None:
                self._cache[index] = [[p[0], p[1]] for p in raw]
            else:
                x, y = 0, 0
                decoded = []
                for dx, dy, *_ in raw:
                    x += dx
                    y += dy
                    decoded.append(self._point([x, y]))
                self._cache[index] = decoded
        return self._cache[index]

    def _point(self, position: list[float]) -> list[float]:
        if self._transform is None:
            return [position[0], position[1]]
        sx, sy = self._transform.get("scale", [1, 1])
        tx, ty = self._transform.get("translate", [0, 0])
        return [position[0] * sx + tx, position[1] * sy + ty]
