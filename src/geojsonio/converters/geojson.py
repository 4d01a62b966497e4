"""
GeoJSON converter (native format, loaded and normalized).
"""

import json
from pathlib import Path
from typing import Any

from geojsonio.converters.base import BaseConverter, ConversionResult
from geojsonio.converters.registry import register_converter
from geojsonio.exceptions import InvalidGeoJSON
from geojsonio.geo_list import GEOMETRY_TYPES


@register_converter
class GeoJSONConverter(BaseConverter):
    """Converter for GeoJSON files."""

    format_name = "GeoJSON"
    file_extensions = [".geojson", ".json"]
    mime_types = ["application/geo+json", "application/json"]
    requires_packages: list[str] = []

    def convert(
        self,
        source: str | Path | dict[str, Any],
        **options: Any,
    ) -> ConversionResult:
        """
        Load GeoJSON and normalize it to a FeatureCollection.

        Args:
            source: File path or GeoJSON dictionary.
            **options: Not used for GeoJSON.

        Returns:
            ConversionResult with the GeoJSON data.
        """
        if isinstance(source, dict):
            geojson = source
        else:
            self.validate_source(source)
            with open(source, encoding="utf-8") as f:
                try:
                    geojson = json.load(f)
                except json.JSONDecodeError as e:
                    raise InvalidGeoJSON(f"{source} is not valid JSON: {e}") from e

        geojson, warnings = normalize_geojson(geojson)

        return ConversionResult(
            geojson=geojson,
            source_format="GeoJSON",
            feature_count=len(geojson["features"]),
            warnings=warnings,
        )


def normalize_geojson(geojson: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """
    Wrap any GeoJSON object in a FeatureCollection.

    Returns:
        Tuple of (FeatureCollection, warnings list).
    """
    warnings: list[str] = []
    geojson_type = geojson.get("type") if isinstance(geojson, dict) else None

    if geojson_type == "FeatureCollection":
        return geojson, warnings

    if geojson_type == "Feature":
        warnings.append("Wrapped single Feature in FeatureCollection")
        return {"type": "FeatureCollection", "features": [geojson]}, warnings

    if geojson_type in GEOMETRY_TYPES:
        warnings.append(f"Wrapped {geojson_type} geometry in FeatureCollection")
        return {
            "type": "FeatureCollection",
            "features": [{"type": "Feature", "geometry": geojson, "properties": {}}],
        }, warnings

    raise InvalidGeoJSON(f"Invalid GeoJSON type: {geojson_type}")
