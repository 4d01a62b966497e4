"""
Shapefile converter backed by pyshp.
"""

import tempfile
import zipfile
from pathlib import Path
from typing import Any

from geojsonio.converters.base import BaseConverter, ConversionResult
from geojsonio.converters.registry import register_converter
from geojsonio.exceptions import InvalidGeoJSON


@register_converter
class ShapefileConverter(BaseConverter):
    """Converter for ESRI Shapefiles, bare or zipped."""

    format_name = "Shapefile"
    file_extensions = [".shp", ".zip"]
    mime_types = ["application/x-shapefile", "application/zip"]
    requires_packages = ["shapefile"]
    extra_name = "shapefile"

    def convert(
        self,
        source: str | Path | dict[str, Any],
        encoding: str = "utf-8",
        **options: Any,
    ) -> ConversionResult:
        """
        Convert a Shapefile to GeoJSON.

        Args:
            source: Path to a .shp file or a .zip bundle containing one.
            encoding: Character encoding of the .dbf attribute table.
            **options: Not used.

        Returns:
            ConversionResult with the GeoJSON data.
        """
        import shapefile

        path = Path(source)
        if path.suffix.lower() == ".zip":
            return self._convert_zip(path, encoding)

        self.validate_source(source)

        warnings: list[str] = []
        base = path.with_suffix("")
        if not base.with_suffix(".dbf").exists():
            warnings.append("Missing .dbf file - attributes may be empty")
        if not base.with_suffix(".prj").exists():
            warnings.append("Missing .prj file - assuming WGS84 (EPSG:4326)")

        features = []
        try:
            with shapefile.Reader(str(path), encoding=encoding) as sf:
                field_names = [f[0] for f in sf.fields[1:]]  # skip DeletionFlag
                for shape_record in sf.iterShapeRecords():
                    geometry = shape_record.shape.__geo_interface__
                    if geometry.get("type") is None:
                        warnings.append("Feature with null geometry skipped")
                        continue
                    features.append(
                        {
                            "type": "Feature",
                            "geometry": geometry,
                            "properties": dict(zip(field_names, shape_record.record)),
                        }
                    )
        except shapefile.ShapefileException as e:
            raise InvalidGeoJSON(f"Invalid shapefile {path.name}: {e}") from e

        return ConversionResult(
            geojson={"type": "FeatureCollection", "features": features},
            source_format="Shapefile",
            feature_count=len(features),
            warnings=warnings,
            metadata={"layer": base.name},
        )

    def _convert_zip(self, zip_path: Path, encoding: str) -> ConversionResult:
        """Extract a zipped shapefile bundle and convert its first layer."""
        if not zip_path.exists():
            raise FileNotFoundError(f"File not found: {zip_path}")

        with tempfile.TemporaryDirectory() as tmpdir:
            with zipfile.ZipFile(zip_path, "r") as zf:
                zf.extractall(tmpdir)

            shp_files = sorted(
                f for f in Path(tmpdir).rglob("*.shp") if "__MACOSX" not in f.parts
            )
            if not shp_files:
                raise InvalidGeoJSON(f"No .shp file found in {zip_path.name}")

            result = self.convert(shp_files[0], encoding=encoding)
            if len(shp_files) > 1:
                result.warnings.append(
                    f"{len(shp_files)} layers in archive, converted '{shp_files[0].stem}'"
                )
            return result
